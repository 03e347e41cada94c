# -*- coding: utf-8 -*-
"""
Invalid Catalog - Status-tagged placeholder for unopenable catalogs.

Returned in place of a real store when a path cannot be opened, so
callers check ``status`` instead of catching an exception.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

# Standard library
from pathlib import Path
from typing import Optional, Union

# FinCatalog internal
from fincatalog.catalog.models import CatalogScheme, CatalogStatus, FinRecord


class InvalidCatalog:
    """Empty catalog carrying the reason it could not be opened.

    Parameters
    ----------
    path : Path
        Path that was requested.
    status : CatalogStatus
        Why the path could not be opened.
    """

    def __init__(
        self,
        path: Union[str, Path],
        status: CatalogStatus = CatalogStatus.FILE_NOT_FOUND,
    ) -> None:
        self._path = Path(path).absolute()
        self._status = status
        self._scheme = CatalogScheme()

    @property
    def filename(self) -> str:
        return str(self._path)

    @property
    def status(self) -> CatalogStatus:
        return self._status

    @property
    def scheme(self) -> CatalogScheme:
        return self._scheme

    def size_absolute(self) -> int:
        return 0

    def size(self) -> int:
        return 0

    def get_item_absolute(self, index: int) -> Optional[FinRecord]:
        return None

    def get_item(self, index: int) -> Optional[FinRecord]:
        return None

    def add(self, record: FinRecord) -> int:
        raise RuntimeError(
            f"Cannot add to an unopened catalog ({self._status.value}): "
            f"{self._path}"
        )

    def open_stream(self) -> None:
        pass

    def close_stream(self) -> None:
        pass

    @property
    def stream_open(self) -> bool:
        return False

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"InvalidCatalog({self.filename!r}, status={self._status.value})"
