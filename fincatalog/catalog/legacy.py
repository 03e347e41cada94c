# -*- coding: utf-8 -*-
"""
Legacy Catalog - Read-only store for the pre-SQLite catalog format.

The legacy format is a flat text file. The first line is the magic
``#DARWIN-OLDDB`` (optionally followed by a version), the second line a
JSON header carrying the catalog scheme, and each following line holds
one record as JSON, or ``null`` where a record was deleted. Image paths
may be relative to the folder holding the file.

Legacy catalogs are never written; they are opened only to be
converted into the current format.

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
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.models import (
    CatalogScheme,
    CatalogStatus,
    FinRecord,
    mods_from_text,
)


LEGACY_MAGIC = b"#DARWIN-OLDDB"


class LegacyCatalog:
    """Read-only view of a legacy flat-file catalog.

    The scheme (and so the category names) is only known once the file
    has been opened; read :attr:`scheme` after construction.

    Parameters
    ----------
    path : Path
        Path to the legacy catalog file.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path).absolute()
        self._scheme = CatalogScheme()
        self._slots: List[Optional[dict]] = []
        self._stream_open = False
        self._status = CatalogStatus.LOADED

        if not self._path.is_file():
            logger.warning("Legacy catalog not found: %s", self._path)
            self._status = CatalogStatus.FILE_NOT_FOUND
            return
        if not self.is_type(self._path):
            self._status = CatalogStatus.INVALID_FORMAT
            return

        try:
            self._load()
            self._stream_open = True
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(
                "Failed to load legacy catalog %s: %s", self._path, e
            )
            self._slots = []
            self._status = CatalogStatus.ERROR_OPENING

    @staticmethod
    def is_type(path: Union[str, Path]) -> bool:
        """True when ``path`` is a file starting with the legacy magic."""
        try:
            with open(path, 'rb') as f:
                return f.read(len(LEGACY_MAGIC)) == LEGACY_MAGIC
        except OSError:
            return False

    def _load(self) -> None:
        with open(self._path, 'r', encoding='utf-8') as f:
            lines = f.read().splitlines()

        header = json.loads(lines[1]) if len(lines) > 1 else {}
        if not isinstance(header, dict):
            raise ValueError(f"malformed legacy header: {lines[1]!r}")
        self._scheme = CatalogScheme(
            scheme_name=header.get('scheme_name', ''),
            category_names=header.get('categories', []),
        )
        self._slots = []
        for line in lines[2:]:
            if not line.strip():
                continue
            entry = json.loads(line)
            if entry is not None and not isinstance(entry, dict):
                raise ValueError(f"malformed legacy record: {line!r}")
            self._slots.append(entry)

        logger.info(
            "Loaded legacy catalog %s (%d slots, scheme %r)",
            self._path, len(self._slots), self._scheme.scheme_name,
        )

    # ------------------------------------------------------------------
    # Store interface
    # ------------------------------------------------------------------

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
        return len(self._slots)

    def size(self) -> int:
        return sum(1 for s in self._slots if s is not None)

    def get_item_absolute(self, index: int) -> Optional[FinRecord]:
        if index < 0 or index >= len(self._slots):
            return None
        entry = self._slots[index]
        if entry is None:
            return None
        return self._entry_to_record(entry)

    def get_item(self, index: int) -> Optional[FinRecord]:
        present = [s for s in self._slots if s is not None]
        if index < 0 or index >= len(present):
            return None
        return self._entry_to_record(present[index])

    def add(self, record: FinRecord) -> int:
        raise NotImplementedError(
            "Legacy catalogs are read-only; convert them first"
        )

    def open_stream(self) -> None:
        self._stream_open = True

    def close_stream(self) -> None:
        self._stream_open = False

    @property
    def stream_open(self) -> bool:
        return self._stream_open

    def close(self) -> None:
        self.close_stream()
        self._slots = []

    def _resolve(self, path: str) -> str:
        if not path or os.path.isabs(path):
            return path or ''
        return os.path.normpath(os.path.join(str(self._path.parent), path))

    def _entry_to_record(self, entry: dict) -> FinRecord:
        return FinRecord(
            id_code=entry.get('id_code', ''),
            name=entry.get('name', ''),
            damage_category=entry.get('damage_category', 'NONE'),
            image_filename=self._resolve(entry.get('image_filename', '')),
            original_image_filename=self._resolve(
                entry.get('original_image_filename', '')
            ),
            image_mods=mods_from_text(entry.get('image_mods', '')),
            fin_filename=entry.get('fin_filename', ''),
        )

    def __repr__(self) -> str:
        return f"LegacyCatalog({self.filename!r}, status={self._status.value})"
