# -*- coding: utf-8 -*-
"""
Format Detector - Classify a path as openable, convertible or unreadable.

Only the header bytes are read; no store is opened and nothing on disk
is modified.

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
from typing import Union

# FinCatalog internal
from fincatalog.catalog.database import FinCatalog
from fincatalog.catalog.legacy import LegacyCatalog
from fincatalog.catalog.models import CatalogStatus, OpenType


def classify(path: Union[str, Path]) -> OpenType:
    """Determine how ``path`` can be opened.

    Parameters
    ----------
    path : Union[str, Path]

    Returns
    -------
    OpenType
        ``OPENABLE`` for the current format, ``CONVERTIBLE`` for the
        legacy format, ``UNREADABLE`` otherwise (including a missing
        path or a directory).
    """
    if not Path(path).is_file():
        return OpenType.UNREADABLE
    if FinCatalog.is_type(path):
        return OpenType.OPENABLE
    if LegacyCatalog.is_type(path):
        return OpenType.CONVERTIBLE
    return OpenType.UNREADABLE


def describe_unopenable(path: Union[str, Path]) -> CatalogStatus:
    """Status to report for a path :func:`classify` rejected."""
    if Path(path).exists():
        return CatalogStatus.INVALID_FORMAT
    return CatalogStatus.FILE_NOT_FOUND
