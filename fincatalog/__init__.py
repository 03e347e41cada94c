# -*- coding: utf-8 -*-
"""
FinCatalog - Photo-identification catalog lifecycle toolkit.

Detects the on-disk format of fin catalogs, converts legacy catalogs,
duplicates them, and produces or restores portable archive snapshots
(backup, restore, export, import and single-fin "finz" packages)
without breaking the references between catalog records and the image
files they point at.

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

__version__ = "0.1.0"


def open_catalog(path, *, create_if_missing=False, config=None):
    """Open (or create) a catalog with a default lifecycle.

    Convenience wrapper around
    :meth:`fincatalog.core.lifecycle.CatalogLifecycle.open`.
    """
    from fincatalog.core.lifecycle import CatalogLifecycle
    return CatalogLifecycle(config=config).open(
        path, create_if_missing=create_if_missing,
    )


__all__: list = ["open_catalog"]
