# -*- coding: utf-8 -*-
"""
Catalog Module - Fin record stores, format detection and archives.

Provides the SQLite-backed current catalog format, the read-only legacy
store, the manifest builder, and the archive transfer helpers for full
catalogs and single-fin packages.

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
