# -*- coding: utf-8 -*-
"""
Core Module - Catalog lifecycle logic for FinCatalog.

Contains configuration, survey-area folder layout, archive naming,
operation results, and the lifecycle orchestrator that composes them.

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
