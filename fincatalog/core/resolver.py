# -*- coding: utf-8 -*-
"""
Path Resolver - Locate the FinCatalog configuration file and data root.

The data root is resolved using a priority chain:
1. FINCATALOG_DATA_ROOT environment variable (highest priority)
2. ``data_root`` from the loaded configuration
3. ~/fincatalogData (default fallback)

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
import os
from pathlib import Path
from typing import Optional


_DATA_ROOT_ENV_VAR = "FINCATALOG_DATA_ROOT"
_CONFIG_ENV_VAR = "FINCATALOG_CONFIG"
_CONFIG_DIR = ".fincatalog"
_CONFIG_FILE = "config.json"
_DEFAULT_DATA_ROOT = "fincatalogData"


def resolve_config_path() -> Path:
    """Resolve the configuration file path.

    Priority:
    1. ``FINCATALOG_CONFIG`` environment variable
    2. ``~/.fincatalog/config.json`` (default)

    Returns
    -------
    Path
    """
    env_path = os.environ.get(_CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.home() / _CONFIG_DIR / _CONFIG_FILE


def resolve_data_root(configured: Optional[str] = None) -> Path:
    """Resolve the data root holding ``surveyAreas`` and ``backups``.

    Parameters
    ----------
    configured : Optional[str]
        ``data_root`` value from the configuration, if any.

    Returns
    -------
    Path
    """
    # Priority 1: Environment variable
    env_path = os.environ.get(_DATA_ROOT_ENV_VAR)
    if env_path:
        return Path(env_path)

    # Priority 2: Configuration
    if configured:
        return Path(configured)

    # Priority 3: Default location
    return Path.home() / _DEFAULT_DATA_ROOT
