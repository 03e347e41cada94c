# -*- coding: utf-8 -*-
"""
Configuration Module - Configurable defaults for FinCatalog.

Provides a CatalogConfig dataclass holding the data root, temporary
folder, default catalog scheme and archiver executable. Loads from
~/.fincatalog/config.json if it exists, otherwise uses defaults. The
configuration is passed explicitly to every lifecycle call.

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
import tempfile
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.models import CatalogScheme
from fincatalog.core.resolver import resolve_config_path, resolve_data_root


_DEFAULT_CATEGORIES = [
    "NONE",
    "Upper",
    "Middle",
    "Lower",
    "Upper-Middle",
    "Upper-Lower",
    "Middle-Lower",
    "Entire",
    "Leading Edge",
    "Tip-Nick",
    "Missing Tip",
    "Extended Tip",
]


@dataclass
class CatalogConfig:
    """FinCatalog configuration with defaults.

    Attributes
    ----------
    data_root : str
        Folder holding ``surveyAreas`` and ``backups``. Empty means
        resolve through :func:`fincatalog.core.resolver.resolve_data_root`.
    temp_dir : str
        Scratch folder for archive list files and finz packages. Empty
        means the system temporary folder.
    default_scheme_name : str
        Scheme used for newly created catalogs.
    default_categories : List[str]
        Damage categories of the default scheme.
    archiver_executable : str
        External archiver command.
    current_survey_area : str
        Survey area used when none is given.
    """

    data_root: str = ""
    temp_dir: str = ""
    default_scheme_name: str = "Eckerd"
    default_categories: List[str] = field(
        default_factory=lambda: list(_DEFAULT_CATEGORIES)
    )
    archiver_executable: str = "7z"
    current_survey_area: str = "default"

    def resolved_data_root(self) -> Path:
        """Data root after applying the resolver priority chain."""
        return resolve_data_root(self.data_root)

    def resolved_temp_dir(self) -> Path:
        """Configured temp folder, or the system one."""
        return Path(self.temp_dir or tempfile.gettempdir())

    def default_scheme(self) -> CatalogScheme:
        """Scheme applied to catalogs created from scratch."""
        return CatalogScheme(
            scheme_name=self.default_scheme_name,
            category_names=self.default_categories,
        )

    def save(self, path: Optional[Path] = None) -> None:
        """Save config to JSON file."""
        path = Path(path or resolve_config_path())
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(asdict(self), f, indent=2)


def load_config(path: Optional[Path] = None) -> CatalogConfig:
    """Load configuration from file, or return defaults.

    Parameters
    ----------
    path : Optional[Path]
        Config file path. Defaults to the resolved configuration path
        (``~/.fincatalog/config.json``).

    Returns
    -------
    CatalogConfig
        Loaded or default configuration.
    """
    path = Path(path or resolve_config_path())
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return CatalogConfig(**{
                k: v for k, v in data.items()
                if k in CatalogConfig.__dataclass_fields__
            })
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to load config from %s: %s", path, e)

    return CatalogConfig()
