# -*- coding: utf-8 -*-
"""
Survey Area Layout - Data root and survey-area folder management.

A data root holds every survey area and the backups folder::

    <data_root>/
    ├── backups/
    └── surveyAreas/
        └── <area>/
            ├── catalog/        # catalog .db file and its images
            ├── tracedFins/
            ├── matchQueues/
            ├── matchQResults/
            └── sightings/

Folders are only ever created, never removed or emptied. Failures to
create a folder are logged and reported through the returned flag.

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
import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


SURVEY_AREAS_FOLDER = "surveyAreas"
BACKUPS_FOLDER = "backups"
CATALOG_FOLDER = "catalog"
AREA_SUBFOLDERS = (
    CATALOG_FOLDER,
    "tracedFins",
    "matchQueues",
    "matchQResults",
    "sightings",
)


def _make_dir(path: Path) -> bool:
    """Create one folder level; False if it could not be created."""
    try:
        path.mkdir(exist_ok=True)
    except OSError as e:
        logger.error("Could not create folder %s: %s", path, e)
        return False
    return path.is_dir()


def ensure_data_root(path: Union[str, Path], create: bool = False) -> bool:
    """Check (and optionally create) a data root.

    Parameters
    ----------
    path : Union[str, Path]
        Data root folder.
    create : bool
        Create whichever of ``<path>``, ``<path>/surveyAreas`` and
        ``<path>/backups`` is missing. When False nothing is touched.

    Returns
    -------
    bool
        True if all three folders exist afterwards.
    """
    root = Path(path)
    if create:
        logger.info("Creating data root folder(s) under %s", root)

    for folder in (root, root / SURVEY_AREAS_FOLDER, root / BACKUPS_FOLDER):
        if folder.is_dir():
            continue
        if not create or not _make_dir(folder):
            return False
    return True


def survey_area_path(root: Union[str, Path], area: str) -> Path:
    """``<root>/surveyAreas/<area>``."""
    return Path(root) / SURVEY_AREAS_FOLDER / area


def reconcile_survey_area(
    root: Union[str, Path],
    area: str,
    force_create_all: bool = False,
) -> bool:
    """Build or repair the folder tree of a survey area.

    Parameters
    ----------
    root : Union[str, Path]
        Data root.
    area : str
        Survey-area name.
    force_create_all : bool
        True for a new area or an import: create the whole tree. False
        for a restore: create only the pieces that are missing. Both
        leave existing folders and their contents untouched.

    Returns
    -------
    bool
        True if the complete tree exists afterwards.
    """
    root = Path(root)
    area_path = survey_area_path(root, area)
    chain = [root / SURVEY_AREAS_FOLDER, area_path]
    chain += [area_path / sub for sub in AREA_SUBFOLDERS]

    if force_create_all:
        logger.info("Creating folders for survey area %r", area)
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Could not create data root %s: %s", root, e)
            return False
        for folder in chain:
            _make_dir(folder)
    else:
        for folder in chain:
            if not folder.is_dir():
                logger.info("Creating missing %r folder", folder.name)
                _make_dir(folder)

    return all(folder.is_dir() for folder in chain)


def rebuild_folders_for(catalog_path: Union[str, Path]) -> bool:
    """Reconcile the survey-area tree a catalog path belongs to.

    ``catalog_path`` is expected as
    ``<root>/surveyAreas/<area>/catalog/<name>.db``.
    """
    area_path = Path(catalog_path).absolute().parent.parent
    return reconcile_survey_area(
        area_path.parent.parent, area_path.name, force_create_all=False,
    )


def catalog_filename(
    root: Union[str, Path],
    name: str,
    area: str = "default",
) -> Path:
    """Canonical catalog path for ``name`` in ``area``.

    ``.db`` is appended when ``name`` does not already end with it.
    """
    filename = name or ""
    if not filename.lower().endswith(".db"):
        filename += ".db"
    return survey_area_path(root, area) / CATALOG_FOLDER / filename


def list_survey_areas(root: Union[str, Path]) -> List[str]:
    """Names of the survey areas under a data root (sorted)."""
    areas_dir = Path(root) / SURVEY_AREAS_FOLDER
    if not areas_dir.is_dir():
        return []
    return sorted(p.name for p in areas_dir.iterdir() if p.is_dir())


def list_catalog_names(root: Union[str, Path], area: str) -> List[str]:
    """File names of the catalogs in a survey area (sorted)."""
    catalog_dir = survey_area_path(root, area) / CATALOG_FOLDER
    if not catalog_dir.is_dir():
        return []
    return sorted(
        p.name for p in catalog_dir.iterdir()
        if p.is_file() and p.suffix.lower() == ".db"
    )
