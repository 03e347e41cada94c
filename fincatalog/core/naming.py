# -*- coding: utf-8 -*-
"""
Archive Naming - Backup file names, collision-free probing and renames.

Backups are named ``<area>_<catalog>_<Mon>_<DD>_<YYYY>.zip``. When that
name is taken, ``[2]``, ``[3]``, ... is appended to the stem until an
unused name is found. Probing only checks for existence; nothing is
created here.

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
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


# Locale-independent month abbreviations
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

BACKUPS_FOLDER = "backups"
LEGACY_TOKEN = "old"


def backup_filename(
    catalog_path: Union[str, Path],
    when: Optional[datetime] = None,
) -> str:
    """Compose the backup archive name for a catalog.

    The survey-area name is the catalog's parent-parent folder, as in
    ``<root>/surveyAreas/<area>/catalog/<name>.db``.

    Parameters
    ----------
    catalog_path : Union[str, Path]
        Catalog backing file.
    when : Optional[datetime]
        Date stamped into the name. Defaults to now.

    Returns
    -------
    str
        ``<area>_<catalogBase>_<Mon>_<DD>_<YYYY>.zip``
    """
    path = Path(catalog_path)
    when = when or datetime.now()
    area = path.parent.parent.name
    stamp = f"{_MONTHS[when.month - 1]}_{when.day:02d}_{when.year:04d}"
    return f"{area}_{path.stem}_{stamp}.zip"


def resolve_collision(candidate: Union[str, Path]) -> Path:
    """Return ``candidate`` or the first unused ``<stem>[n]<ext>``.

    Parameters
    ----------
    candidate : Union[str, Path]

    Returns
    -------
    Path
        ``candidate`` if it does not exist, otherwise the first of
        ``<stem>[2]<ext>``, ``<stem>[3]<ext>``, ... that does not.
    """
    candidate = Path(candidate)
    if not candidate.exists():
        return candidate

    suffix = candidate.suffix
    stem = candidate.name[:len(candidate.name) - len(suffix)]
    n = 2
    while True:
        probe = candidate.with_name(f"{stem}[{n}]{suffix}")
        if not probe.exists():
            return probe
        n += 1


def resolve_backup_name(
    catalog_path: Union[str, Path],
    data_root: Union[str, Path],
    when: Optional[datetime] = None,
) -> Path:
    """Collision-free backup path under ``<data_root>/backups``."""
    target = Path(data_root) / BACKUPS_FOLDER / backup_filename(
        catalog_path, when,
    )
    return resolve_collision(target)


def legacy_name(path: Union[str, Path]) -> Path:
    """Name a legacy catalog is moved to before conversion.

    ``old`` is inserted in front of the existing extension
    (``survey.db`` becomes ``survey.olddb``); a name without an
    extension gains ``.old``. The result never equals the input.
    """
    path = Path(path)
    suffix = path.suffix
    if suffix:
        stem = path.name[:len(path.name) - len(suffix)]
        return path.with_name(f"{stem}.{LEGACY_TOKEN}{suffix[1:]}")
    return path.with_name(f"{path.name}.{LEGACY_TOKEN}")


def force_extension(path: Union[str, Path], extension: str) -> Path:
    """Append ``extension`` unless the name already ends with it."""
    path = Path(path)
    if path.name.lower().endswith(extension.lower()):
        return path
    return path.with_name(path.name + extension)


def survey_area_from_backup(backup_path: Union[str, Path]) -> str:
    """Survey-area name encoded at the front of a backup file name.

    Raises
    ------
    ValueError
        If the name does not start with an area name.
    """
    area = Path(backup_path).name.split('_')[0]
    if not area:
        raise ValueError(f"No survey area in backup name: {backup_path}")
    return area
