# -*- coding: utf-8 -*-
"""
Catalog Lifecycle - Open, convert, duplicate, back up and restore catalogs.

``CatalogLifecycle`` ties the record stores, the folder layout, the
naming rules and the archiver together. Every collaborator is passed in
explicitly: the configuration, the archiver port and the overwrite
confirmation callable.

Opening returns a status-tagged catalog instead of raising. Archive
operations return a :class:`~fincatalog.core.results.LifecycleResult`;
archiver and packaging errors raised below this layer are translated
into result statuses here.

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
import sqlite3
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog import finz
from fincatalog.catalog.archiver import (
    ArchiverPort,
    SevenZipArchiver,
    create_archive,
    extract_catalog_files,
    find_catalog_member,
)
from fincatalog.catalog.database import FinCatalog
from fincatalog.catalog.detect import classify, describe_unopenable
from fincatalog.catalog.invalid import InvalidCatalog
from fincatalog.catalog.legacy import LegacyCatalog
from fincatalog.catalog.manifest import build_manifest
from fincatalog.catalog.models import CatalogStatus, FinRecord, OpenType
from fincatalog.core.config import CatalogConfig, load_config
from fincatalog.core.layout import (
    CATALOG_FOLDER,
    catalog_filename,
    ensure_data_root,
    list_catalog_names,
    list_survey_areas,
    reconcile_survey_area,
    survey_area_path,
)
from fincatalog.core.naming import (
    force_extension,
    legacy_name,
    resolve_backup_name,
    resolve_collision,
    survey_area_from_backup,
)
from fincatalog.core.results import (
    ArchiveToolError,
    LifecycleResult,
    LifecycleStatus,
    MissingModifiedImageError,
)


ConfirmOverwrite = Callable[[str, str, str], bool]

OVERWRITE_TITLE = "REPLACE existing file?"
OVERWRITE_MESSAGE = "Selected EXPORT file already exists!"


def _decline(title: str, message: str, target: str) -> bool:
    return False


def copy_fins(source, target) -> int:
    """Copy every present record of ``source`` into ``target``.

    Records are visited in absolute order and holes are skipped, so the
    target ends up with ``source.size()`` new records.

    Returns
    -------
    int
        Number of records copied.
    """
    copied = 0
    for i in range(source.size_absolute()):
        record = source.get_item_absolute(i)
        if record is None:
            continue
        target.add(record)
        copied += 1
        del record
    logger.info(
        "Copied %d fin(s) from %s to %s",
        copied, source.filename, target.filename,
    )
    return copied


class CatalogLifecycle:
    """Lifecycle operations on fin catalogs.

    Parameters
    ----------
    config : Optional[CatalogConfig]
        Data root, temp folder and default scheme. Loaded from the user
        config file when None.
    archiver : Optional[ArchiverPort]
        External archiver. A :class:`SevenZipArchiver` running the
        configured executable when None.
    confirm_overwrite : Optional[ConfirmOverwrite]
        ``(title, message, target_name) -> bool`` asked before an export
        replaces an existing file. Declines when None.
    """

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        archiver: Optional[ArchiverPort] = None,
        confirm_overwrite: Optional[ConfirmOverwrite] = None,
    ) -> None:
        self.config = config or load_config()
        self.archiver = archiver or SevenZipArchiver(
            self.config.archiver_executable
        )
        self.confirm_overwrite = confirm_overwrite or _decline

    @property
    def data_root(self) -> Path:
        return self.config.resolved_data_root()

    @property
    def temp_dir(self) -> Path:
        return self.config.resolved_temp_dir()

    # ------------------------------------------------------------------
    # Opening and conversion
    # ------------------------------------------------------------------

    def open(
        self,
        path: Union[str, Path],
        create_if_missing: bool = False,
    ):
        """Open the catalog at ``path``.

        Parameters
        ----------
        path : Union[str, Path]
        create_if_missing : bool
            Construct a current-format catalog with the default scheme.
            An existing current-format catalog keeps its own scheme, and
            an existing file in any other format is never overwritten.

        Returns
        -------
        FinCatalog or InvalidCatalog
            Legacy catalogs are converted first. Anything unreadable
            yields an ``InvalidCatalog`` with status ``FILE_NOT_FOUND``
            (``INVALID_FORMAT`` or ``ERROR_OPENING`` for an existing
            file when ``create_if_missing`` is set); check ``status`` on
            the result.
        """
        path = Path(path)
        kind = classify(path)

        if create_if_missing and (
                kind == OpenType.OPENABLE or not path.exists()):
            logger.info("Creating catalog %s", path)
            return FinCatalog(path, self.config.default_scheme(), create=True)

        if kind == OpenType.OPENABLE:
            return FinCatalog(path)
        if kind == OpenType.CONVERTIBLE:
            return self.convert(path)

        logger.warning("Cannot open catalog %s", path)
        if create_if_missing:
            return InvalidCatalog(path, describe_unopenable(path))
        return InvalidCatalog(path, CatalogStatus.FILE_NOT_FOUND)

    def open_existing(self, path: Union[str, Path]):
        """Open a catalog the user picked, reporting why it failed.

        Unlike :meth:`open`, an existing file in an unknown format is
        tagged ``INVALID_FORMAT`` and a store that fails to open is
        tagged ``ERROR_OPENING``.
        """
        path = Path(path)
        kind = classify(path)

        if kind == OpenType.CONVERTIBLE:
            return self.convert(path)
        if kind == OpenType.UNREADABLE:
            status = describe_unopenable(path)
            logger.error("Cannot open catalog %s (%s)", path, status.value)
            return InvalidCatalog(path, status)

        catalog = FinCatalog(path)
        if catalog.status != CatalogStatus.LOADED:
            catalog.close()
            return InvalidCatalog(path, CatalogStatus.ERROR_OPENING)
        return catalog

    def convert(self, source_path: Union[str, Path]):
        """Convert a legacy catalog into the current format in place.

        The legacy file is renamed (``survey.db`` to ``survey.olddb``)
        and the new catalog is created under the original name with the
        legacy scheme and a copy of every fin. If the legacy file cannot
        be read or a fin cannot be copied, the partial catalog is removed
        and the legacy file gets its original name back.

        Returns
        -------
        FinCatalog or InvalidCatalog
        """
        source_path = Path(source_path)
        old_path = resolve_collision(legacy_name(source_path))

        logger.info("Converting legacy catalog %s", source_path)
        try:
            source_path.rename(old_path)
        except OSError as e:
            logger.error("Could not rename %s: %s", source_path, e)
            return InvalidCatalog(source_path, CatalogStatus.ERROR_OPENING)

        legacy = LegacyCatalog(old_path)
        if legacy.status != CatalogStatus.LOADED:
            logger.error(
                "Legacy catalog %s could not be read (%s)",
                old_path, legacy.status.value,
            )
            legacy.close()
            return self._undo_conversion(
                source_path, old_path, legacy.status,
            )

        catalog = None
        try:
            catalog = FinCatalog(source_path, legacy.scheme, create=True)
            if catalog.status != CatalogStatus.LOADED:
                raise sqlite3.DatabaseError(
                    f"new catalog {source_path} is {catalog.status.value}"
                )
            copy_fins(legacy, catalog)
        except (ValueError, OSError, sqlite3.DatabaseError) as e:
            logger.error("Conversion of %s failed: %s", source_path, e)
            if catalog is not None:
                catalog.close()
            return self._undo_conversion(
                source_path, old_path, CatalogStatus.ERROR_OPENING,
            )
        finally:
            legacy.close()

        logger.info("Legacy catalog kept as %s", old_path)
        return catalog

    @staticmethod
    def _undo_conversion(
        source_path: Path,
        old_path: Path,
        status: CatalogStatus,
    ) -> InvalidCatalog:
        """Drop a partial conversion and give the legacy file its name back."""
        try:
            if source_path.exists():
                source_path.unlink()
            old_path.rename(source_path)
        except OSError as e:
            logger.error(
                "Could not restore legacy catalog %s from %s: %s",
                source_path, old_path, e,
            )
            return InvalidCatalog(old_path, status)
        logger.info("Legacy catalog %s left unconverted", source_path)
        return InvalidCatalog(source_path, status)

    def duplicate(self, source, target_path: Union[str, Path]) -> FinCatalog:
        """Copy ``source`` into a new catalog at ``target_path``.

        The new catalog takes over the source scheme.

        Raises
        ------
        FileExistsError
            If ``target_path`` already exists.
        """
        target_path = Path(target_path)
        if target_path.exists():
            raise FileExistsError(f"Catalog already exists at {target_path}")

        target = FinCatalog(target_path, source.scheme, create=True)
        copy_fins(source, target)
        return target

    def create_catalog(
        self,
        name: str,
        area: Optional[str] = None,
    ) -> FinCatalog:
        """Create an empty catalog in a survey area.

        The area's folder tree is built (or completed) first.

        Raises
        ------
        FileExistsError
            If the catalog already exists.
        """
        area = area or self.config.current_survey_area
        root = self.data_root
        path = catalog_filename(root, name, area)
        if path.exists():
            raise FileExistsError(f"Catalog already exists at {path}")

        reconcile_survey_area(root, area, force_create_all=True)
        logger.info("Creating catalog %s in survey area %r", path.name, area)
        return FinCatalog(path, self.config.default_scheme(), create=True)

    def survey_areas(self) -> List[str]:
        return list_survey_areas(self.data_root)

    def catalog_names(self, area: Optional[str] = None) -> List[str]:
        return list_catalog_names(
            self.data_root, area or self.config.current_survey_area,
        )

    # ------------------------------------------------------------------
    # Archives
    # ------------------------------------------------------------------

    def _archive(self, catalog, dest: Path) -> LifecycleResult:
        manifest = build_manifest(catalog)
        try:
            status = create_archive(
                catalog, manifest, dest, self.archiver, self.temp_dir,
            )
        except ArchiveToolError as e:
            logger.error("Archive %s not created: %s", dest, e)
            return LifecycleResult(
                LifecycleStatus.ARCHIVE_TOOL_FAILURE, dest, str(e),
            )
        return LifecycleResult(status, dest)

    def backup(self, catalog) -> LifecycleResult:
        """Archive ``catalog`` and its images into the backups folder.

        The archive name is ``<area>_<catalog>_<Mon>_<DD>_<YYYY>.zip``,
        made unique with ``[n]`` when a backup of the same day exists.
        """
        root = self.data_root
        if not ensure_data_root(root, create=True):
            return LifecycleResult(
                LifecycleStatus.UNREADABLE, root,
                "Data root folders could not be created",
            )

        dest = resolve_backup_name(catalog.filename, root)
        logger.info("Backing up %s to %s", catalog.filename, dest)
        return self._archive(catalog, dest)

    def export_catalog(
        self,
        catalog,
        dest: Union[str, Path],
    ) -> LifecycleResult:
        """Archive ``catalog`` and its images to a user-chosen ``.zip``.

        An existing file is only replaced after confirmation.
        """
        dest = force_extension(dest, ".zip")
        if dest.exists():
            if not self.confirm_overwrite(
                OVERWRITE_TITLE, OVERWRITE_MESSAGE, str(dest),
            ):
                logger.info("Export aborted - replacement of %s refused", dest)
                return LifecycleResult(
                    LifecycleStatus.USER_DECLINED_OVERWRITE, dest,
                )
            try:
                dest.unlink()
            except OSError as e:
                logger.error("Could not replace %s: %s", dest, e)
                return LifecycleResult(LifecycleStatus.UNREADABLE, dest, str(e))

        logger.info("Exporting %s to %s", catalog.filename, dest)
        return self._archive(catalog, dest)

    def inspect_backup(
        self,
        backup_file: Union[str, Path],
    ) -> Tuple[str, Optional[str]]:
        """Survey area and catalog file name recorded in a backup.

        Raises
        ------
        ValueError
            If the file name carries no survey area.
        """
        return (
            survey_area_from_backup(backup_file),
            find_catalog_member(backup_file),
        )

    def _extract_into_area(
        self,
        archive: Union[str, Path],
        area: str,
        force_create_all: bool,
    ) -> LifecycleResult:
        archive = Path(archive)
        if not archive.is_file():
            return LifecycleResult(
                LifecycleStatus.UNREADABLE, archive, "Archive not found",
            )

        member = find_catalog_member(archive)
        if member is None:
            return LifecycleResult(
                LifecycleStatus.FORMAT_UNRECOGNIZED, archive,
                "Archive holds no catalog",
            )

        root = self.data_root
        if not reconcile_survey_area(root, area, force_create_all):
            return LifecycleResult(
                LifecycleStatus.UNREADABLE, survey_area_path(root, area),
                "Survey area folders could not be created",
            )

        dest_dir = survey_area_path(root, area) / CATALOG_FOLDER
        try:
            status = extract_catalog_files(archive, dest_dir, self.archiver)
        except ArchiveToolError as e:
            logger.error("Could not extract %s: %s", archive, e)
            return LifecycleResult(
                LifecycleStatus.ARCHIVE_TOOL_FAILURE, archive, str(e),
            )

        logger.info("Extracted %s into survey area %r", archive.name, area)
        return LifecycleResult(status, dest_dir / member)

    def restore(
        self,
        backup_file: Union[str, Path],
        area: Optional[str] = None,
    ) -> LifecycleResult:
        """Restore a backup into its survey area.

        The area defaults to the one named in the backup file. Missing
        area folders are recreated; existing images are kept and the
        catalog file is replaced.

        Returns
        -------
        LifecycleResult
            ``path`` is the restored catalog file on success.
        """
        if area is None:
            try:
                area = survey_area_from_backup(backup_file)
            except ValueError as e:
                return LifecycleResult(
                    LifecycleStatus.FORMAT_UNRECOGNIZED, backup_file, str(e),
                )
        return self._extract_into_area(
            backup_file, area, force_create_all=False,
        )

    def import_catalog(
        self,
        archive: Union[str, Path],
        area: str,
    ) -> LifecycleResult:
        """Import an exported catalog into survey area ``area``.

        The area's whole folder tree is created first.
        """
        return self._extract_into_area(archive, area, force_create_all=True)

    # ------------------------------------------------------------------
    # Single fins
    # ------------------------------------------------------------------

    def export_finz(
        self,
        record: FinRecord,
        dest: Union[str, Path],
    ) -> LifecycleResult:
        """Export one fin to a ``.finz`` package."""
        try:
            return finz.export_finz(
                record, dest, self.archiver, self.temp_dir,
                self.confirm_overwrite,
            )
        except ArchiveToolError as e:
            logger.error("Finz package %s not created: %s", dest, e)
            return LifecycleResult(
                LifecycleStatus.ARCHIVE_TOOL_FAILURE, dest, str(e), record,
            )
        except MissingModifiedImageError as e:
            return LifecycleResult(
                LifecycleStatus.MISSING_MODIFIED_IMAGE, dest, str(e), record,
            )

    def import_finz(
        self,
        catalog,
        archive: Union[str, Path],
    ) -> LifecycleResult:
        """Add the fin of a ``.finz`` package to ``catalog``."""
        try:
            return finz.import_finz(
                catalog, archive, self.archiver, self.temp_dir,
            )
        except ArchiveToolError as e:
            logger.error("Could not read finz package %s: %s", archive, e)
            return LifecycleResult(
                LifecycleStatus.ARCHIVE_TOOL_FAILURE, archive, str(e),
            )
