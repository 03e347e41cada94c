# -*- coding: utf-8 -*-
"""
Finz Packages - Single-fin export and import archives.

A ``.finz`` package is a zip archive holding a one-record catalog
(``database.db``), the fin's original image, and its modified image
saved as ``<package>_wDarwinMods.png`` with the modification metadata
embedded. Packages are assembled and unpacked in a scratch folder under
the configured temp folder, which is removed afterwards.

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
import shutil
import uuid
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.archiver import (
    ArchiverPort,
    create_archive,
    extract_catalog_files,
)
from fincatalog.catalog.database import FinCatalog
from fincatalog.catalog.manifest import build_manifest, declared_original
from fincatalog.catalog.models import CatalogScheme, CatalogStatus, FinRecord
from fincatalog.catalog.pngtext import (
    ImageMetadata,
    read_image_metadata,
    save_with_metadata,
)
from fincatalog.core.naming import force_extension, resolve_collision
from fincatalog.core.results import (
    LifecycleResult,
    LifecycleStatus,
    MissingModifiedImageError,
)


FINZ_EXTENSION = ".finz"
FINZ_DATABASE = "database.db"
FINZ_SCHEME_NAME = "FinzSimple"
MODS_SUFFIX = "_wDarwinMods.png"

ConfirmOverwrite = Callable[[str, str, str], bool]


def _scratch_folder(temp_dir: Union[str, Path], name: str) -> Path:
    unique = name.replace('.', '') + '_' + uuid.uuid4().hex
    folder = Path(temp_dir) / unique
    folder.mkdir(parents=True)
    return folder


def _remove_scratch(folder: Path) -> None:
    logger.debug("Removing temporary finz folder %s", folder)
    try:
        shutil.rmtree(folder)
    except OSError as e:
        logger.warning("Couldn't remove temporary files %s: %s", folder, e)


def finz_scheme(damage_category: str) -> CatalogScheme:
    """Scheme of a one-record package: ``NONE`` plus the fin's category."""
    categories = ["NONE"]
    if damage_category and damage_category.upper() != "NONE":
        categories.append(damage_category)
    return CatalogScheme(FINZ_SCHEME_NAME, categories)


def check_modified_image(record: FinRecord) -> None:
    """Raise if the record's modified image cannot be packaged.

    Raises
    ------
    MissingModifiedImageError
    """
    if not record.image_filename or not Path(record.image_filename).is_file():
        raise MissingModifiedImageError(
            f"Fin {record.id_code or record.name!r} has no modified image "
            f"at {record.image_filename!r}"
        )


def export_finz(
    record: FinRecord,
    dest: Union[str, Path],
    archiver: ArchiverPort,
    temp_dir: Union[str, Path],
    confirm_overwrite: Optional[ConfirmOverwrite] = None,
) -> LifecycleResult:
    """Write one fin record to a ``.finz`` package.

    Parameters
    ----------
    record : FinRecord
        Fin to export. Its modified image must exist.
    dest : Union[str, Path]
        Package path; ``.finz`` is appended when missing.
    archiver : ArchiverPort
    temp_dir : Union[str, Path]
        Parent of the scratch folder.
    confirm_overwrite : Optional[ConfirmOverwrite]
        Asked before replacing an existing package. None declines.

    Returns
    -------
    LifecycleResult

    Raises
    ------
    ArchiveToolError
        If the archiver cannot be started.
    """
    dest = force_extension(dest, FINZ_EXTENSION)

    try:
        check_modified_image(record)
    except MissingModifiedImageError as e:
        logger.error("Finz export aborted: %s", e)
        return LifecycleResult(
            LifecycleStatus.MISSING_MODIFIED_IMAGE, dest, str(e), record,
        )

    if dest.exists():
        confirmed = confirm_overwrite is not None and confirm_overwrite(
            "REPLACE existing file?",
            "Selected EXPORT file already exists!",
            str(dest),
        )
        if not confirmed:
            logger.info("Finz export aborted - replacement of %s refused", dest)
            return LifecycleResult(
                LifecycleStatus.USER_DECLINED_OVERWRITE, dest, record=record,
            )
        try:
            dest.unlink()
        except OSError as e:
            logger.error("Could not replace %s: %s", dest, e)
            return LifecycleResult(
                LifecycleStatus.UNREADABLE, dest, str(e), record,
            )

    scratch = _scratch_folder(temp_dir, dest.name)
    try:
        package_record = record.copy()
        package_record.fin_filename = dest.name
        package_record.damage_category = record.damage_category or "NONE"

        original = declared_original(
            record.image_filename,
            record.original_image_filename,
            Path(record.image_filename).parent,
        )
        original_name = ''
        if original and Path(original).is_file():
            original_name = Path(original).name
            shutil.copyfile(original, scratch / original_name)
            package_record.original_image_filename = str(
                scratch / original_name
            )
        else:
            logger.warning("Original image not found for %s", record)
            package_record.original_image_filename = ''

        modified = scratch / (dest.stem + MODS_SUFFIX)
        metadata = ImageMetadata(
            original_filename=original_name,
            image_mods=record.image_mods,
        )
        try:
            save_with_metadata(record.image_filename, modified, metadata)
        except OSError as e:
            logger.warning(
                "Could not embed metadata in %s (%s); copying as is",
                modified.name, e,
            )
            shutil.copyfile(record.image_filename, modified)
        package_record.image_filename = str(modified)

        db = FinCatalog(
            scratch / FINZ_DATABASE,
            finz_scheme(package_record.damage_category),
            create=True,
        )
        try:
            db.add(package_record)
            manifest = build_manifest(db)
            status = create_archive(db, manifest, dest, archiver, scratch)
        finally:
            db.close()
    finally:
        _remove_scratch(scratch)

    logger.info("Saved finz package %s (%s)", dest, status.value)
    return LifecycleResult(status, dest, record=record)


class FinzPackage:
    """An unpacked ``.finz`` package.

    The record's image paths point into :attr:`folder`, which exists
    until :meth:`close` is called.

    Parameters
    ----------
    folder : Path
        Scratch folder holding the unpacked files.
    record : FinRecord
        The package's single fin.
    """

    def __init__(self, folder: Path, record: FinRecord) -> None:
        self.folder = folder
        self.record = record

    def close(self) -> None:
        """Remove the scratch folder."""
        if self.folder.exists():
            _remove_scratch(self.folder)

    def __enter__(self) -> 'FinzPackage':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


def open_finz(
    archive: Union[str, Path],
    archiver: ArchiverPort,
    temp_dir: Union[str, Path],
) -> Optional[FinzPackage]:
    """Unpack a ``.finz`` package and read its fin.

    Returns
    -------
    Optional[FinzPackage]
        None if the package cannot be extracted or holds no readable
        one-record catalog; the scratch folder is removed in that case.

    Raises
    ------
    ArchiveToolError
        If the archiver cannot be started.
    """
    archive = Path(archive)
    scratch = _scratch_folder(temp_dir, archive.name)
    try:
        status = extract_catalog_files(archive, scratch, archiver)
        db_path = scratch / FINZ_DATABASE
        if status == LifecycleStatus.ARCHIVE_TOOL_FAILURE \
                or not FinCatalog.is_type(db_path):
            logger.error("Not a finz package: %s", archive)
            _remove_scratch(scratch)
            return None

        db = FinCatalog(db_path)
        try:
            record = db.get_item(0) if db.status == CatalogStatus.LOADED else None
        finally:
            db.close()
    except Exception:
        _remove_scratch(scratch)
        raise

    if record is None:
        logger.error("Finz package %s holds no fin", archive)
        _remove_scratch(scratch)
        return None

    record.fin_filename = str(archive)
    record.id = None

    metadata = read_image_metadata(record.image_filename)
    if metadata is not None:
        if metadata.image_mods and not record.image_mods:
            record.image_mods = metadata.image_mods
        if metadata.original_filename and not record.original_image_filename:
            record.original_image_filename = str(
                scratch / Path(metadata.original_filename).name
            )

    return FinzPackage(scratch, record)


def discard_finz(package: Optional[FinzPackage]) -> None:
    """Remove the scratch folder of a package returned by :func:`open_finz`."""
    if package is not None:
        package.close()


def _copy_into(source: str, folder: Path) -> str:
    target = resolve_collision(folder / Path(source).name)
    shutil.copyfile(source, target)
    return str(target)


def import_finz(
    catalog,
    archive: Union[str, Path],
    archiver: ArchiverPort,
    temp_dir: Union[str, Path],
) -> LifecycleResult:
    """Add the fin of a ``.finz`` package to ``catalog``.

    Both images are copied into the catalog folder under collision-free
    names before the record is added.

    Raises
    ------
    ArchiveToolError
        If the archiver cannot be started.
    """
    archive = Path(archive)
    if not archive.is_file():
        return LifecycleResult(
            LifecycleStatus.UNREADABLE, archive, "Package not found",
        )

    package = open_finz(archive, archiver, temp_dir)
    if package is None:
        return LifecycleResult(
            LifecycleStatus.FORMAT_UNRECOGNIZED, archive,
            "Not a readable finz package",
        )

    with package:
        record = package.record
        if not catalog.scheme.has_category(record.damage_category):
            message = (
                f"Damage category {record.damage_category!r} is not part "
                f"of the catalog scheme"
            )
            logger.error("Finz import aborted: %s", message)
            return LifecycleResult(
                LifecycleStatus.FORMAT_UNRECOGNIZED, archive, message, record,
            )

        try:
            check_modified_image(record)
        except MissingModifiedImageError as e:
            logger.error("Finz import aborted: %s", e)
            return LifecycleResult(
                LifecycleStatus.MISSING_MODIFIED_IMAGE, archive, str(e), record,
            )

        folder = Path(catalog.filename).parent
        record.image_filename = _copy_into(record.image_filename, folder)
        if record.original_image_filename \
                and Path(record.original_image_filename).is_file():
            record.original_image_filename = _copy_into(
                record.original_image_filename, folder,
            )
        else:
            record.original_image_filename = ''

        record.id = catalog.add(record)

    logger.info("Imported fin %s from %s", record.id_code, archive)
    return LifecycleResult(LifecycleStatus.OK, archive, record=record)
