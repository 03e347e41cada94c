# -*- coding: utf-8 -*-
"""
Archive Transfer - Pack catalogs with, and unpack them from, an archiver.

Archives are created and extracted by an external archiver process
behind a narrow port: callers hand over a list file or a pattern set
and get the process exit code back. Exit code 0 is full success, 1 is
partial success (some files locked or missing were skipped), anything
else is failure.

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
import subprocess
import zipfile
from pathlib import Path
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.manifest import LIST_FILENAME, ArchiveManifest
from fincatalog.core.results import ArchiveToolError, LifecycleStatus


CATALOG_PATTERN = "*.db"

EXIT_OK = 0
EXIT_PARTIAL = 1


class ArchiverPort:
    """Contract for the external archiver.

    Implementations run a blocking process and return its exit code.
    They raise :class:`ArchiveToolError` only when the tool cannot be
    started at all.
    """

    def create(self, dest: Path, list_file: Path) -> int:
        """Compress every file named in ``list_file`` into ``dest``."""
        raise NotImplementedError

    def extract(
        self,
        archive: Path,
        dest_dir: Path,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        overwrite: bool = True,
    ) -> int:
        """Extract members of ``archive`` matching ``include`` (all when
        empty) and not matching ``exclude`` into ``dest_dir``."""
        raise NotImplementedError


class SevenZipArchiver(ArchiverPort):
    """Archiver port backed by the ``7z`` command line tool.

    Parameters
    ----------
    executable : str
        Command or path of the 7-Zip executable. Default ``7z``.
    """

    def __init__(self, executable: str = "7z") -> None:
        self._executable = executable

    def create(self, dest: Path, list_file: Path) -> int:
        return self._run([
            self._executable, 'a', '-tzip', str(dest), f'@{list_file}',
        ])

    def extract(
        self,
        archive: Path,
        dest_dir: Path,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        overwrite: bool = True,
    ) -> int:
        cmd = [
            self._executable, 'x',
            '-aoa' if overwrite else '-aos',
            f'-o{dest_dir}',
        ]
        cmd.extend(f'-x!{pattern}' for pattern in exclude)
        cmd.append(str(archive))
        cmd.extend(include)
        return self._run(cmd)

    @staticmethod
    def _run(cmd: List[str]) -> int:
        logger.info("Running archiver: %s", ' '.join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ArchiveToolError(f"Cannot run archiver {cmd[0]!r}: {e}")
        if result.returncode not in (EXIT_OK, EXIT_PARTIAL):
            logger.error(
                "Archiver failed (exit %d): %s",
                result.returncode, result.stderr,
            )
        return result.returncode


def exit_status(code: int) -> LifecycleStatus:
    """Map an archiver exit code onto a lifecycle status."""
    if code == EXIT_OK:
        return LifecycleStatus.OK
    if code == EXIT_PARTIAL:
        return LifecycleStatus.PARTIAL_ARCHIVE_FAILURE
    return LifecycleStatus.ARCHIVE_TOOL_FAILURE


def _worst(*statuses: LifecycleStatus) -> LifecycleStatus:
    for candidate in (
        LifecycleStatus.ARCHIVE_TOOL_FAILURE,
        LifecycleStatus.PARTIAL_ARCHIVE_FAILURE,
    ):
        if candidate in statuses:
            return candidate
    return LifecycleStatus.OK


def create_archive(
    catalog,
    manifest: ArchiveManifest,
    dest: Union[str, Path],
    archiver: ArchiverPort,
    temp_dir: Union[str, Path],
) -> LifecycleStatus:
    """Pack the files of ``manifest`` into ``dest``.

    The catalog stream is closed while the archiver runs so the backing
    file can be read unlocked, and reopened afterwards even when the
    archiver fails. The list file is removed once the archiver returns.

    Parameters
    ----------
    catalog
        Open record store the manifest was built from.
    manifest : ArchiveManifest
    dest : Union[str, Path]
        Archive to write.
    archiver : ArchiverPort
    temp_dir : Union[str, Path]
        Folder receiving the temporary list file.

    Returns
    -------
    LifecycleStatus
        ``OK``, ``PARTIAL_ARCHIVE_FAILURE`` or ``ARCHIVE_TOOL_FAILURE``.

    Raises
    ------
    ArchiveToolError
        If the archiver cannot be started.
    """
    temp_dir = Path(temp_dir)
    list_path = temp_dir / LIST_FILENAME
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
        manifest.write_list_file(list_path)
    except OSError as e:
        logger.error("Could not write archive list %s: %s", list_path, e)
        return LifecycleStatus.ARCHIVE_TOOL_FAILURE

    logger.info("Archive file is %s", dest)
    catalog.close_stream()
    try:
        code = archiver.create(Path(dest), list_path)
    finally:
        catalog.open_stream()
        list_path.unlink(missing_ok=True)

    status = exit_status(code)
    if status == LifecycleStatus.PARTIAL_ARCHIVE_FAILURE:
        logger.warning(
            "Archive %s created, but some locked or missing files were "
            "skipped", dest,
        )
    return status


def extract_catalog_files(
    archive: Union[str, Path],
    dest_dir: Union[str, Path],
    archiver: ArchiverPort,
) -> LifecycleStatus:
    """Unpack a catalog archive into ``dest_dir``.

    The catalog file is extracted first, replacing any existing copy.
    Everything else except the list file is then extracted without
    overwriting images already present.

    Raises
    ------
    ArchiveToolError
        If the archiver cannot be started.
    """
    archive = Path(archive)
    dest_dir = Path(dest_dir)

    first = archiver.extract(
        archive, dest_dir, include=[CATALOG_PATTERN], overwrite=True,
    )
    second = archiver.extract(
        archive, dest_dir,
        exclude=[LIST_FILENAME, CATALOG_PATTERN],
        overwrite=False,
    )
    return _worst(exit_status(first), exit_status(second))


def list_archive_members(archive: Union[str, Path]) -> List[str]:
    """Member names of a zip archive; empty if it cannot be read."""
    try:
        with zipfile.ZipFile(archive) as zf:
            return zf.namelist()
    except (OSError, zipfile.BadZipFile) as e:
        logger.error("Cannot read archive %s: %s", archive, e)
        return []


def find_catalog_member(archive: Union[str, Path]) -> Optional[str]:
    """File name of the first catalog (``.db``) stored in an archive."""
    for name in list_archive_members(archive):
        base = Path(name).name
        if base.lower().endswith('.db'):
            return base
    return None
