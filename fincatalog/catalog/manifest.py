# -*- coding: utf-8 -*-
"""
Archive Manifest - Files that must travel with a catalog.

Builds the ordered list of files packed into a backup or export: the
catalog's own backing file first, then every distinct image referenced
by its records, in record order. Paths are compared ignoring letter
case, so two references differing only in case are packed once.

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
import os
from pathlib import Path
from typing import Iterator, List, Optional, Set, Union

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.pngtext import read_image_metadata


LIST_FILENAME = "filesToArchive.txt"


class ArchiveManifest:
    """Ordered set of absolute paths, unique ignoring letter case.

    Parameters
    ----------
    catalog_file : str
        Catalog backing file; always the first entry.
    """

    def __init__(self, catalog_file: Union[str, Path]) -> None:
        self._paths: List[str] = []
        self._seen: Set[str] = set()
        self.add(catalog_file)

    @staticmethod
    def _key(path: str) -> str:
        return path.lower()

    def add(self, path: Union[str, Path]) -> bool:
        """Append ``path`` unless an equal path (ignoring case) is present.

        Returns
        -------
        bool
            True if the path was added.
        """
        path = str(path)
        if not path or self._key(path) in self._seen:
            return False
        self._seen.add(self._key(path))
        self._paths.append(path)
        return True

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and self._key(str(path)) in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    @property
    def catalog_file(self) -> str:
        return self._paths[0]

    @property
    def images(self) -> List[str]:
        return list(self._paths[1:])

    def write_list_file(self, list_path: Union[str, Path]) -> Path:
        """Write the archiver list file.

        One quoted path per line: the list file itself, then the
        catalog file, then the images in manifest order.

        Parameters
        ----------
        list_path : Union[str, Path]

        Returns
        -------
        Path
        """
        list_path = Path(list_path)
        with open(list_path, 'w', encoding='utf-8') as f:
            f.write(f'"{list_path}"\n')
            for path in self._paths:
                f.write(f'"{path}"\n')
        return list_path

    def __repr__(self) -> str:
        return f"ArchiveManifest({len(self._paths)} files)"


def declared_original(
    image_filename: str,
    record_original: str,
    catalog_folder: Union[str, Path],
) -> Optional[str]:
    """Original image a modified image was derived from.

    The name embedded in the image metadata wins; without metadata the
    record's own original reference is used. Relative names resolve
    against the catalog folder.
    """
    metadata = read_image_metadata(image_filename)
    original = metadata.original_filename if metadata else ''
    if not original:
        original = record_original or ''
    if not original:
        return None
    if os.path.isabs(original):
        return original
    return os.path.normpath(os.path.join(str(catalog_folder), original))


def build_manifest(catalog) -> ArchiveManifest:
    """Collect every file an archive of ``catalog`` must contain.

    Records are visited in absolute order; holes are skipped. The
    original image of a record is only looked up the first time its
    primary image is seen.

    Parameters
    ----------
    catalog
        Open record store.

    Returns
    -------
    ArchiveManifest
    """
    manifest = ArchiveManifest(catalog.filename)
    catalog_folder = Path(catalog.filename).parent

    for i in range(catalog.size_absolute()):
        record = catalog.get_item_absolute(i)
        if record is None:
            continue

        if manifest.add(record.image_filename):
            original = declared_original(
                record.image_filename,
                record.original_image_filename,
                catalog_folder,
            )
            if original:
                manifest.add(original)
        del record

    logger.info(
        "Manifest for %s: %d file(s)", catalog.filename, len(manifest),
    )
    return manifest
