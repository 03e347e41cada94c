# -*- coding: utf-8 -*-
"""
PNG Text Metadata - Read and write fin metadata embedded in images.

Modified fin images are saved as PNG files whose text chunks declare
the original image they were derived from, the modifications applied,
and the outline normalisation scale.

Dependencies
------------
Pillow

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
from typing import List, Optional, Union

# Third-party
from PIL import Image, UnidentifiedImageError
from PIL.PngImagePlugin import PngInfo

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.models import ImageMod, mods_from_text, mods_to_text


KEY_ORIGINAL = "OriginalImageFilename"
KEY_MODS = "ImageMods"
KEY_SCALE = "NormScale"
KEY_THUMB_ONLY = "ThumbOnly"


class ImageMetadata:
    """Fin metadata embedded in a modified image.

    Parameters
    ----------
    original_filename : str
        Declared original image (usually a bare file name).
    image_mods : List[ImageMod]
    norm_scale : float
    thumb_only : bool
        True when the stored image is a reduced thumbnail.
    """

    def __init__(
        self,
        original_filename: str = "",
        image_mods: Optional[List[ImageMod]] = None,
        norm_scale: float = 1.0,
        thumb_only: bool = False,
    ) -> None:
        self.original_filename = original_filename
        self.image_mods = list(image_mods or [])
        self.norm_scale = norm_scale
        self.thumb_only = thumb_only

    def __repr__(self) -> str:
        return (
            f"ImageMetadata(original={self.original_filename!r}, "
            f"mods={len(self.image_mods)})"
        )


def read_image_metadata(path: Union[str, Path]) -> Optional[ImageMetadata]:
    """Read embedded fin metadata from an image file.

    Only the text chunks are needed; pixel data is not decoded.

    Parameters
    ----------
    path : Union[str, Path]

    Returns
    -------
    Optional[ImageMetadata]
        None if the file is missing, not an image, or carries no fin
        metadata.
    """
    try:
        with Image.open(path) as img:
            text = dict(getattr(img, 'text', None) or {})
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.debug("No readable metadata in %s: %s", path, e)
        return None

    if not any(k in text for k in (KEY_ORIGINAL, KEY_MODS)):
        return None

    try:
        mods = mods_from_text(text.get(KEY_MODS))
    except ValueError as e:
        logger.warning("Ignoring malformed image mods in %s: %s", path, e)
        mods = []

    try:
        scale = float(text.get(KEY_SCALE, 1.0))
    except ValueError:
        scale = 1.0

    return ImageMetadata(
        original_filename=text.get(KEY_ORIGINAL, ''),
        image_mods=mods,
        norm_scale=scale,
        thumb_only=text.get(KEY_THUMB_ONLY, '0') == '1',
    )


def save_with_metadata(
    source: Union[str, Path],
    dest: Union[str, Path],
    metadata: ImageMetadata,
) -> None:
    """Re-save ``source`` as a PNG at ``dest`` carrying ``metadata``.

    Parameters
    ----------
    source : Union[str, Path]
        Image to copy.
    dest : Union[str, Path]
        Output PNG path.
    metadata : ImageMetadata

    Raises
    ------
    OSError
        If the source cannot be read or the destination written.
    """
    info = PngInfo()
    info.add_text(KEY_ORIGINAL, metadata.original_filename)
    info.add_text(KEY_MODS, mods_to_text(metadata.image_mods))
    info.add_text(KEY_SCALE, repr(float(metadata.norm_scale)))
    info.add_text(KEY_THUMB_ONLY, '1' if metadata.thumb_only else '0')

    with Image.open(source) as img:
        img.save(dest, format='PNG', pnginfo=info)
