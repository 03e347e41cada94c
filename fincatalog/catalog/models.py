# -*- coding: utf-8 -*-
"""
Catalog Models - Data models for fin records and catalog schemes.

Defines the FinRecord, ImageMod and CatalogScheme models shared by all
record stores, plus the status and format enumerations reported by the
stores and the format detector.

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
from enum import Enum
from typing import Iterable, List, Optional, Sequence


class CatalogStatus(Enum):
    """Open/load status of a catalog."""

    LOADED = "loaded"
    FILE_NOT_FOUND = "fileNotFound"
    INVALID_FORMAT = "invalidFormat"
    ERROR_OPENING = "errorOpening"


class OpenType(Enum):
    """How a path on disk can be opened."""

    UNREADABLE = "unreadable"
    CONVERTIBLE = "convertible"
    OPENABLE = "openable"


class ImageModType(Enum):
    """Image modification operations recorded against a traced image."""

    NONE = 0
    FLIP = 1
    CONTRAST = 2
    BRIGHTEN = 3
    CROP = 4
    UNDO = 5
    REDO = 6
    CONTRAST2 = 7
    ROTATE90CW = 8
    ROTATE90CCW = 9


# Operations that carry no values
_NO_VALUE_OPS = (
    ImageModType.NONE,
    ImageModType.FLIP,
    ImageModType.UNDO,
    ImageModType.REDO,
    ImageModType.ROTATE90CW,
    ImageModType.ROTATE90CCW,
)


class ImageMod:
    """A single image modification.

    Parameters
    ----------
    op : ImageModType
        Modification type.
    val1, val2, val3, val4 : int
        Operation values. Contrast uses (min, max), brighten and
        contrast2 use (amount,), crop uses (x_min, y_min, x_max, y_max).
        Values are zeroed for operations that carry none.
    """

    def __init__(
        self,
        op: ImageModType,
        val1: int = 0,
        val2: int = 0,
        val3: int = 0,
        val4: int = 0,
    ) -> None:
        op = ImageModType(op)
        if op in _NO_VALUE_OPS:
            val1 = val2 = val3 = val4 = 0
        elif op == ImageModType.CONTRAST:
            val3 = val4 = 0
        elif op in (ImageModType.BRIGHTEN, ImageModType.CONTRAST2):
            val2 = val3 = val4 = 0
        self.op = op
        self.values = (int(val1), int(val2), int(val3), int(val4))

    def to_text(self) -> str:
        """Compact ``"op v1 v2 v3 v4"`` form."""
        return " ".join(str(v) for v in (self.op.value,) + self.values)

    @classmethod
    def from_text(cls, text: str) -> 'ImageMod':
        """Parse the compact form produced by :meth:`to_text`."""
        parts = [int(p) for p in text.split()]
        if not parts:
            raise ValueError("empty image modification")
        parts += [0] * (5 - len(parts))
        return cls(ImageModType(parts[0]), *parts[1:5])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageMod):
            return NotImplemented
        return self.op == other.op and self.values == other.values

    def __repr__(self) -> str:
        return f"ImageMod({self.op.name}, {self.values})"


def mods_to_text(mods: Iterable[ImageMod]) -> str:
    """Serialize a modification list as ``;``-joined compact entries."""
    return ";".join(m.to_text() for m in mods)


def mods_from_text(text: Optional[str]) -> List[ImageMod]:
    """Parse a list produced by :func:`mods_to_text`."""
    if not text:
        return []
    return [ImageMod.from_text(t) for t in text.split(";") if t.strip()]


class CatalogScheme:
    """Damage-category taxonomy enforced by a catalog.

    Parameters
    ----------
    scheme_name : str
        Name of the scheme.
    category_names : Sequence[str]
        Ordered damage-category names.
    """

    def __init__(
        self,
        scheme_name: str = "",
        category_names: Sequence[str] = (),
    ) -> None:
        self._scheme_name = scheme_name
        self._category_names = tuple(category_names)

    @property
    def scheme_name(self) -> str:
        return self._scheme_name

    @property
    def category_names(self) -> tuple:
        return self._category_names

    def has_category(self, name: str) -> bool:
        """Case-insensitive category membership."""
        wanted = (name or "").upper()
        return any(c.upper() == wanted for c in self._category_names)

    def to_dict(self) -> dict:
        return {
            'scheme_name': self._scheme_name,
            'categories': list(self._category_names),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CatalogScheme':
        return cls(
            scheme_name=data.get('scheme_name', ''),
            category_names=data.get('categories', []),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CatalogScheme):
            return NotImplemented
        return (
            self._scheme_name == other._scheme_name
            and self._category_names == other._category_names
        )

    def __repr__(self) -> str:
        return (
            f"CatalogScheme({self._scheme_name!r}, "
            f"{len(self._category_names)} categories)"
        )


class FinRecord:
    """One catalog entry: an identified fin and its traced image.

    Parameters
    ----------
    id_code : str
        Identification code assigned by the researcher.
    name : str
        Individual's name.
    damage_category : str
        Damage-category label; must exist in the catalog scheme.
    image_filename : str
        Primary (modified) image path.
    original_image_filename : str
        Original, unmodified image path. May be empty for records
        whose original is only declared inside the image metadata.
    image_mods : Optional[List[ImageMod]]
        Modifications applied to the original to produce the primary
        image.
    fin_filename : str
        Name of the legacy single-file trace or the package the record
        was loaded from.
    id : Optional[int]
        Row ID (set after insertion).
    """

    def __init__(
        self,
        id_code: str = "",
        name: str = "",
        damage_category: str = "NONE",
        image_filename: str = "",
        original_image_filename: str = "",
        image_mods: Optional[List[ImageMod]] = None,
        fin_filename: str = "",
        id: Optional[int] = None,
    ) -> None:
        self.id = id
        self.id_code = id_code
        self.name = name
        self.damage_category = damage_category
        self.image_filename = image_filename
        self.original_image_filename = original_image_filename
        self.image_mods = list(image_mods or [])
        self.fin_filename = fin_filename

    def copy(self) -> 'FinRecord':
        """Return an independent copy of this record."""
        return FinRecord(
            id_code=self.id_code,
            name=self.name,
            damage_category=self.damage_category,
            image_filename=self.image_filename,
            original_image_filename=self.original_image_filename,
            image_mods=[ImageMod(m.op, *m.values) for m in self.image_mods],
            fin_filename=self.fin_filename,
            id=self.id,
        )

    def __repr__(self) -> str:
        return (
            f"FinRecord(id_code={self.id_code!r}, "
            f"image={self.image_filename!r})"
        )
