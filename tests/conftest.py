# -*- coding: utf-8 -*-
"""
Shared fixtures for FinCatalog tests.

Provides an isolated configuration, a zipfile-backed archiver port so
archive tests never need the 7-Zip executable, and helpers for writing
small PNG fin images.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

Created
-------
2026-10-19
"""

import fnmatch
import json
import zipfile
from pathlib import Path

import pytest
from PIL import Image

from fincatalog.catalog.archiver import ArchiverPort
from fincatalog.catalog.models import FinRecord
from fincatalog.catalog.pngtext import ImageMetadata, save_with_metadata
from fincatalog.core.config import CatalogConfig
from fincatalog.core.lifecycle import CatalogLifecycle


class FakeArchiver(ArchiverPort):
    """Archiver port writing real zip files with ``zipfile``.

    Members are stored by base name, as 7-Zip does for absolute paths
    in a list file. Exit codes can be forced to simulate failures.
    """

    def __init__(self, create_code: int = 0, extract_code: int = 0) -> None:
        self.create_code = create_code
        self.extract_code = extract_code
        self.calls = []
        self.listed = []

    def create(self, dest, list_file):
        self.calls.append(('create', Path(dest), Path(list_file)))
        lines = Path(list_file).read_text(encoding='utf-8').splitlines()
        self.listed = [line.strip().strip('"') for line in lines if line.strip()]
        with zipfile.ZipFile(dest, 'w') as zf:
            for path in self.listed:
                if Path(path).is_file():
                    zf.write(path, arcname=Path(path).name)
        return self.create_code

    def extract(self, archive, dest_dir, include=(), exclude=(),
                overwrite=True):
        self.calls.append(
            ('extract', Path(archive), Path(dest_dir),
             tuple(include), tuple(exclude), overwrite)
        )
        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive) as zf:
            for name in zf.namelist():
                base = Path(name).name
                if include and not any(fnmatch.fnmatch(base, p) for p in include):
                    continue
                if any(fnmatch.fnmatch(base, p) for p in exclude):
                    continue
                target = dest_dir / base
                if target.exists() and not overwrite:
                    continue
                target.write_bytes(zf.read(name))
        return self.extract_code


def write_png(path, color=(200, 30, 30), metadata=None, size=(8, 8)):
    """Write a small PNG, optionally carrying fin metadata."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if metadata is None:
        Image.new('RGB', size, color).save(path, format='PNG')
        return path
    plain = path.with_name(path.stem + '_plain.png')
    Image.new('RGB', size, color).save(plain, format='PNG')
    save_with_metadata(plain, path, metadata)
    plain.unlink()
    return path


def make_fin(folder, stem, category="NONE", with_original=True, **kwargs):
    """Write a modified/original image pair and return their record."""
    folder = Path(folder)
    original = ''
    if with_original:
        original = str(write_png(folder / f"{stem}.png", color=(10, 10, 10)))
    modified = write_png(
        folder / f"{stem}_mod.png",
        metadata=ImageMetadata(
            original_filename=Path(original).name if original else '',
        ),
    )
    return FinRecord(
        id_code=stem.upper(),
        name=stem,
        damage_category=category,
        image_filename=str(modified),
        original_image_filename=original,
        **kwargs,
    )


def write_legacy(path, scheme_name, categories, entries):
    """Write a legacy flat-file catalog; ``None`` entries are holes."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        "#DARWIN-OLDDB 1",
        json.dumps({'scheme_name': scheme_name, 'categories': categories}),
    ]
    lines += [json.dumps(entry) for entry in entries]
    path.write_text("\n".join(lines) + "\n", encoding='utf-8')
    return path


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the user's config file and data root out of every test."""
    monkeypatch.delenv("FINCATALOG_DATA_ROOT", raising=False)
    monkeypatch.setenv("FINCATALOG_CONFIG", str(tmp_path / "no_config.json"))


@pytest.fixture
def config(tmp_path):
    return CatalogConfig(
        data_root=str(tmp_path / "data"),
        temp_dir=str(tmp_path / "tmp"),
    )


@pytest.fixture
def archiver():
    return FakeArchiver()


@pytest.fixture
def lifecycle(config, archiver):
    return CatalogLifecycle(config=config, archiver=archiver)
