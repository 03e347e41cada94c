# -*- coding: utf-8 -*-
"""
Tests for fincatalog.core.lifecycle - CatalogLifecycle orchestration.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

Created
-------
2026-10-19
"""

import re
import zipfile
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeArchiver, make_fin, write_legacy, write_png
from fincatalog.catalog.archiver import list_archive_members
from fincatalog.catalog.database import FinCatalog
from fincatalog.catalog.invalid import InvalidCatalog
from fincatalog.catalog.manifest import build_manifest
from fincatalog.catalog.models import CatalogScheme, CatalogStatus, FinRecord
from fincatalog.core.config import CatalogConfig
from fincatalog.core.layout import AREA_SUBFOLDERS, survey_area_path
from fincatalog.core.lifecycle import CatalogLifecycle, copy_fins
from fincatalog.core.naming import backup_filename
from fincatalog.core.results import ArchiveToolError, LifecycleStatus


@pytest.fixture
def data_root(config):
    return config.resolved_data_root()


@pytest.fixture
def survey(lifecycle, data_root):
    """Catalog ``survey.db`` in survey area ``area1`` with two fins."""
    cat = lifecycle.create_catalog("survey", "area1")
    folder = survey_area_path(data_root, "area1") / "catalog"
    cat.add(make_fin(folder, "a"))
    cat.add(make_fin(folder, "b", category="Upper"))
    yield cat
    cat.close()


class TestCopyFins:

    def test_copies_present_records(self, tmp_path):
        scheme = CatalogScheme("s", ["NONE"])
        source = FinCatalog(tmp_path / "src.db", scheme, create=True)
        for code in ("A", "B", "C", "D"):
            source.add(FinRecord(
                id_code=code, image_filename=f"/imgs/{code}.png",
                original_image_filename=f"/orig/{code}.jpg",
            ))
        source.delete(2)
        target = FinCatalog(tmp_path / "dst.db", scheme, create=True)

        assert copy_fins(source, target) == 3
        assert target.size_absolute() == source.size() == 3
        copied = [r.image_filename for r in target.all_records()]
        assert copied == ["/imgs/A.png", "/imgs/C.png", "/imgs/D.png"]
        assert target.get_item(1).original_image_filename == "/orig/C.jpg"
        source.close()
        target.close()

    def test_empty_source(self, tmp_path):
        scheme = CatalogScheme("s", ["NONE"])
        source = FinCatalog(tmp_path / "src.db", scheme, create=True)
        target = MagicMock()
        assert copy_fins(source, target) == 0
        target.add.assert_not_called()
        source.close()


class TestOpen:

    def test_create_if_missing(self, lifecycle, tmp_path, config):
        cat = lifecycle.open(tmp_path / "new.db", create_if_missing=True)
        assert cat.status == CatalogStatus.LOADED
        assert cat.scheme == config.default_scheme()
        cat.close()

    def test_existing_current_format(self, lifecycle, tmp_path):
        FinCatalog(tmp_path / "c.db", CatalogScheme("x", ["NONE"]),
                   create=True).close()
        cat = lifecycle.open(tmp_path / "c.db", create_if_missing=True)
        assert cat.scheme.scheme_name == "x"
        cat.close()

    def test_package_level_open(self, tmp_path, config):
        from fincatalog import open_catalog
        cat = open_catalog(tmp_path / "pkg.db", create_if_missing=True,
                           config=config)
        assert cat.status == CatalogStatus.LOADED
        cat.close()

    def test_missing_without_create(self, lifecycle, tmp_path):
        cat = lifecycle.open(tmp_path / "missing.db")
        assert isinstance(cat, InvalidCatalog)
        assert cat.status == CatalogStatus.FILE_NOT_FOUND

    def test_unknown_format(self, lifecycle, tmp_path):
        path = tmp_path / "photo.db"
        path.write_bytes(b"\x89PNG")
        cat = lifecycle.open(path)
        assert cat.status == CatalogStatus.FILE_NOT_FOUND
        assert path.read_bytes() == b"\x89PNG"

    def test_create_keeps_unknown_file(self, lifecycle, tmp_path):
        path = tmp_path / "g.db"
        path.write_text("hello")
        cat = lifecycle.open(path, create_if_missing=True)
        assert isinstance(cat, InvalidCatalog)
        assert cat.status == CatalogStatus.INVALID_FORMAT
        assert path.read_text() == "hello"

    def test_legacy_is_converted(self, lifecycle, tmp_path):
        path = write_legacy(
            tmp_path / "catalog" / "survey.db", "Legacy", ["NONE", "Tip"],
            [
                {'id_code': "A", 'damage_category': "Tip",
                 'image_filename': "a.png"},
                None,
                {'id_code': "C", 'image_filename': "c.png"},
            ],
        )

        cat = lifecycle.open(path)

        assert isinstance(cat, FinCatalog)
        assert cat.filename == str(path)
        assert cat.scheme == CatalogScheme("Legacy", ["NONE", "Tip"])
        assert cat.size() == 2
        assert cat.get_item(0).image_filename == str(path.parent / "a.png")
        assert (tmp_path / "catalog" / "survey.olddb").is_file()
        cat.close()


class TestOpenExisting:

    def test_unknown_format_not_converted(self, lifecycle, tmp_path):
        path = tmp_path / "text.db"
        path.write_text("hello")
        cat = lifecycle.open_existing(path)
        assert cat.status == CatalogStatus.INVALID_FORMAT
        assert path.read_text() == "hello"

    def test_missing(self, lifecycle, tmp_path):
        cat = lifecycle.open_existing(tmp_path / "nope.db")
        assert cat.status == CatalogStatus.FILE_NOT_FOUND

    def test_broken_sqlite(self, lifecycle, tmp_path):
        path = tmp_path / "broken.db"
        path.write_bytes(b"SQLite format 3\x00" + b"\xff" * 100)
        cat = lifecycle.open_existing(path)
        assert cat.status == CatalogStatus.ERROR_OPENING

    def test_current(self, lifecycle, survey):
        survey.close()
        cat = lifecycle.open_existing(survey.filename)
        assert cat.status == CatalogStatus.LOADED
        assert cat.size() == 2
        cat.close()


class TestConvert:

    def test_extensionless_legacy(self, lifecycle, tmp_path):
        path = write_legacy(tmp_path / "survey", "L", ["NONE"],
                            [{'id_code': "A"}])
        cat = lifecycle.convert(path)
        assert cat.size() == 1
        assert (tmp_path / "survey.old").is_file()
        cat.close()

    def test_previous_conversion_kept(self, lifecycle, tmp_path):
        (tmp_path / "survey.olddb").write_text("earlier")
        path = write_legacy(tmp_path / "survey.db", "L", ["NONE"], [])
        lifecycle.convert(path).close()
        assert (tmp_path / "survey.olddb").read_text() == "earlier"
        assert (tmp_path / "survey[2].olddb").is_file()

    def test_unreadable_legacy(self, lifecycle, tmp_path):
        path = tmp_path / "survey.db"
        path.write_text("#DARWIN-OLDDB\n{broken\n")
        cat = lifecycle.convert(path)
        assert cat.status == CatalogStatus.ERROR_OPENING
        assert path.read_text() == "#DARWIN-OLDDB\n{broken\n"
        assert not (tmp_path / "survey.olddb").exists()

    def test_header_not_an_object(self, lifecycle, tmp_path):
        path = tmp_path / "survey.db"
        path.write_text("#DARWIN-OLDDB\n[]\n")
        cat = lifecycle.convert(path)
        assert cat.status == CatalogStatus.ERROR_OPENING
        assert path.is_file()

    def test_category_outside_scheme_restores_legacy(self, lifecycle, tmp_path):
        path = write_legacy(tmp_path / "survey.db", "L", ["Upper"],
                            [{'id_code': "A", 'image_filename': "a.png"}])
        legacy_text = path.read_text()

        cat = lifecycle.open(path)

        assert isinstance(cat, InvalidCatalog)
        assert cat.status == CatalogStatus.ERROR_OPENING
        assert cat.filename == str(path)
        assert path.read_text() == legacy_text
        assert not (tmp_path / "survey.olddb").exists()

        again = lifecycle.open(path)
        assert isinstance(again, InvalidCatalog)
        assert path.read_text() == legacy_text


class TestDuplicate:

    def test_duplicate(self, lifecycle, survey, tmp_path):
        copy = lifecycle.duplicate(survey, tmp_path / "copy.db")
        assert copy.scheme == survey.scheme
        assert copy.size() == survey.size()
        assert [r.image_filename for r in copy.all_records()] == \
            [r.image_filename for r in survey.all_records()]
        copy.close()

    def test_refuses_existing(self, lifecycle, survey, tmp_path):
        (tmp_path / "copy.db").touch()
        with pytest.raises(FileExistsError):
            lifecycle.duplicate(survey, tmp_path / "copy.db")


class TestCreateCatalog:

    def test_builds_area(self, lifecycle, data_root):
        cat = lifecycle.create_catalog("fresh.db", "gulf")
        area = survey_area_path(data_root, "gulf")
        assert cat.filename == str(area / "catalog" / "fresh.db")
        for sub in AREA_SUBFOLDERS:
            assert (area / sub).is_dir()
        assert lifecycle.survey_areas() == ["gulf"]
        assert lifecycle.catalog_names("gulf") == ["fresh.db"]
        cat.close()

    def test_default_area(self, lifecycle, config):
        cat = lifecycle.create_catalog("x")
        assert config.current_survey_area in cat.filename
        cat.close()

    def test_refuses_existing(self, lifecycle, survey):
        with pytest.raises(FileExistsError):
            lifecycle.create_catalog("survey", "area1")


class TestBackup:

    def test_backup_name_and_contents(self, lifecycle, survey, data_root):
        result = lifecycle.backup(survey)

        assert result.status == LifecycleStatus.OK
        assert result.path.parent == data_root / "backups"
        assert result.path.name == backup_filename(survey.filename)
        names = set(list_archive_members(result.path))
        assert {"survey.db", "a_mod.png", "a.png", "b_mod.png", "b.png"} <= names
        assert survey.stream_open

    def test_second_backup_same_day(self, lifecycle, survey):
        first = lifecycle.backup(survey).path
        second = lifecycle.backup(survey).path
        third = lifecycle.backup(survey).path
        assert second.name == first.stem + "[2].zip"
        assert third.name == first.stem + "[3].zip"

    def test_partial_is_success(self, config, survey):
        lc = CatalogLifecycle(config, FakeArchiver(create_code=1))
        result = lc.backup(survey)
        assert result.status == LifecycleStatus.PARTIAL_ARCHIVE_FAILURE
        assert result.ok

    def test_tool_failure(self, config, survey):
        result = CatalogLifecycle(config, FakeArchiver(create_code=2)).backup(survey)
        assert result.status == LifecycleStatus.ARCHIVE_TOOL_FAILURE
        assert not result

    def test_missing_tool_translated(self, config, survey):
        archiver = MagicMock()
        archiver.create.side_effect = ArchiveToolError("7z not found")
        result = CatalogLifecycle(config, archiver).backup(survey)
        assert result.status == LifecycleStatus.ARCHIVE_TOOL_FAILURE
        assert "7z not found" in result.message
        assert survey.stream_open

    def test_data_root_unavailable(self, tmp_path, survey):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        config = CatalogConfig(data_root=str(blocker / "data"),
                               temp_dir=str(tmp_path / "tmp"))
        result = CatalogLifecycle(config, FakeArchiver()).backup(survey)
        assert result.status == LifecycleStatus.UNREADABLE


class TestArea1Scenario:

    def test_backup_of_mixed_case_references(self, tmp_path):
        root = tmp_path / "area1"
        config = CatalogConfig(data_root=str(root),
                               temp_dir=str(tmp_path / "tmp"))
        archiver = FakeArchiver()
        lifecycle = CatalogLifecycle(config, archiver)

        cat = lifecycle.create_catalog("area1_survey", "area1")
        folder = root / "surveyAreas" / "area1" / "catalog"
        shared = write_png(folder / "Fin.png")
        other = write_png(folder / "other.png")
        cat.add(FinRecord(id_code="1", image_filename=str(shared)))
        cat.add(FinRecord(id_code="2",
                          image_filename=str(folder / "FIN.PNG")))
        cat.add(FinRecord(id_code="3", image_filename=str(other)))

        assert len(build_manifest(cat)) == 3

        result = lifecycle.backup(cat)
        assert result.ok
        assert re.search(
            r"area1_survey_[A-Z][a-z]{2}_\d{2}_\d{4}\.zip$", result.path.name,
        )
        assert result.path.name.startswith("area1_area1_survey_")
        # list file + catalog + 2 images
        assert len(archiver.listed) == 4
        cat.close()


class TestExportCatalog:

    def test_export(self, lifecycle, survey, tmp_path):
        result = lifecycle.export_catalog(survey, tmp_path / "out" / "mine")
        assert result.ok
        assert result.path == tmp_path / "out" / "mine.zip"
        assert zipfile.is_zipfile(result.path)

    def test_declined_overwrite(self, lifecycle, survey, tmp_path):
        dest = tmp_path / "mine.zip"
        dest.write_bytes(b"keep")
        result = lifecycle.export_catalog(survey, dest)
        assert result.status == LifecycleStatus.USER_DECLINED_OVERWRITE
        assert dest.read_bytes() == b"keep"

    def test_confirmed_overwrite(self, config, archiver, survey, tmp_path):
        dest = tmp_path / "mine.zip"
        dest.write_bytes(b"old")
        confirm = MagicMock(return_value=True)
        lc = CatalogLifecycle(config, archiver, confirm_overwrite=confirm)

        result = lc.export_catalog(survey, dest)

        assert result.ok
        assert zipfile.is_zipfile(dest)
        confirm.assert_called_once_with(
            "REPLACE existing file?",
            "Selected EXPORT file already exists!",
            str(dest),
        )

    def test_replace_failure(self, config, archiver, survey, tmp_path):
        dest = tmp_path / "mine.zip"
        dest.mkdir()
        lc = CatalogLifecycle(config, archiver,
                              confirm_overwrite=MagicMock(return_value=True))

        result = lc.export_catalog(survey, dest)

        assert result.status == LifecycleStatus.UNREADABLE
        assert dest.is_dir()
        assert archiver.calls == []


class TestRestore:

    def test_restore_into_named_area(self, lifecycle, survey, data_root):
        backup = lifecycle.backup(survey).path
        survey.close()
        area = survey_area_path(data_root, "area1")
        (area / "catalog" / "survey.db").unlink()
        (area / "catalog" / "a_mod.png").unlink()
        (area / "sightings").rmdir()

        result = lifecycle.restore(backup)

        assert result.status == LifecycleStatus.OK
        assert result.path == area / "catalog" / "survey.db"
        assert (area / "sightings").is_dir()
        restored = FinCatalog(result.path)
        assert restored.size() == 2
        assert restored.get_item(0).image_filename == \
            str(area / "catalog" / "a_mod.png")
        assert (area / "catalog" / "a_mod.png").is_file()
        restored.close()

    def test_local_images_preserved(self, lifecycle, survey, data_root):
        backup = lifecycle.backup(survey).path
        image = survey_area_path(data_root, "area1") / "catalog" / "b.png"
        image.write_bytes(b"edited locally")

        lifecycle.restore(backup)

        assert image.read_bytes() == b"edited locally"

    def test_inspect_backup(self, lifecycle, survey):
        backup = lifecycle.backup(survey).path
        assert lifecycle.inspect_backup(backup) == ("area1", "survey.db")

    def test_missing_backup(self, lifecycle, tmp_path):
        result = lifecycle.restore(tmp_path / "area1_x_Jan_01_2026.zip")
        assert result.status == LifecycleStatus.UNREADABLE

    def test_archive_without_catalog(self, lifecycle, tmp_path):
        path = tmp_path / "area1_x.zip"
        with zipfile.ZipFile(path, 'w') as zf:
            zf.writestr("fin.png", b"")
        result = lifecycle.restore(path)
        assert result.status == LifecycleStatus.FORMAT_UNRECOGNIZED

    def test_name_without_area(self, lifecycle, tmp_path):
        result = lifecycle.restore(tmp_path / "_x.zip")
        assert result.status == LifecycleStatus.FORMAT_UNRECOGNIZED


class TestImportCatalog:

    def test_import_into_new_area(self, lifecycle, survey, data_root,
                                  tmp_path):
        exported = lifecycle.export_catalog(survey, tmp_path / "e.zip").path

        result = lifecycle.import_catalog(exported, "newArea")

        area = survey_area_path(data_root, "newArea")
        assert result.status == LifecycleStatus.OK
        assert result.path == area / "catalog" / "survey.db"
        for sub in AREA_SUBFOLDERS:
            assert (area / sub).is_dir()
        imported = FinCatalog(result.path)
        assert imported.get_item(1).original_image_filename == \
            str(area / "catalog" / "b.png")
        imported.close()

    def test_extract_failure(self, config, survey, tmp_path):
        exported = CatalogLifecycle(config, FakeArchiver()).export_catalog(
            survey, tmp_path / "e.zip",
        ).path
        lc = CatalogLifecycle(config, FakeArchiver(extract_code=2))
        result = lc.import_catalog(exported, "x")
        assert result.status == LifecycleStatus.ARCHIVE_TOOL_FAILURE

    def test_missing_tool(self, config, survey, tmp_path):
        exported = CatalogLifecycle(config, FakeArchiver()).export_catalog(
            survey, tmp_path / "e.zip",
        ).path
        archiver = MagicMock()
        archiver.extract.side_effect = ArchiveToolError("gone")
        result = CatalogLifecycle(config, archiver).import_catalog(exported, "x")
        assert result.status == LifecycleStatus.ARCHIVE_TOOL_FAILURE


class TestFinz:

    def test_export_and_import(self, lifecycle, survey, tmp_path):
        record = survey.get_item(1)
        exported = lifecycle.export_finz(record, tmp_path / "b")
        assert exported.ok
        assert exported.path.suffix == ".finz"

        other = FinCatalog(
            tmp_path / "o" / "other.db", survey.scheme, create=True,
        )
        imported = lifecycle.import_finz(other, exported.path)
        assert imported.ok
        assert other.get_item(0).damage_category == "Upper"
        other.close()

    def test_missing_tool_on_export(self, config, survey, tmp_path):
        archiver = MagicMock()
        archiver.create.side_effect = ArchiveToolError("gone")
        result = CatalogLifecycle(config, archiver).export_finz(
            survey.get_item(0), tmp_path / "a.finz",
        )
        assert result.status == LifecycleStatus.ARCHIVE_TOOL_FAILURE

    def test_missing_modified_image(self, lifecycle, tmp_path):
        result = lifecycle.export_finz(
            FinRecord(image_filename=str(tmp_path / "none.png")),
            tmp_path / "a.finz",
        )
        assert result.status == LifecycleStatus.MISSING_MODIFIED_IMAGE


class TestDefaults:

    def test_default_archiver_uses_config(self, config):
        lc = CatalogLifecycle(config)
        assert lc.archiver._executable == config.archiver_executable

    def test_default_confirm_declines(self, config):
        assert CatalogLifecycle(config).confirm_overwrite("t", "m", "x") is False

    def test_loads_config_when_missing(self):
        with patch("fincatalog.core.lifecycle.load_config",
                   return_value=CatalogConfig(archiver_executable="7za")):
            assert CatalogLifecycle().archiver._executable == "7za"
