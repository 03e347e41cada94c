# -*- coding: utf-8 -*-
"""
Catalog Database - SQLite-backed fin catalog (current format).

Provides the FinCatalog class, the current on-disk catalog format. Fin
records are addressed either by absolute index (stable positions that
keep the holes left by deletions) or by compacted index.

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
import sqlite3
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# FinCatalog internal
from fincatalog.catalog.models import (
    CatalogScheme,
    CatalogStatus,
    FinRecord,
    ImageMod,
    ImageModType,
)


SQLITE_HEADER = b"SQLite format 3\x00"

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE TABLE IF NOT EXISTS damage_categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id INTEGER NOT NULL,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS individuals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    id_code TEXT DEFAULT '',
    name TEXT DEFAULT '',
    fin_filename TEXT DEFAULT '',
    fk_damage_category_id INTEGER REFERENCES damage_categories(id)
);

CREATE TABLE IF NOT EXISTS images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fk_individual_id INTEGER REFERENCES individuals(id) ON DELETE CASCADE,
    image_filename TEXT,
    original_image_filename TEXT DEFAULT NULL
);

CREATE TABLE IF NOT EXISTS image_modifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    operation INTEGER NOT NULL,
    value1 INTEGER DEFAULT 0,
    value2 INTEGER DEFAULT 0,
    value3 INTEGER DEFAULT 0,
    value4 INTEGER DEFAULT 0,
    order_id INTEGER NOT NULL,
    fk_image_id INTEGER REFERENCES images(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS img_indiv ON images (fk_individual_id);
CREATE INDEX IF NOT EXISTS imgmod_img ON image_modifications (fk_image_id);
CREATE INDEX IF NOT EXISTS dmgcat_name ON damage_categories (name);
"""

_SCHEMA_VERSION_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""

_CURRENT_SCHEMA_VERSION = 1

# Migration functions: (target_version, callable)
_MIGRATIONS: List[tuple] = [
    # (1, lambda conn: None),  # Version 1 is the initial schema
]


class FinCatalog:
    """SQLite-backed catalog of fin records.

    Parameters
    ----------
    db_path : Path
        Path to the SQLite catalog file.
    scheme : Optional[CatalogScheme]
        Scheme written into a newly created catalog. Ignored when an
        existing catalog already carries one.
    create : bool
        Create the file (and its parent folder) if it does not exist.
        When False, a missing file yields status ``FILE_NOT_FOUND``
        and an unreadable one ``ERROR_OPENING`` instead of raising.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        scheme: Optional[CatalogScheme] = None,
        create: bool = False,
    ) -> None:
        self._db_path = Path(db_path).absolute()
        self._scheme = scheme or CatalogScheme()
        self._conn: Optional[sqlite3.Connection] = None
        self._status = CatalogStatus.LOADED

        if not create and not self._db_path.is_file():
            logger.warning("Catalog not found: %s", self._db_path)
            self._status = CatalogStatus.FILE_NOT_FOUND
            return

        if create:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self.open_stream()
            if create:
                self._init_schema()
                self._run_migrations()
            self._scheme = self._load_or_store_scheme(create)
        except sqlite3.DatabaseError as e:
            logger.error("Failed to open catalog %s: %s", self._db_path, e)
            self._status = CatalogStatus.ERROR_OPENING
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @staticmethod
    def is_type(path: Union[str, Path]) -> bool:
        """True when ``path`` is a file carrying the SQLite header."""
        try:
            with open(path, 'rb') as f:
                return f.read(len(SQLITE_HEADER)) == SQLITE_HEADER
        except OSError:
            return False

    # ------------------------------------------------------------------
    # Stream handling
    # ------------------------------------------------------------------

    def open_stream(self) -> None:
        """(Re)connect to the backing file."""
        if self._conn is not None:
            return
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.row_factory = sqlite3.Row

    def close_stream(self) -> None:
        """Release the backing file so other processes may read it."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def stream_open(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        """Close the database connection."""
        self.close_stream()

    def __enter__(self) -> 'FinCatalog':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"Catalog stream is closed: {self._db_path}")
        return self._conn

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        conn = self._connection()
        conn.executescript(_SCHEMA_SQL)
        conn.executescript(_SCHEMA_VERSION_SQL)
        conn.commit()

        row = conn.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_CURRENT_SCHEMA_VERSION,),
            )
            conn.commit()

    def _run_migrations(self) -> None:
        """Run any pending schema migrations."""
        conn = self._connection()
        row = conn.execute("SELECT version FROM schema_version").fetchone()
        current = row['version'] if row else 0

        for target_version, migrate_fn in _MIGRATIONS:
            if target_version > current:
                logger.info(
                    "Running migration to schema version %d", target_version
                )
                migrate_fn(conn)
                conn.execute(
                    "UPDATE schema_version SET version = ?",
                    (target_version,),
                )
                conn.commit()
                current = target_version

    def _load_or_store_scheme(self, create: bool) -> CatalogScheme:
        """Read the stored scheme, writing ours first for a new file."""
        conn = self._connection()
        rows = conn.execute(
            "SELECT name FROM damage_categories ORDER BY order_id"
        ).fetchall()
        name_row = conn.execute(
            "SELECT value FROM settings WHERE key = 'CatalogSchemeName'"
        ).fetchone()

        if create and not rows and name_row is None:
            conn.execute(
                "INSERT INTO settings (key, value) "
                "VALUES ('CatalogSchemeName', ?)",
                (self._scheme.scheme_name,),
            )
            for order, category in enumerate(self._scheme.category_names):
                conn.execute(
                    "INSERT INTO damage_categories (order_id, name) "
                    "VALUES (?, ?)",
                    (order, category),
                )
            conn.commit()
            return self._scheme

        return CatalogScheme(
            scheme_name=name_row['value'] if name_row else '',
            category_names=[r['name'] for r in rows],
        )

    @property
    def schema_version(self) -> int:
        """Current schema version."""
        row = self._connection().execute(
            "SELECT version FROM schema_version"
        ).fetchone()
        return row['version'] if row else 0

    # ------------------------------------------------------------------
    # Store interface
    # ------------------------------------------------------------------

    @property
    def filename(self) -> str:
        return str(self._db_path)

    @property
    def status(self) -> CatalogStatus:
        return self._status

    @property
    def scheme(self) -> CatalogScheme:
        return self._scheme

    def size_absolute(self) -> int:
        """Positional size, counting holes left by deleted records."""
        row = self._connection().execute(
            "SELECT seq FROM sqlite_sequence WHERE name = 'individuals'"
        ).fetchone()
        return int(row['seq']) if row else 0

    def size(self) -> int:
        """Number of records present."""
        row = self._connection().execute(
            "SELECT COUNT(*) AS n FROM individuals"
        ).fetchone()
        return int(row['n'])

    def get_item_absolute(self, index: int) -> Optional[FinRecord]:
        """Record at absolute position ``index``, or None for a hole."""
        if index < 0:
            return None
        row = self._connection().execute(
            "SELECT * FROM individuals WHERE id = ?", (index + 1,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def get_item(self, index: int) -> Optional[FinRecord]:
        """Record at compacted position ``index`` (holes excluded)."""
        if index < 0:
            return None
        row = self._connection().execute(
            "SELECT * FROM individuals ORDER BY id LIMIT 1 OFFSET ?",
            (index,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def all_records(self) -> List[FinRecord]:
        """All present records in absolute order."""
        rows = self._connection().execute(
            "SELECT * FROM individuals ORDER BY id"
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def add(self, record: FinRecord) -> int:
        """Insert a copy of ``record``.

        The damage category must already exist in the catalog scheme;
        it is never created here.

        Parameters
        ----------
        record : FinRecord

        Returns
        -------
        int
            Row ID of the inserted record.

        Raises
        ------
        ValueError
            If the record's damage category is not in the scheme.
        """
        conn = self._connection()
        cat_row = conn.execute(
            "SELECT id FROM damage_categories WHERE UPPER(name) = UPPER(?) "
            "ORDER BY order_id LIMIT 1",
            (record.damage_category or '',),
        ).fetchone()
        if cat_row is None:
            raise ValueError(
                f"Damage category {record.damage_category!r} is not part of "
                f"scheme {self._scheme.scheme_name!r}"
            )

        cursor = conn.execute(
            "INSERT INTO individuals "
            "(id_code, name, fin_filename, fk_damage_category_id) "
            "VALUES (?, ?, ?, ?)",
            (record.id_code, record.name, record.fin_filename, cat_row['id']),
        )
        record_id = cursor.lastrowid

        cursor = conn.execute(
            "INSERT INTO images "
            "(fk_individual_id, image_filename, original_image_filename) "
            "VALUES (?, ?, ?)",
            (
                record_id,
                self._to_stored(record.image_filename),
                self._to_stored(record.original_image_filename),
            ),
        )
        image_id = cursor.lastrowid

        for order, mod in enumerate(record.image_mods):
            conn.execute(
                "INSERT INTO image_modifications "
                "(operation, value1, value2, value3, value4, order_id, "
                "fk_image_id) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (mod.op.value,) + mod.values + (order, image_id),
            )

        conn.commit()
        return record_id

    def delete(self, record_id: int) -> bool:
        """Remove a record, leaving a hole at its absolute position.

        Returns
        -------
        bool
            True if a record was removed.
        """
        cursor = self._connection().execute(
            "DELETE FROM individuals WHERE id = ?", (record_id,),
        )
        self._connection().commit()
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def catalog_folder(self) -> Path:
        return self._db_path.parent

    def _to_stored(self, path: str) -> str:
        """Store images inside the catalog folder by relative name."""
        if not path:
            return ''
        folder = os.path.normpath(str(self.catalog_folder))
        full = os.path.normpath(path)
        if os.path.isabs(full) and os.path.dirname(full) == folder:
            return os.path.basename(full)
        return path

    def _to_absolute(self, stored: Optional[str]) -> str:
        if not stored:
            return ''
        if os.path.isabs(stored):
            return stored
        return os.path.normpath(os.path.join(str(self.catalog_folder), stored))

    def _row_to_record(self, row: sqlite3.Row) -> FinRecord:
        """Convert an individuals row to a FinRecord instance."""
        conn = self._connection()
        record_id = row['id']

        cat_row = conn.execute(
            "SELECT name FROM damage_categories WHERE id = ?",
            (row['fk_damage_category_id'],),
        ).fetchone()

        image_row = conn.execute(
            "SELECT * FROM images WHERE fk_individual_id = ? "
            "ORDER BY id LIMIT 1",
            (record_id,),
        ).fetchone()

        mods: List[ImageMod] = []
        image_filename = original_filename = ''
        if image_row is not None:
            image_filename = self._to_absolute(image_row['image_filename'])
            original_filename = self._to_absolute(
                image_row['original_image_filename']
            )
            mod_rows = conn.execute(
                "SELECT * FROM image_modifications WHERE fk_image_id = ? "
                "ORDER BY order_id",
                (image_row['id'],),
            ).fetchall()
            mods = [
                ImageMod(
                    ImageModType(m['operation']),
                    m['value1'], m['value2'], m['value3'], m['value4'],
                )
                for m in mod_rows
            ]

        return FinRecord(
            id=record_id,
            id_code=row['id_code'] or '',
            name=row['name'] or '',
            damage_category=cat_row['name'] if cat_row else '',
            image_filename=image_filename,
            original_image_filename=original_filename,
            image_mods=mods,
            fin_filename=row['fin_filename'] or '',
        )

    def __repr__(self) -> str:
        return f"FinCatalog({self.filename!r}, status={self._status.value})"
