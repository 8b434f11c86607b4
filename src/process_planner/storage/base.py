"""SQLite connection for planner.db and the schema migration runner."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from process_planner.storage.exceptions import DatabaseError, MigrationError

LOGGER = logging.getLogger(__name__)

if TYPE_CHECKING:
    from process_planner.storage.migrations import Migration


def utcnow() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Database:
    """One SQLite connection shared by every request thread of the process."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            self.db_path,
            isolation_level=None,  # autocommit; BEGIN only inside transaction()
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode = WAL")
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @property
    def conn(self) -> sqlite3.Connection:
        """Open the connection on first use."""
        if self._conn is None:
            try:
                self._conn = self._connect()
            except (sqlite3.Error, OSError) as e:
                raise DatabaseError(f"Cannot open {self.db_path}: {e}") from e
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.conn
        conn.execute("BEGIN")
        try:
            yield conn
        except Exception:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    def table_exists(self, table: str) -> bool:
        try:
            row = self.conn.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
                (table,),
            ).fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot inspect {self.db_path}: {e}") from e
        return row is not None

    def get_schema_version(self) -> int:
        """Highest applied migration, 0 for a new or unversioned database."""
        if not self.table_exists("schema_version"):
            return 0
        try:
            (version,) = self.conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot read schema version: {e}") from e
        return version or 0

    def column_names(self, table: str) -> set[str]:
        try:
            return {row["name"] for row in self.conn.execute(f"PRAGMA table_info({table})")}
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot inspect table {table}: {e}") from e

    def _apply(self, migration: Migration) -> None:
        with self.transaction() as conn:
            for statement in migration.statements:
                conn.execute(statement)
            for table, column, declaration in migration.add_columns:
                if column in self.column_names(table):
                    LOGGER.debug("%s.%s already present", table, column)
                    continue
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {declaration}")
            conn.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (migration.version, utcnow()),
            )

    def run_migrations(self, migrations: list[Migration]) -> int:
        """
        Bring the schema up to the last migration.

        Databases written before versioning existed report version 0; their
        tables are reused and only the missing columns are added.

        Returns: Number of migrations applied.
        """
        current = self.get_schema_version()
        pending = [m for m in migrations if m.version > current]
        if not pending:
            LOGGER.debug("Schema of %s is current (version %d)", self.db_path, current)
            return 0

        for migration in pending:
            try:
                self._apply(migration)
            except (sqlite3.Error, DatabaseError) as e:
                LOGGER.error("Migration %d (%s) failed: %s", migration.version, migration.name, e)
                raise MigrationError(f"Migration {migration.version} ({migration.name}) failed: {e}") from e
            LOGGER.info("Applied migration %d: %s", migration.version, migration.name)
        return len(pending)
