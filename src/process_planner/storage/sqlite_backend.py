"""SQLite-backed counter and annotation store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from process_planner.storage.backend import MAX_COUNT, AnnotationRecord, StorageBackend, clamp_count, now_ms
from process_planner.storage.base import Database
from process_planner.storage.exceptions import DatabaseError, MigrationError
from process_planner.storage.migrations import get_all_migrations
from process_planner.storage.seed import example_seed_rows, seed_value

LOGGER = logging.getLogger(__name__)


class SqliteBackend(StorageBackend):
    """Counters and annotations in two tables of planner.db.

    Every mutation is a single upsert statement, so concurrent increments
    are not lost.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Connect to or create planner.db. Runs migrations if needed."""
        self._db = Database(db_path)
        try:
            self._db.run_migrations(get_all_migrations())
        except (DatabaseError, MigrationError):
            self._db.close()
            raise

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def conn(self) -> sqlite3.Connection:
        """Access underlying connection."""
        return self._db.conn

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def get_counts_for_duration(self, duration: str) -> dict[str, int]:
        try:
            cursor = self.conn.execute(
                "SELECT item_id, count FROM counters WHERE duration_bucket = ?",
                (duration,),
            )
            return {row["item_id"]: row["count"] for row in cursor}
        except sqlite3.Error as e:
            raise DatabaseError(f"Get counts for {duration} failed: {e}") from e

    def increment(self, item_id: str, duration: str, delta: int) -> None:
        # Raw delta within [0, MAX_COUNT]. The JSON backend clamps to one step instead.
        delta = max(-MAX_COUNT, min(delta, MAX_COUNT))
        try:
            self.conn.execute(
                """
                INSERT INTO counters (item_id, duration_bucket, count)
                VALUES (:item_id, :duration, MAX(0, :delta))
                ON CONFLICT(item_id, duration_bucket)
                DO UPDATE SET count = MAX(0, MIN(:max_count, counters.count + :delta))
                """,
                {"item_id": item_id, "duration": duration, "delta": delta, "max_count": MAX_COUNT},
            )
        except (sqlite3.Error, OverflowError) as e:
            raise DatabaseError(f"Increment {duration}::{item_id} failed: {e}") from e

    def set_count(self, item_id: str, duration: str, value: int) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO counters (item_id, duration_bucket, count)
                VALUES (?, ?, ?)
                ON CONFLICT(item_id, duration_bucket)
                DO UPDATE SET count = excluded.count
                """,
                (item_id, duration, clamp_count(value)),
            )
        except (sqlite3.Error, OverflowError) as e:
            raise DatabaseError(f"Set {duration}::{item_id} failed: {e}") from e

    def ensure_seed(self, item_id: str, duration: str) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO counters (item_id, duration_bucket, count)
                VALUES (?, ?, ?)
                ON CONFLICT(item_id, duration_bucket) DO NOTHING
                """,
                (item_id, duration, seed_value(item_id, duration)),
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Seed {duration}::{item_id} failed: {e}") from e

    def counter_rows(self) -> int:
        try:
            cursor = self.conn.execute("SELECT COUNT(*) FROM counters")
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseError(f"Count counters failed: {e}") from e

    def seed_examples(self) -> int:
        rows = example_seed_rows()
        try:
            with self._db.transaction() as conn:
                conn.executemany(
                    """
                    INSERT INTO counters (item_id, duration_bucket, count)
                    VALUES (?, ?, ?)
                    ON CONFLICT(item_id, duration_bucket) DO NOTHING
                    """,
                    rows,
                )
            return len(rows)
        except sqlite3.Error as e:
            raise DatabaseError(f"Seeding example counters failed: {e}") from e

    def upsert_annotation(self, record: AnnotationRecord) -> None:
        row = record.to_row()
        if row["created_at"] is None:
            row["created_at"] = now_ms()
        try:
            # created_at is left out of the update so it keeps its first value
            self.conn.execute(
                """
                INSERT INTO annotations (
                    detail_id, item_id, section, parent_title, phase_title,
                    allowed_durations, text, author, created_at
                ) VALUES (
                    :detail_id, :item_id, :section, :parent_title, :phase_title,
                    :allowed_durations, :text, :author, :created_at
                )
                ON CONFLICT(detail_id) DO UPDATE SET
                    item_id = excluded.item_id,
                    section = excluded.section,
                    parent_title = excluded.parent_title,
                    phase_title = excluded.phase_title,
                    allowed_durations = excluded.allowed_durations,
                    text = excluded.text,
                    author = excluded.author
                """,
                row,
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Upsert annotation {record.detail_id} failed: {e}") from e

    def list_annotations(self) -> list[AnnotationRecord]:
        try:
            cursor = self.conn.execute(
                """
                SELECT detail_id, item_id, section, parent_title, phase_title,
                       allowed_durations, text, author, created_at
                FROM annotations
                ORDER BY created_at DESC, rowid ASC
                """
            )
            return [AnnotationRecord.from_row(row) for row in cursor]
        except sqlite3.Error as e:
            raise DatabaseError(f"List annotations failed: {e}") from e
