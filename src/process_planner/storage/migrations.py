"""Schema migrations for planner.db."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Migration:
    """A single schema migration."""

    version: int
    name: str
    statements: list[str]
    # (table, column, declaration); skipped when the column already exists
    add_columns: list[tuple[str, str, str]] = field(default_factory=list)


# Migration 001: counters and annotations. IF NOT EXISTS keeps databases
# created before schema versioning usable.
MIGRATION_001_INITIAL = Migration(
    version=1,
    name="initial_schema",
    statements=[
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS counters (
            item_id TEXT NOT NULL,
            duration_bucket TEXT NOT NULL,
            count INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (item_id, duration_bucket)
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS annotations (
            detail_id TEXT PRIMARY KEY,
            item_id TEXT NOT NULL,
            section TEXT NOT NULL,
            parent_title TEXT,
            text TEXT NOT NULL,
            author TEXT,
            created_at INTEGER NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_counters_bucket ON counters(duration_bucket)",
        "CREATE INDEX IF NOT EXISTS idx_annotations_created ON annotations(created_at)",
    ],
)

# Migration 002: display metadata added after the first release
MIGRATION_002_DISPLAY_COLUMNS = Migration(
    version=2,
    name="add_annotation_display_columns",
    statements=[],
    add_columns=[
        ("annotations", "phase_title", "TEXT"),
        ("annotations", "allowed_durations", "TEXT"),
    ],
)

# All migrations in order
ALL_MIGRATIONS: list[Migration] = [
    MIGRATION_001_INITIAL,
    MIGRATION_002_DISPLAY_COLUMNS,
]


def get_all_migrations() -> list[Migration]:
    """Return all migrations in version order."""
    return ALL_MIGRATIONS
