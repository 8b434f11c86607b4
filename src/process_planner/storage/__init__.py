"""Counter and annotation storage with SQLite and JSON file backends.

The SQLite modules (base, migrations, sqlite_backend) are imported on demand
so the package still loads on interpreters built without sqlite3.
"""

from process_planner.storage.backend import MAX_COUNT, AnnotationRecord, StorageBackend, clamp_count
from process_planner.storage.exceptions import (
    CorruptStoreError,
    DatabaseError,
    MigrationError,
    StorageError,
    StorageInitError,
)
from process_planner.storage.facade import Storage, open_storage
from process_planner.storage.json_backend import JsonFileBackend, counter_key
from process_planner.storage.seed import (
    DURATION_BUCKETS,
    EXAMPLE_ITEM_IDS,
    base_for_id,
    seed_value,
    vary_by_duration,
)

__all__ = [
    # Backends
    "MAX_COUNT",
    "AnnotationRecord",
    "JsonFileBackend",
    "StorageBackend",
    "clamp_count",
    "counter_key",
    # Exceptions
    "CorruptStoreError",
    "DatabaseError",
    "MigrationError",
    "StorageError",
    "StorageInitError",
    # Facade
    "Storage",
    "open_storage",
    # Seeding
    "DURATION_BUCKETS",
    "EXAMPLE_ITEM_IDS",
    "base_for_id",
    "seed_value",
    "vary_by_duration",
]
