"""Process-wide storage context with one-time backend selection."""

from __future__ import annotations

import logging

from process_planner.config import StorageConfig
from process_planner.storage.backend import AnnotationRecord, StorageBackend
from process_planner.storage.exceptions import DatabaseError, MigrationError, StorageInitError
from process_planner.storage.json_backend import JsonFileBackend

LOGGER = logging.getLogger(__name__)


class Storage:
    """Counter and annotation operations over whichever backend was chosen.

    Created once at startup by open_storage() and handed to every caller.
    The backend never changes for the lifetime of the object.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def __enter__(self) -> Storage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._backend.close()

    # Counters

    def get_counts_for_duration(self, duration: str) -> dict[str, int]:
        return self._backend.get_counts_for_duration(duration)

    def increment(self, item_id: str, duration: str, delta: int = 1) -> None:
        LOGGER.debug("increment %s::%s by %d", duration, item_id, delta)
        self._backend.increment(item_id, duration, delta)

    def set_count(self, item_id: str, duration: str, value: int) -> None:
        LOGGER.debug("set %s::%s to %d", duration, item_id, value)
        self._backend.set_count(item_id, duration, value)

    def ensure_seed(self, item_id: str, duration: str) -> None:
        self._backend.ensure_seed(item_id, duration)

    def counter_rows(self) -> int:
        return self._backend.counter_rows()

    # Annotations

    def upsert_annotation(self, record: AnnotationRecord) -> None:
        LOGGER.debug("upsert annotation %s on %s", record.detail_id, record.item_id)
        self._backend.upsert_annotation(record)

    def list_annotations(self) -> list[AnnotationRecord]:
        return self._backend.list_annotations()


def _open_backend(config: StorageConfig) -> StorageBackend:
    if not config.use_sqlite:
        LOGGER.info("SQLite disabled by configuration")
        return JsonFileBackend(config.counters_path, config.annotations_path)

    try:
        from process_planner.storage.sqlite_backend import SqliteBackend
    except ImportError as e:
        LOGGER.warning("SQLite driver unavailable (%s); falling back to JSON files", e)
        return JsonFileBackend(config.counters_path, config.annotations_path)

    # Only a missing driver selects JSON; a planner.db that fails to open is fatal
    try:
        return SqliteBackend(config.sqlite_path)
    except (DatabaseError, MigrationError) as e:
        raise StorageInitError(f"Cannot open {config.sqlite_path}: {e}") from e


def open_storage(config: StorageConfig | None = None) -> Storage:
    """
    Prepare the data directory, pick a backend and seed a fresh store.

    Raises: StorageInitError if the data directory cannot be created or an
    existing planner.db cannot be opened or migrated.
    """
    config = config or StorageConfig.from_env()
    try:
        config.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageInitError(f"Cannot create storage directory {config.data_dir}: {e}") from e

    backend = _open_backend(config)
    LOGGER.info("Using %s storage in %s", backend.name, config.data_dir)

    if backend.counter_rows() == 0:
        seeded = backend.seed_examples()
        LOGGER.info("Seeded %d example counters", seeded)

    return Storage(backend)
