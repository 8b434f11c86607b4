"""Shared pytest fixtures for process-planner tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from process_planner.config import StorageConfig
from process_planner.storage import JsonFileBackend, Storage, StorageBackend, open_storage
from process_planner.storage.sqlite_backend import SqliteBackend

BACKENDS = ["sqlite", "json"]


def make_backend(kind: str, data_dir: Path) -> StorageBackend:
    """Build an unseeded backend of the given kind inside data_dir."""
    config = StorageConfig(data_dir=data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    if kind == "sqlite":
        return SqliteBackend(config.sqlite_path)
    return JsonFileBackend(config.counters_path, config.annotations_path)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Storage directory that does not exist yet."""
    return tmp_path / "data"


@pytest.fixture(params=BACKENDS)
def backend(request: pytest.FixtureRequest, data_dir: Path) -> StorageBackend:
    """Each backend in turn, empty and unseeded."""
    instance = make_backend(request.param, data_dir)
    yield instance
    instance.close()


@pytest.fixture(params=BACKENDS)
def storage(request: pytest.FixtureRequest, data_dir: Path) -> Storage:
    """Storage opened through open_storage() on each backend (seeded on first run)."""
    config = StorageConfig(data_dir=data_dir, use_sqlite=request.param == "sqlite")
    opened = open_storage(config)
    assert opened.backend_name == request.param
    yield opened
    opened.close()
