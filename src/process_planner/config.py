"""Runtime configuration for storage and the HTTP server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DATA_DIR_ENV = "PLANNER_DATA_DIR"
USE_SQLITE_ENV = "PLANNER_USE_SQLITE"


@dataclass
class StorageConfig:
    data_dir: Path = Path(".data")
    use_sqlite: bool = True

    @property
    def sqlite_path(self) -> Path:
        return self.data_dir / "planner.db"

    @property
    def counters_path(self) -> Path:
        return self.data_dir / "counters.json"

    @property
    def annotations_path(self) -> Path:
        return self.data_dir / "annotations.json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StorageConfig":
        """Build config from PLANNER_DATA_DIR and PLANNER_USE_SQLITE ("0" disables)."""
        env = os.environ if environ is None else environ
        data_dir = env.get(DATA_DIR_ENV)
        return cls(
            data_dir=Path(data_dir) if data_dir else Path(".data"),
            use_sqlite=env.get(USE_SQLITE_ENV, "1") != "0",
        )


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000
