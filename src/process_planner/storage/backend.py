"""Backend interface shared by the SQLite and JSON file stores."""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Mapping


# Largest value an SQLite INTEGER column holds
MAX_COUNT = 2**63 - 1


def now_ms() -> int:
    """Return current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


def clamp_count(value: int) -> int:
    """Bound a counter value to [0, MAX_COUNT]."""
    return min(max(0, value), MAX_COUNT)


@dataclass
class AnnotationRecord:
    """A user-submitted detail attached to a checklist item."""

    detail_id: str
    item_id: str
    section: str
    text: str
    parent_title: str | None = None
    phase_title: str | None = None
    allowed_durations: list[str] | None = None
    author: str | None = None
    created_at: int | None = None

    def to_row(self) -> dict[str, Any]:
        """Persisted form: allowed_durations as a JSON-encoded string."""
        row = asdict(self)
        if self.allowed_durations is not None:
            row["allowed_durations"] = json.dumps(list(self.allowed_durations))
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> AnnotationRecord:
        raw_durations = _optional(row, "allowed_durations")
        return cls(
            detail_id=row["detail_id"],
            item_id=row["item_id"],
            section=row["section"],
            text=row["text"],
            parent_title=_optional(row, "parent_title"),
            phase_title=_optional(row, "phase_title"),
            allowed_durations=json.loads(raw_durations) if raw_durations else None,
            author=_optional(row, "author"),
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _optional(row: Mapping[str, Any], key: str) -> Any:
    # sqlite3.Row has keys() but no get()
    return row[key] if key in row.keys() else None


class StorageBackend(ABC):
    """Counter and annotation persistence.

    Implementations must behave identically apart from the documented
    increment normalization of the JSON backend.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend identifier ('sqlite' or 'json')."""
        ...

    # Counters

    @abstractmethod
    def get_counts_for_duration(self, duration: str) -> dict[str, int]:
        """Return recorded counts for a bucket, keyed by item id."""
        ...

    @abstractmethod
    def increment(self, item_id: str, duration: str, delta: int) -> None:
        """Add delta to a counter, creating it at 0 and keeping it within [0, MAX_COUNT]."""
        ...

    @abstractmethod
    def set_count(self, item_id: str, duration: str, value: int) -> None:
        """Store clamp_count(value) for a counter."""
        ...

    @abstractmethod
    def ensure_seed(self, item_id: str, duration: str) -> None:
        """Seed a counter deterministically if it does not exist yet."""
        ...

    @abstractmethod
    def counter_rows(self) -> int:
        """Return the number of stored counters."""
        ...

    @abstractmethod
    def seed_examples(self) -> int:
        """Write the example seed rows. Returns number of rows written."""
        ...

    # Annotations

    @abstractmethod
    def upsert_annotation(self, record: AnnotationRecord) -> None:
        """Insert or fully replace an annotation keyed by detail_id."""
        ...

    @abstractmethod
    def list_annotations(self) -> list[AnnotationRecord]:
        """Return all annotations, most recently created first."""
        ...

    def close(self) -> None:
        """Release backend resources."""
