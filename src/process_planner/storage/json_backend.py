"""Flat-file JSON store used when SQLite is unavailable or disabled."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from process_planner.storage.backend import AnnotationRecord, StorageBackend, clamp_count, now_ms
from process_planner.storage.exceptions import CorruptStoreError
from process_planner.storage.seed import example_seed_rows, seed_value

LOGGER = logging.getLogger(__name__)

KEY_SEPARATOR = "::"


def counter_key(item_id: str, duration: str) -> str:
    """Composite key used in counters.json."""
    return f"{duration}{KEY_SEPARATOR}{item_id}"


class JsonFileBackend(StorageBackend):
    """Counters and annotations in two JSON files.

    Each call re-reads the file it touches. Writes replace the file
    atomically, and a lock serializes read-modify-write cycles within this
    process. Separate processes sharing the files are not coordinated.
    """

    def __init__(self, counters_path: Path | str, annotations_path: Path | str) -> None:
        self.counters_path = Path(counters_path)
        self.annotations_path = Path(annotations_path)
        self._lock = threading.RLock()
        if not self.counters_path.exists():
            self._write(self.counters_path, {})
        if not self.annotations_path.exists():
            self._write(self.annotations_path, [])

    @property
    def name(self) -> str:
        return "json"

    def _read(self, path: Path, expected: type) -> Any:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CorruptStoreError(path, str(e)) from e
        if not isinstance(data, expected):
            raise CorruptStoreError(path, f"expected a JSON {expected.__name__}")
        return data

    def _write(self, path: Path, data: Any) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _counters(self) -> dict[str, int]:
        return self._read(self.counters_path, dict)

    def _annotation_rows(self) -> list[dict[str, Any]]:
        return self._read(self.annotations_path, list)

    def get_counts_for_duration(self, duration: str) -> dict[str, int]:
        prefix = f"{duration}{KEY_SEPARATOR}"
        with self._lock:
            raw = self._counters()
        return {key[len(prefix):]: value for key, value in raw.items() if key.startswith(prefix)}

    def increment(self, item_id: str, duration: str, delta: int) -> None:
        # One unit step per call regardless of magnitude.
        step = 1 if delta > 0 else -1
        key = counter_key(item_id, duration)
        with self._lock:
            raw = self._counters()
            raw[key] = clamp_count(raw.get(key, 0) + step)
            self._write(self.counters_path, raw)

    def set_count(self, item_id: str, duration: str, value: int) -> None:
        with self._lock:
            raw = self._counters()
            raw[counter_key(item_id, duration)] = clamp_count(value)
            self._write(self.counters_path, raw)

    def ensure_seed(self, item_id: str, duration: str) -> None:
        key = counter_key(item_id, duration)
        with self._lock:
            raw = self._counters()
            if key in raw:
                return
            raw[key] = seed_value(item_id, duration)
            self._write(self.counters_path, raw)

    def counter_rows(self) -> int:
        with self._lock:
            return len(self._counters())

    def seed_examples(self) -> int:
        rows = example_seed_rows()
        with self._lock:
            raw = self._counters()
            for item_id, duration, count in rows:
                raw.setdefault(counter_key(item_id, duration), count)
            self._write(self.counters_path, raw)
        return len(rows)

    def upsert_annotation(self, record: AnnotationRecord) -> None:
        row = record.to_row()
        with self._lock:
            rows = self._annotation_rows()
            for index, existing in enumerate(rows):
                if existing.get("detail_id") == record.detail_id:
                    row["created_at"] = existing.get("created_at") or row["created_at"] or now_ms()
                    rows[index] = row
                    break
            else:
                if row["created_at"] is None:
                    row["created_at"] = now_ms()
                rows.append(row)
            self._write(self.annotations_path, rows)

    def list_annotations(self) -> list[AnnotationRecord]:
        with self._lock:
            rows = self._annotation_rows()
        records = [AnnotationRecord.from_row(row) for row in rows]
        # Stable sort: ties keep file (insertion) order
        return sorted(records, key=lambda r: r.created_at or 0, reverse=True)
