"""Deterministic starting counts for counters with no recorded usage."""

from __future__ import annotations

import math

# Plan lengths in display order: weeks, then the two-day sprint.
DURATION_BUCKETS: tuple[str, ...] = ("8", "4", "2", "1", "2days")

DURATION_MULTIPLIERS: dict[str, float] = {
    "8": 1.2,
    "4": 1.0,
    "2": 0.8,
    "1": 0.6,
    "2days": 0.4,
}

# Seeded on first run so a fresh store does not render all zeros.
EXAMPLE_ITEM_IDS: tuple[str, ...] = (
    "action-0-1-detail-1",
    "action-0-1-detail-2",
    "deliv-0-1-detail-1",
    "ai-0-1-detail-1",
    "action-3-1-detail-1",
    "deliv-4-2-detail-1",
    "ai-6-1-detail-1",
)


def base_for_id(identifier: str) -> int:
    """Stable popularity base in the range 10..34 for an identifier.

    Rolling hash over UTF-16 code units (h * 31 + unit, unsigned 32-bit),
    so the value matches what browser clients compute for the same id.
    """
    encoded = identifier.encode("utf-16-le")
    hash_value = 0
    for i in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[i : i + 2], "little")
        hash_value = (hash_value * 31 + unit) & 0xFFFFFFFF
    return hash_value % 25 + 10


def vary_by_duration(count: int, duration: str) -> int:
    """Scale a base count for a duration bucket. Unknown buckets pass through."""
    multiplier = DURATION_MULTIPLIERS.get(duration)
    if multiplier is None:
        return count
    return max(0, math.floor(count * multiplier))


def seed_value(identifier: str, duration: str) -> int:
    """Seeded initial count for an (identifier, bucket) pair."""
    return vary_by_duration(base_for_id(identifier), duration)


def example_seed_rows() -> list[tuple[str, str, int]]:
    """(item_id, bucket, count) rows written to a fresh store."""
    return [
        (item_id, duration, seed_value(item_id, duration))
        for item_id in EXAMPLE_ITEM_IDS
        for duration in DURATION_BUCKETS
    ]
