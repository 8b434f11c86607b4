"""Aggregate counts across buckets for the custom details summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from process_planner.storage import DURATION_BUCKETS, AnnotationRecord, Storage

SECTION_CATEGORIES = {
    "actions": "Action",
    "deliverables": "Deliverable",
    "aiBoosts": "AI boost",
}

PREFIX_CATEGORIES = (
    ("action-", "Action"),
    ("deliv-", "Deliverable"),
    ("ai-", "AI boost"),
)


@dataclass
class DetailRow:
    """Per-bucket counts for one detail. None marks a bucket the detail does not apply to."""

    detail_id: str
    text: str
    category: str
    parent_title: str = ""
    phase_title: str = ""
    author: str = ""
    per_duration: dict[str, int | None] = field(default_factory=dict)


@dataclass
class ItemRow:
    """Per-bucket totals over the details of one checklist item."""

    item_id: str
    title: str
    category: str
    per_duration: dict[str, int] = field(default_factory=dict)


@dataclass
class Summary:
    details: list[DetailRow]
    items: list[ItemRow]


def infer_category(identifier: str) -> str:
    """Category label from an id such as 'deliv-4-2-detail-1' or 'custom-3-actions-...'."""
    for prefix, category in PREFIX_CATEGORIES:
        if identifier.startswith(prefix):
            return category
    if identifier.startswith("custom-"):
        parts = identifier.split("-")
        section = parts[2] if len(parts) > 2 else ""
        return SECTION_CATEGORIES.get(section, "")
    return ""


def _detail_row(
    detail_id: str,
    record: AnnotationRecord | None,
    counts: dict[str, dict[str, int]],
) -> DetailRow:
    allowed = record.allowed_durations if record else None
    per_duration: dict[str, int | None] = {}
    for duration in DURATION_BUCKETS:
        if allowed is not None and duration not in allowed:
            per_duration[duration] = None
        else:
            per_duration[duration] = counts[duration].get(detail_id, 0)
    return DetailRow(
        detail_id=detail_id,
        text=(record.text if record else "") or detail_id,
        category=infer_category(detail_id),
        parent_title=(record.parent_title if record else "") or "",
        phase_title=(record.phase_title if record else "") or "",
        author=(record.author if record else "") or "",
        per_duration=per_duration,
    )


def build_summary(storage: Storage, ids: Iterable[str] = ()) -> Summary:
    """
    Build detail and item rows from stored annotations and counters.

    Explicitly requested ids are seeded in every bucket first, the same way
    the counters endpoint seeds ids it is asked about.
    """
    requested = [i for i in dict.fromkeys(ids) if i]
    for detail_id in requested:
        for duration in DURATION_BUCKETS:
            storage.ensure_seed(detail_id, duration)

    counts = {d: storage.get_counts_for_duration(d) for d in DURATION_BUCKETS}
    records = storage.list_annotations()
    by_id = {r.detail_id: r for r in records}

    detail_ids = [r.detail_id for r in records]
    detail_ids.extend(i for i in requested if i not in by_id)
    details = [_detail_row(i, by_id.get(i), counts) for i in detail_ids]

    items: dict[str, ItemRow] = {}
    for row in details:
        record = by_id.get(row.detail_id)
        if record is None:
            continue
        item = items.get(record.item_id)
        if item is None:
            item = ItemRow(
                item_id=record.item_id,
                title=record.parent_title or record.item_id,
                category=SECTION_CATEGORIES.get(record.section, infer_category(record.item_id)),
                per_duration={d: 0 for d in DURATION_BUCKETS},
            )
            items[record.item_id] = item
        for duration, value in row.per_duration.items():
            item.per_duration[duration] += value or 0

    return Summary(details=details, items=list(items.values()))
