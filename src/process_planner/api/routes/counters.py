"""
Counters API: per-(item, duration bucket) like counts.

Usage:
    GET  /api/counters?duration=4&ids=a,b
    POST /api/counters  {"detailId": "a", "duration": "4", "action": "inc"}
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from process_planner.api.deps import get_storage
from process_planner.api.models import CounterUpdateRequest, CountsResponse, OkResponse
from process_planner.storage import MAX_COUNT, Storage

router = APIRouter(prefix="/api", tags=["counters"])

DEFAULT_DURATION = "8"


def parse_ids(raw: Optional[str]) -> List[str]:
    """Split a comma-separated id list, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


@router.get("/counters", response_model=CountsResponse)
def get_counters(
    duration: Optional[str] = None,
    ids: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    """
    Return all counts for a duration bucket.

    Any ids listed are seeded first, so they always appear in the result.
    """
    duration = duration or DEFAULT_DURATION
    for item_id in parse_ids(ids):
        storage.ensure_seed(item_id, duration)
    return CountsResponse(duration=duration, counts=storage.get_counts_for_duration(duration))


@router.post("/counters", response_model=OkResponse)
def update_counter(body: CounterUpdateRequest, storage: Storage = Depends(get_storage)):
    """
    Increment, decrement or set one counter.

    Raises:
        400: detailId or duration missing, or a set value above MAX_COUNT
    """
    if not body.detail_id or not body.duration:
        raise HTTPException(status_code=400, detail="Missing detailId or duration")

    value = body.numeric_value()
    if body.action == "set" and value is not None:
        if value > MAX_COUNT:
            raise HTTPException(status_code=400, detail=f"Value must not exceed {MAX_COUNT}")
        storage.set_count(body.detail_id, body.duration, value)
    else:
        delta = -1 if body.action == "dec" else 1
        storage.increment(body.detail_id, body.duration, delta)
    return OkResponse()
