"""
Summary API: counts per detail and per item across every duration bucket.

Usage:
    GET /api/summary?ids=a,b
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends

from process_planner.api.deps import get_storage
from process_planner.api.models import SummaryResponse
from process_planner.api.routes.counters import parse_ids
from process_planner.storage import Storage
from process_planner.summary import build_summary

router = APIRouter(prefix="/api", tags=["summary"])


@router.get("/summary", response_model=SummaryResponse)
def get_summary(ids: Optional[str] = None, storage: Storage = Depends(get_storage)):
    summary = build_summary(storage, parse_ids(ids))
    return SummaryResponse(
        details=[asdict(row) for row in summary.details],
        items=[asdict(row) for row in summary.items],
    )
