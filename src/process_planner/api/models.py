"""Request and response bodies for the planner HTTP API."""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from process_planner.storage import AnnotationRecord


# =============================================================================
# Counters
# =============================================================================


class CounterUpdateRequest(BaseModel):
    """Body of POST /api/counters.

    Fields are optional here so that missing values are rejected by the
    handler with a 400 rather than by schema validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    detail_id: Optional[str] = Field(default=None, alias="detailId")
    duration: Optional[str] = None
    action: Optional[str] = None
    """'inc' (default), 'dec' or 'set'. Unknown actions increment."""

    value: Any = None
    """Absolute value for 'set'. Ignored unless it is a finite number."""

    def numeric_value(self) -> Optional[int]:
        value = self.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)


class CountsResponse(BaseModel):
    duration: str
    counts: Dict[str, int]


class OkResponse(BaseModel):
    ok: bool = True


# =============================================================================
# Annotations
# =============================================================================

REQUIRED_ANNOTATION_FIELDS = ("detail_id", "item_id", "section", "text")


class AnnotationRequest(BaseModel):
    """Body of POST /api/annotations."""

    detail_id: Optional[str] = None
    item_id: Optional[str] = None
    section: Optional[str] = None
    text: Optional[str] = None
    parent_title: Optional[str] = None
    phase_title: Optional[str] = None
    allowed_durations: Optional[List[str]] = None
    author: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_ANNOTATION_FIELDS if not getattr(self, name)]

    def to_record(self) -> AnnotationRecord:
        return AnnotationRecord(
            detail_id=self.detail_id,
            item_id=self.item_id,
            section=self.section,
            text=self.text,
            parent_title=self.parent_title,
            phase_title=self.phase_title,
            allowed_durations=self.allowed_durations,
            author=self.author,
        )


class AnnotationRow(BaseModel):
    detail_id: str
    item_id: str
    section: str
    text: str
    parent_title: Optional[str] = None
    phase_title: Optional[str] = None
    allowed_durations: Optional[List[str]] = None
    author: Optional[str] = None
    created_at: int


class AnnotationsResponse(BaseModel):
    rows: List[AnnotationRow]


# =============================================================================
# Summary
# =============================================================================


class DetailSummaryRow(BaseModel):
    detail_id: str
    text: str
    category: str
    parent_title: str
    phase_title: str
    author: str
    per_duration: Dict[str, Optional[int]]


class ItemSummaryRow(BaseModel):
    item_id: str
    title: str
    category: str
    per_duration: Dict[str, int]


class SummaryResponse(BaseModel):
    details: List[DetailSummaryRow]
    items: List[ItemSummaryRow]


class HealthResponse(BaseModel):
    status: str = "ok"
    backend: str
