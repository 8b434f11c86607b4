"""
Annotations API: user-submitted details attached to checklist items.

Usage:
    GET  /api/annotations
    POST /api/annotations  {"detail_id": ..., "item_id": ..., "section": ..., "text": ...}
"""

from fastapi import APIRouter, Depends, HTTPException

from process_planner.api.deps import get_storage
from process_planner.api.models import (
    AnnotationRequest,
    AnnotationRow,
    AnnotationsResponse,
    OkResponse,
)
from process_planner.storage import Storage

router = APIRouter(prefix="/api", tags=["annotations"])


@router.get("/annotations", response_model=AnnotationsResponse)
def list_annotations(storage: Storage = Depends(get_storage)):
    """Return every annotation, most recently created first."""
    rows = [AnnotationRow(**record.to_dict()) for record in storage.list_annotations()]
    return AnnotationsResponse(rows=rows)


@router.post("/annotations", response_model=OkResponse)
def upsert_annotation(body: AnnotationRequest, storage: Storage = Depends(get_storage)):
    """
    Create or replace an annotation keyed by detail_id.

    Raises:
        400: a required field is missing or empty
    """
    missing = body.missing_fields()
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}",
        )
    storage.upsert_annotation(body.to_record())
    return OkResponse()
