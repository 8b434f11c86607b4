"""Liveness endpoint reporting the active storage backend."""

from fastapi import APIRouter, Depends

from process_planner.api.deps import get_storage
from process_planner.api.models import HealthResponse
from process_planner.storage import Storage

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(storage: Storage = Depends(get_storage)):
    return HealthResponse(backend=storage.backend_name)
