"""
Planner backend service: counters, annotations and summary over one storage context.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from process_planner import __version__
from process_planner.api.routes import annotations, counters, health, summary
from process_planner.storage import Storage, StorageError

logger = logging.getLogger(__name__)


async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Unparseable or wrongly typed bodies are client errors, not 422s
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Bad Request"})


async def _storage_failure(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


def create_app(storage: Storage) -> FastAPI:
    """Build the application around an already opened storage context."""
    app = FastAPI(title="Process Planner", version=__version__)
    app.state.storage = storage

    app.add_exception_handler(RequestValidationError, _bad_request)
    app.add_exception_handler(StorageError, _storage_failure)

    app.include_router(health.router)
    app.include_router(counters.router)
    app.include_router(annotations.router)
    app.include_router(summary.router)
    return app
