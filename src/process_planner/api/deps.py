"""Request-scoped access to the process-wide storage context."""

from fastapi import Request

from process_planner.storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
