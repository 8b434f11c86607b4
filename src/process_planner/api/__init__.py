"""HTTP boundary for the planner storage."""

from process_planner.api.app import create_app

__all__ = ["create_app"]
