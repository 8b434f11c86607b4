"""Design process planner: like counters and custom details storage."""

__version__ = "0.1.0"
