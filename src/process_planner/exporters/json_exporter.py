"""JSON exporter for summaries."""

from __future__ import annotations

import json
from typing import IO

from process_planner.exporters.base import Exporter


class JsonExporter(Exporter):
    """Export summaries to JSON format."""

    @property
    def extension(self) -> str:
        """Return json extension."""
        return "json"

    def dump(self, data: dict, stream: IO[str]) -> None:
        json.dump(data, stream, indent=2, ensure_ascii=False)
