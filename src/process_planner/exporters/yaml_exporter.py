"""YAML exporter for summaries."""

from __future__ import annotations

from typing import IO

import yaml

from process_planner.exporters.base import Exporter


class YamlExporter(Exporter):
    """Export summaries to YAML format."""

    @property
    def extension(self) -> str:
        """Return yaml extension."""
        return "yaml"

    def dump(self, data: dict, stream: IO[str]) -> None:
        yaml.safe_dump(data, stream, allow_unicode=True, sort_keys=False)
