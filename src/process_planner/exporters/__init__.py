"""Summary exporters for JSON and YAML formats."""

from process_planner.exporters.base import Exporter
from process_planner.exporters.json_exporter import JsonExporter
from process_planner.exporters.yaml_exporter import YamlExporter

__all__ = [
    "Exporter",
    "JsonExporter",
    "YamlExporter",
]


def get_exporter(fmt: str) -> Exporter:
    """Return the exporter for 'json' or 'yaml'."""
    exporters = {"json": JsonExporter, "yaml": YamlExporter}
    if fmt not in exporters:
        raise ValueError(f"Unknown export format: {fmt}")
    return exporters[fmt]()
