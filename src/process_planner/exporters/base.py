"""Base exporter interface for summary export."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from process_planner.summary import Summary


class Exporter(ABC):
    """Base class for summary exporters."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension without dot (e.g., 'json', 'yaml')."""
        ...

    def default_path(self, directory: Path) -> Path:
        """Export file inside a directory, named after the format."""
        return directory / f"planner-summary.{self.extension}"

    @abstractmethod
    def dump(self, data: dict, stream: IO[str]) -> None:
        """Serialize the export payload to an open text stream."""
        ...

    def export(self, summary: Summary, output_path: Path) -> int:
        """Export summary to file.

        Args:
            summary: Detail and item rows to export.
            output_path: Path to output file.

        Returns:
            Number of detail rows exported.
        """
        data = self.summary_to_dict(summary)
        with open(output_path, "w", encoding="utf-8") as f:
            self.dump(data, f)
        return data["count"]

    @staticmethod
    def summary_to_dict(summary: Summary) -> dict:
        """Convert a summary to an exportable dictionary.

        Args:
            summary: The summary to convert.

        Returns:
            Dictionary with detail rows, item rows and the detail count.
        """
        return {
            "details": [asdict(row) for row in summary.details],
            "items": [asdict(row) for row in summary.items],
            "count": len(summary.details),
        }
