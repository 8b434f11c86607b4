"""Tests for summary aggregation and export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from process_planner.exporters import JsonExporter, YamlExporter, get_exporter
from process_planner.storage import AnnotationRecord, Storage
from process_planner.summary import build_summary, infer_category


@pytest.fixture
def populated(storage: Storage) -> Storage:
    """Two details on one item, one on another, with counts set."""
    storage.upsert_annotation(
        AnnotationRecord(
            detail_id="custom-1-actions-1-detail-1",
            item_id="custom-1-actions-1",
            section="actions",
            text="Stakeholder map",
            parent_title="Align stakeholders",
            phase_title="Kickoff",
            allowed_durations=["8", "4"],
            created_at=2,
        )
    )
    storage.upsert_annotation(
        AnnotationRecord(
            detail_id="custom-1-actions-1-detail-2",
            item_id="custom-1-actions-1",
            section="actions",
            text="RACI chart",
            parent_title="Align stakeholders",
            created_at=1,
        )
    )
    storage.upsert_annotation(
        AnnotationRecord(
            detail_id="custom-5-aiBoosts-2-detail-1",
            item_id="custom-5-aiBoosts-2",
            section="aiBoosts",
            text="Summarize interview notes",
            author="lee@example.com",
            created_at=3,
        )
    )
    storage.set_count("custom-1-actions-1-detail-1", "8", 4)
    storage.set_count("custom-1-actions-1-detail-1", "2", 9)
    storage.set_count("custom-1-actions-1-detail-2", "8", 2)
    storage.set_count("custom-1-actions-1-detail-2", "2", 1)
    return storage


class TestInferCategory:
    @pytest.mark.parametrize(
        "identifier, expected",
        [
            ("action-0-1-detail-1", "Action"),
            ("deliv-4-2-detail-1", "Deliverable"),
            ("ai-6-1-detail-1", "AI boost"),
            ("custom-3-actions-17-detail-18", "Action"),
            ("custom-3-deliverables-17-detail-18", "Deliverable"),
            ("custom-3-aiBoosts-17-detail-18", "AI boost"),
            ("custom-3", ""),
            ("something-else", ""),
        ],
    )
    def test_categories(self, identifier: str, expected: str):
        assert infer_category(identifier) == expected


class TestBuildSummary:
    def test_detail_rows_follow_annotation_order(self, populated: Storage):
        summary = build_summary(populated)
        assert [row.detail_id for row in summary.details] == [
            "custom-5-aiBoosts-2-detail-1",
            "custom-1-actions-1-detail-1",
            "custom-1-actions-1-detail-2",
        ]

    def test_disallowed_buckets_are_none(self, populated: Storage):
        summary = build_summary(populated)
        row = next(r for r in summary.details if r.detail_id == "custom-1-actions-1-detail-1")
        assert row.per_duration == {"8": 4, "4": 0, "2": None, "1": None, "2days": None}
        assert row.category == "Action"
        assert row.parent_title == "Align stakeholders"
        assert row.phase_title == "Kickoff"

    def test_missing_metadata_becomes_empty_string(self, populated: Storage):
        summary = build_summary(populated)
        row = summary.details[0]
        assert row.parent_title == ""
        assert row.phase_title == ""
        assert row.author == "lee@example.com"
        assert row.category == "AI boost"

    def test_item_rows_sum_details(self, populated: Storage):
        summary = build_summary(populated)
        items = {item.item_id: item for item in summary.items}
        actions = items["custom-1-actions-1"]
        assert actions.title == "Align stakeholders"
        assert actions.category == "Action"
        # detail-1 is not allowed in "2", so only detail-2 counts there
        assert actions.per_duration == {"8": 6, "4": 0, "2": 1, "1": 0, "2days": 0}
        assert items["custom-5-aiBoosts-2"].title == "custom-5-aiBoosts-2"

    def test_requested_ids_are_seeded(self, storage: Storage):
        summary = build_summary(storage, ["ab", "ab", ""])
        [row] = summary.details
        assert row.detail_id == "ab"
        assert row.text == "ab"
        assert row.per_duration == {"8": 18, "4": 15, "2": 12, "1": 9, "2days": 6}
        assert storage.get_counts_for_duration("1")["ab"] == 9

    def test_requested_id_with_annotation_not_duplicated(self, populated: Storage):
        summary = build_summary(populated, ["custom-1-actions-1-detail-2"])
        ids = [row.detail_id for row in summary.details]
        assert ids.count("custom-1-actions-1-detail-2") == 1


class TestExporters:
    def test_get_exporter(self):
        assert isinstance(get_exporter("json"), JsonExporter)
        assert isinstance(get_exporter("yaml"), YamlExporter)
        with pytest.raises(ValueError):
            get_exporter("csv")

    def test_json_export(self, populated: Storage, tmp_path: Path):
        output = tmp_path / "summary.json"
        count = JsonExporter().export(build_summary(populated), output)

        assert count == 3
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["count"] == 3
        assert len(data["details"]) == 3
        assert data["details"][1]["per_duration"]["2"] is None
        assert {item["item_id"] for item in data["items"]} == {"custom-1-actions-1", "custom-5-aiBoosts-2"}

    def test_yaml_export(self, populated: Storage, tmp_path: Path):
        output = tmp_path / "summary.yaml"
        count = YamlExporter().export(build_summary(populated), output)

        assert count == 3
        data = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert data["count"] == 3
        assert data["details"][0]["text"] == "Summarize interview notes"
        items = {item["item_id"]: item for item in data["items"]}
        assert items["custom-1-actions-1"]["per_duration"]["8"] == 6

    def test_default_path_uses_extension(self, tmp_path: Path):
        assert JsonExporter().default_path(tmp_path) == tmp_path / "planner-summary.json"
        assert YamlExporter().default_path(tmp_path) == tmp_path / "planner-summary.yaml"
