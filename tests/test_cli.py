"""Tests for CLI commands."""

from __future__ import annotations

import argparse
import json
from io import StringIO
from pathlib import Path
from unittest import mock

import pytest
import yaml

from process_planner.cli import annotations, build_parser, bump, counts, main, status, storage_config, summary
from process_planner.config import StorageConfig
from process_planner.storage import AnnotationRecord, open_storage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PLANNER_DATA_DIR", raising=False)
    monkeypatch.delenv("PLANNER_USE_SQLITE", raising=False)


def run(command, **kwargs) -> str:
    args = argparse.Namespace(**kwargs)
    with mock.patch("sys.stdout", new_callable=StringIO) as mock_stdout:
        command(args)
        return mock_stdout.getvalue()


class TestStorageConfig:
    def test_cli_overrides(self, tmp_path: Path):
        args = argparse.Namespace(data_dir=str(tmp_path), no_sqlite=True)
        config = storage_config(args)
        assert config.data_dir == tmp_path
        assert config.use_sqlite is False

    def test_environment_used_without_flags(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PLANNER_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("PLANNER_USE_SQLITE", "0")
        config = storage_config(argparse.Namespace(data_dir=None, no_sqlite=False))
        assert config.data_dir == tmp_path
        assert config.use_sqlite is False


class TestStatusCommand:
    def test_status_text_output(self, tmp_path: Path):
        output = run(status, data_dir=str(tmp_path), no_sqlite=False, format="text")
        assert "Backend:   sqlite" in output
        assert "Rows:      35" in output
        assert "Total:     0" in output

    def test_status_json_output(self, tmp_path: Path):
        output = run(status, data_dir=str(tmp_path), no_sqlite=True, format="json")
        data = json.loads(output)
        assert data["backend"] == "json"
        assert data["counters"] == 35
        assert data["annotations"] == 0


class TestCountsCommand:
    def test_counts_seeds_ids(self, tmp_path: Path):
        output = run(
            counts,
            data_dir=str(tmp_path),
            no_sqlite=False,
            duration="4",
            ids="x,y",
            server=None,
            format="json",
        )
        data = json.loads(output)
        assert data["duration"] == "4"
        assert data["counts"]["x"] == 30
        assert data["counts"]["y"] == 31

    def test_counts_text(self, tmp_path: Path):
        output = run(counts, data_dir=str(tmp_path), no_sqlite=True, duration="2days", ids=None, server=None, format="text")
        assert output.startswith("Duration 2days: 7 counters")

    def test_counts_from_server(self, tmp_path: Path):
        with mock.patch("process_planner.client.PlannerClient") as client_cls:
            client_cls.return_value.get_counts.return_value = {"x": 3}
            output = run(
                counts,
                data_dir=str(tmp_path),
                no_sqlite=False,
                duration="4",
                ids="x",
                server="http://planner.test",
                format="json",
            )
        client_cls.assert_called_once_with(base_url="http://planner.test")
        client_cls.return_value.get_counts.assert_called_once_with("4", ["x"])
        assert json.loads(output)["counts"] == {"x": 3}


class TestBumpCommand:
    @pytest.mark.parametrize("no_sqlite", [False, True])
    def test_bump_inc_dec_set(self, tmp_path: Path, no_sqlite: bool):
        base = dict(data_dir=str(tmp_path), no_sqlite=no_sqlite, detail_id="x", duration="4", value=None)
        assert "4::x = 1" in run(bump, action="inc", **base)
        assert "4::x = 2" in run(bump, action="inc", **base)
        assert "4::x = 1" in run(bump, action="dec", **base)
        assert "4::x = 0" in run(bump, **{**base, "action": "set", "value": -3})

    def test_set_requires_value(self, tmp_path: Path):
        args = argparse.Namespace(
            data_dir=str(tmp_path), no_sqlite=False, detail_id="x", duration="4", action="set", value=None
        )
        assert bump(args) == 1

    def test_main_dispatches(self, tmp_path: Path):
        with mock.patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            code = main(["--data-dir", str(tmp_path), "bump", "x", "--duration", "8"])
        assert code == 0
        assert "8::x = 1" in mock_stdout.getvalue()


class TestAnnotationsCommand:
    def test_lists_annotations(self, tmp_path: Path):
        with open_storage(StorageConfig(data_dir=tmp_path)) as storage:
            storage.upsert_annotation(
                AnnotationRecord(
                    detail_id="d1",
                    item_id="i1",
                    section="actions",
                    text="Kickoff agenda",
                    parent_title="Kickoff",
                    allowed_durations=["8", "4"],
                )
            )

        output = run(annotations, data_dir=str(tmp_path), no_sqlite=False, format="text")
        assert "[actions] i1 (Kickoff): Kickoff agenda" in output
        assert "durations: 8, 4" in output

        data = json.loads(run(annotations, data_dir=str(tmp_path), no_sqlite=False, format="json"))
        assert data["rows"][0]["detail_id"] == "d1"

    def test_no_annotations(self, tmp_path: Path):
        output = run(annotations, data_dir=str(tmp_path), no_sqlite=True, format="text")
        assert output.strip() == "No annotations."


class TestSummaryCommand:
    def test_yaml_to_stdout(self, tmp_path: Path):
        output = run(summary, data_dir=str(tmp_path), no_sqlite=False, ids="x", format="yaml", output=None)
        data = yaml.safe_load(output)
        assert data["count"] == 1
        assert data["details"][0]["per_duration"]["4"] == 30

    def test_json_to_file(self, tmp_path: Path):
        target = tmp_path / "out.json"
        output = run(summary, data_dir=str(tmp_path / "data"), no_sqlite=True, ids="x,y", format="json", output=str(target))
        assert "Exported 2 details" in output
        assert json.loads(target.read_text())["count"] == 2

    def test_directory_output_named_by_format(self, tmp_path: Path):
        exports = tmp_path / "exports"
        exports.mkdir()
        output = run(summary, data_dir=str(tmp_path / "data"), no_sqlite=False, ids="x", format="yaml", output=str(exports))
        target = exports / "planner-summary.yaml"
        assert f"Exported 1 details to {target}" in output
        assert yaml.safe_load(target.read_text())["count"] == 1

    def test_bare_output_flag_writes_to_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with mock.patch("sys.stdout", new_callable=StringIO):
            code = main(["--data-dir", str(tmp_path / "data"), "summary", "--ids", "x", "--format", "json", "--output"])
        assert code == 0
        assert json.loads((tmp_path / "planner-summary.json").read_text())["count"] == 1

    def test_text_table(self, tmp_path: Path):
        output = run(summary, data_dir=str(tmp_path), no_sqlite=False, ids="x", format="text", output=None)
        assert output.splitlines()[0].startswith("Detail")
        assert "   36     30     24     18     12" in output


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])
        assert args.host == "127.0.0.1"
        assert args.port == 8000
