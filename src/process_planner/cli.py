"""Command-line interface for the process planner storage and server."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import ServerConfig, StorageConfig
from .storage import DURATION_BUCKETS, open_storage

LOGGER = logging.getLogger("process_planner.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Design process planner storage")
    parser.add_argument("--data-dir", default=None, help="Storage directory (default: $PLANNER_DATA_DIR or .data)")
    parser.add_argument("--no-sqlite", action="store_true", help="Use JSON files even if SQLite is available")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=ServerConfig.host, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=ServerConfig.port, help="Bind port")

    status_parser = subparsers.add_parser("status", help="Show backend and row counts")
    status_parser.add_argument("--format", choices=["text", "json"], default="text")

    counts_parser = subparsers.add_parser("counts", help="Show counts for one duration bucket")
    counts_parser.add_argument("--duration", default="8", help="Duration bucket (8, 4, 2, 1, 2days)")
    counts_parser.add_argument("--ids", default=None, help="Comma-separated ids to seed first")
    counts_parser.add_argument("--server", default=None, help="Query a running server instead of local files")
    counts_parser.add_argument("--format", choices=["text", "json"], default="text")

    bump_parser = subparsers.add_parser("bump", help="Change one counter")
    bump_parser.add_argument("detail_id", help="Item or detail id")
    bump_parser.add_argument("--duration", required=True, help="Duration bucket")
    bump_parser.add_argument("--action", choices=["inc", "dec", "set"], default="inc")
    bump_parser.add_argument("--value", type=int, default=None, help="Value for --action set")

    annotations_parser = subparsers.add_parser("annotations", help="List custom details")
    annotations_parser.add_argument("--format", choices=["text", "json"], default="text")

    summary_parser = subparsers.add_parser("summary", help="Counts per detail and item across buckets")
    summary_parser.add_argument("--ids", default=None, help="Comma-separated extra ids to include")
    summary_parser.add_argument("--format", choices=["text", "json", "yaml"], default="text")
    summary_parser.add_argument(
        "--output",
        nargs="?",
        const="",
        default=None,
        help="Write json/yaml export to this file or directory (default: current directory)",
    )

    return parser


def storage_config(args: argparse.Namespace) -> StorageConfig:
    """Environment config with command-line overrides applied."""
    config = StorageConfig.from_env()
    if getattr(args, "data_dir", None):
        config.data_dir = Path(args.data_dir)
    if getattr(args, "no_sqlite", False):
        config.use_sqlite = False
    return config


def _split_ids(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def serve(args: argparse.Namespace) -> None:
    import uvicorn

    from .api import create_app

    LOGGER.info("Serving on http://%s:%d", args.host, args.port)
    with open_storage(storage_config(args)) as storage:
        uvicorn.run(create_app(storage), host=args.host, port=args.port)


def status(args: argparse.Namespace) -> None:
    config = storage_config(args)
    with open_storage(config) as storage:
        data = {
            "backend": storage.backend_name,
            "data_dir": str(config.data_dir),
            "counters": storage.counter_rows(),
            "annotations": len(storage.list_annotations()),
        }

    if args.format == "json":
        print(json.dumps(data, indent=2))
        return

    print("Storage:")
    print(f"  Backend:   {data['backend']}")
    print(f"  Data dir:  {data['data_dir']}")
    print("Counters:")
    print(f"  Rows:      {data['counters']}")
    print("Annotations:")
    print(f"  Total:     {data['annotations']}")


def counts(args: argparse.Namespace) -> None:
    ids = _split_ids(args.ids)
    if args.server:
        from .client import PlannerClient

        result = PlannerClient(base_url=args.server).get_counts(args.duration, ids)
    else:
        with open_storage(storage_config(args)) as storage:
            for item_id in ids:
                storage.ensure_seed(item_id, args.duration)
            result = storage.get_counts_for_duration(args.duration)

    if args.format == "json":
        print(json.dumps({"duration": args.duration, "counts": result}, indent=2))
        return

    print(f"Duration {args.duration}: {len(result)} counters")
    for item_id in sorted(result):
        print(f"  {item_id}\t{result[item_id]}")


def bump(args: argparse.Namespace) -> int:
    if args.action == "set" and args.value is None:
        print("Error: --value is required with --action set", file=sys.stderr)
        return 1

    with open_storage(storage_config(args)) as storage:
        if args.action == "set":
            storage.set_count(args.detail_id, args.duration, args.value)
        else:
            storage.increment(args.detail_id, args.duration, -1 if args.action == "dec" else 1)
        value = storage.get_counts_for_duration(args.duration).get(args.detail_id, 0)

    print(f"{args.duration}::{args.detail_id} = {value}")
    return 0


def annotations(args: argparse.Namespace) -> None:
    with open_storage(storage_config(args)) as storage:
        records = storage.list_annotations()

    if args.format == "json":
        print(json.dumps({"rows": [r.to_dict() for r in records]}, indent=2, ensure_ascii=False))
        return

    if not records:
        print("No annotations.")
        return
    for record in records:
        parent = f" ({record.parent_title})" if record.parent_title else ""
        print(f"[{record.section}] {record.item_id}{parent}: {record.text}")
        if record.allowed_durations is not None:
            print(f"    durations: {', '.join(record.allowed_durations)}")


def summary(args: argparse.Namespace) -> None:
    from .exporters import Exporter, get_exporter
    from .summary import build_summary

    with open_storage(storage_config(args)) as storage:
        result = build_summary(storage, _split_ids(args.ids))

    if args.format in ("json", "yaml"):
        exporter = get_exporter(args.format)
        if args.output is not None:
            target = Path(args.output or ".")
            if target.is_dir():
                target = exporter.default_path(target)
            count = exporter.export(result, target)
            print(f"Exported {count} details to {target}")
        else:
            exporter.dump(Exporter.summary_to_dict(result), sys.stdout)
        return

    _print_summary_table(result)


def _print_summary_table(result) -> None:
    header = "  ".join(f"{d:>5}" for d in DURATION_BUCKETS)
    print(f"{'Detail':<40}  {'Category':<12}  {header}")
    for row in result.details:
        cells = "  ".join("    -" if row.per_duration[d] is None else f"{row.per_duration[d]:>5}" for d in DURATION_BUCKETS)
        print(f"{row.text[:40]:<40}  {row.category:<12}  {cells}")
    if result.items:
        print()
        print(f"{'Item':<40}  {'Category':<12}  {header}")
        for item in result.items:
            cells = "  ".join(f"{item.per_duration[d]:>5}" for d in DURATION_BUCKETS)
            print(f"{item.title[:40]:<40}  {item.category:<12}  {cells}")


COMMANDS = {
    "serve": serve,
    "status": status,
    "counts": counts,
    "bump": bump,
    "annotations": annotations,
    "summary": summary,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.error(f"Unknown command {args.command}")
    return handler(args) or 0


if __name__ == "__main__":
    sys.exit(main())
