"""Command line entrypoint for Mapty."""

from __future__ import annotations

import argparse
from pathlib import Path

from mapty.core.logs import configure_logging
from mapty.ui.formatting import summary_line
from mapty.workout.persistence import JsonFileStorage, PersistenceAdapter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mapty: log running and cycling workouts on a map")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch the web UI (default when no other action is given)",
    )
    parser.add_argument(
        "--web-host",
        default="127.0.0.1",
        help="Host bind for the web UI",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=8089,
        help="Port for the web UI",
    )
    parser.add_argument(
        "--storage-path",
        type=Path,
        default=None,
        help="JSON file holding stored workouts (default: ~/.mapty/local_storage.json)",
    )
    parser.add_argument("--list", action="store_true", help="Print stored workouts and exit")
    parser.add_argument("--reset", action="store_true", help="Delete all stored workouts and exit")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log verbosity",
    )
    return parser


def run_list(storage_path: Path | None) -> int:
    workouts = PersistenceAdapter(JsonFileStorage(storage_path)).load()
    if not workouts:
        print("No workouts recorded")
        return 0
    for workout in workouts:
        print(summary_line(workout))
    return 0


def run_reset(storage_path: Path | None) -> int:
    PersistenceAdapter(JsonFileStorage(storage_path)).clear()
    print("Stored workouts cleared")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.reset:
        return run_reset(args.storage_path)
    if args.list:
        return run_list(args.storage_path)

    from mapty.ui.web_app import run_web_ui

    return run_web_ui(
        storage_path=args.storage_path,
        host=args.web_host,
        port=args.web_port,
    )


if __name__ == "__main__":
    raise SystemExit(main())
