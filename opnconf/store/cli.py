"""CLI entry point listing retained configuration snapshots."""

from __future__ import annotations

import argparse
from pathlib import Path

from tabulate import tabulate

from opnconf._cli import CLIArgumentParser, settings_from_args, setup_logging
from opnconf.store.config_store import ConfigStore


def build_parser() -> argparse.ArgumentParser:
    parser = CLIArgumentParser(
        prog="opnconf snapshots",
        description="List pre-mutation snapshots of the configuration file, oldest first.",
    )
    parser.add_argument("-c", "--config", type=Path, help="Configuration file")
    parser.add_argument("--backup-dir", type=Path, help="Snapshot directory")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def main(args: list[str] | None = None) -> None:
    parsed = build_parser().parse_args(args)
    setup_logging(parsed.verbose)

    store = ConfigStore.from_settings(settings_from_args(parsed))
    snapshots = store.snapshots()
    if not snapshots:
        print(f"No snapshots of {store.path} found")
        return

    rows = [[s.taken_at.strftime("%Y-%m-%d %H:%M:%S"), f"{s.size:,}", str(s.path)] for s in snapshots]
    print(tabulate(rows, headers=["Taken", "Bytes", "Path"], tablefmt="simple"))


if __name__ == "__main__":
    main()
