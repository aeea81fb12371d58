"""Argument handling shared by the sub-CLIs."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from loguru import logger

from opnconf.settings import Settings


class CLIArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Configuration file (default: $OPNCONF_CONFIG_FILE or /conf/config.xml)",
    )
    parser.add_argument(
        "--backup-dir",
        type=Path,
        help="Directory for pre-mutation snapshots (default: next to the configuration file)",
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Write the configuration but do not reload the running daemon",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")


def settings_from_args(parsed: argparse.Namespace) -> Settings:
    """Environment settings with CLI flags applied on top."""
    settings = Settings.from_env()
    if getattr(parsed, "config", None) is not None:
        settings.config_file = parsed.config
    if getattr(parsed, "backup_dir", None) is not None:
        settings.backup_dir = parsed.backup_dir
    return settings


def setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    logger.enable("opnconf")
