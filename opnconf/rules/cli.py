"""CLI entry point for the rule cloner, standalone-capable.

Examples:
  opnconf rule-clone -i 1a2b3c4d-0000-4000-8000-000000000001 -n 3 -s opt2
"""

from __future__ import annotations

import argparse
import sys

from opnconf._cli import CLIArgumentParser, add_common_arguments, settings_from_args, setup_logging
from opnconf.exceptions import OPNConfError
from opnconf.reload import Reloader
from opnconf.rules.cloner import clone_rule
from opnconf.store.config_store import ConfigStore


def build_parser() -> argparse.ArgumentParser:
    parser = CLIArgumentParser(
        prog="opnconf rule-clone",
        description="Clone an existing firewall rule onto a new source interface and reload the filter.",
    )
    parser.add_argument("-i", "--rule-id", required=True, help="ID of the source rule to clone")
    parser.add_argument("-n", "--count", type=int, required=True, help="Number of clones to create")
    parser.add_argument(
        "-s",
        "--source-interface",
        required=True,
        help="New source interface for the cloned rules (e.g. lan, wan, opt1)",
    )
    add_common_arguments(parser)
    return parser


def main(args: list[str] | None = None) -> None:
    """Main entry point for the rule cloner CLI."""
    parsed = build_parser().parse_args(args)
    setup_logging(parsed.verbose)

    settings = settings_from_args(parsed)

    try:
        result = clone_rule(
            ConfigStore.from_settings(settings),
            parsed.rule_id,
            parsed.count,
            parsed.source_interface,
            reloader=Reloader.from_settings(settings),
            reload=not parsed.no_reload,
        )
    except OPNConfError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)

    for n, clone in enumerate(result.clones, start=1):
        print(f"  #{n}  {clone.rule_id}  interface={clone.interface}")
    if result.reloaded:
        print("Cloning completed successfully. Verify the rules in the Web GUI.")
    else:
        print("Cloning completed; filter was not reloaded.")
    print(f"Backup: {result.snapshot}")


if __name__ == "__main__":
    main()
