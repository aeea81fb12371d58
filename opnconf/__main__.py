"""Orchestrator CLI, dispatches to sub-CLIs.

Sub-commands:
  vlan-add    Add a persistent VLAN (and optional interface assignment)
  rule-clone  Clone a firewall rule onto a new source interface
  snapshots   List pre-mutation configuration snapshots

Examples:
  opnconf vlan-add -i igb1 -v 20 -a 10.0.20.1

  opnconf rule-clone -i <rule-id> -n 3 -s opt2

  opnconf snapshots -c /conf/config.xml
"""

from __future__ import annotations

import os
import shlex
import sys

from tabulate import tabulate

from opnconf import __version__, configure_logging
from opnconf import glogger
from opnconf.settings import Settings

COMMANDS = {
    "vlan-add": ("opnconf.vlans.cli", "Add a persistent VLAN"),
    "rule-clone": ("opnconf.rules.cli", "Clone a firewall rule"),
    "snapshots": ("opnconf.store.cli", "List configuration snapshots"),
}


def _print_usage() -> None:
    print("usage: opnconf <command> [options]\n")
    print("Available commands:")
    for cmd, (_, desc) in COMMANDS.items():
        print(f"  {cmd:14s}  {desc}")
    print("\nRun 'opnconf <command> --help' for command-specific options.")


def _print_startup_banner(settings: Settings) -> None:
    startup_rows = [
        ["version", __version__],
        ["config file", str(settings.config_file)],
        ["backup dir", str(settings.backup_dir or settings.config_file.parent)],
        ["full reload", shlex.join(settings.full_reload_command)],
        ["filter reload", shlex.join(settings.filter_reload_command)],
    ]

    for var in ("GITHUB_REF", "GITHUB_SHA", "BUILDTIME"):
        val = os.environ.get(var)
        if val and not val.endswith("_is_undefined"):
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "opnconf starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point: dispatch to sub-CLI."""
    configure_logging()
    _print_startup_banner(Settings.from_env())

    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        _print_usage()
        sys.exit(0 if len(sys.argv) >= 2 else 1)

    command = sys.argv[1]
    if command not in COMMANDS:
        print(f"opnconf: unknown command '{command}'\n", file=sys.stderr)
        _print_usage()
        sys.exit(1)

    module_path, _ = COMMANDS[command]

    # Import and call the sub-CLI's main(), passing remaining args
    from importlib import import_module

    module = import_module(module_path)
    module.main(sys.argv[2:])


if __name__ == "__main__":
    main()
