"""CLI entry point for the VLAN registrar, standalone-capable.

Examples:
  # VLAN only
  opnconf vlan-add -i igb1 -v 20

  # VLAN plus interface assignment vlan20 with an address
  opnconf vlan-add -i igb1 -v 20 -a 10.0.20.1 -n 255.255.255.0
"""

from __future__ import annotations

import argparse
import sys

from opnconf._cli import CLIArgumentParser, add_common_arguments, settings_from_args, setup_logging
from opnconf.exceptions import OPNConfError
from opnconf.reload import Reloader
from opnconf.store.config_store import ConfigStore
from opnconf.vlans.models import DEFAULT_NETMASK
from opnconf.vlans.registrar import register_vlan


def build_parser() -> argparse.ArgumentParser:
    parser = CLIArgumentParser(
        prog="opnconf vlan-add",
        description="Create a persistent VLAN in the OPNsense configuration and reload it.",
    )
    parser.add_argument("-i", "--interface", required=True, help="Parent interface (e.g. em0, igb1)")
    parser.add_argument("-v", "--vlan-id", type=int, required=True, help="VLAN ID (e.g. 10, 20)")
    parser.add_argument("-a", "--address", help="IP address to assign to the VLAN (optional)")
    parser.add_argument(
        "-n",
        "--netmask",
        default=DEFAULT_NETMASK,
        help=f"Netmask to assign to the VLAN (default: {DEFAULT_NETMASK})",
    )
    add_common_arguments(parser)
    return parser


def main(args: list[str] | None = None) -> None:
    """Main entry point for the VLAN registrar CLI."""
    parsed = build_parser().parse_args(args)
    setup_logging(parsed.verbose)

    settings = settings_from_args(parsed)
    store = ConfigStore.from_settings(settings)

    try:
        result = register_vlan(
            store,
            parsed.interface,
            parsed.vlan_id,
            ip_address=parsed.address,
            netmask=parsed.netmask,
            reloader=Reloader.from_settings(settings),
            reload=not parsed.no_reload,
        )
    except OPNConfError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)

    vlan = result.vlan
    if not result.created:
        print(f"VLAN {vlan.tag} on {vlan.parent_interface} already exists in the configuration.")
        return

    print(f"VLAN {vlan.tag} on {vlan.parent_interface} has been successfully added and made persistent.")
    if result.interface is not None:
        print(f"Interface {result.interface.name}: {result.interface.ip_address}/{result.interface.netmask}")
    if not result.reloaded:
        print("Configuration was not reloaded; apply it from the Web GUI or rerun without --no-reload.")
    print(f"Backup: {result.snapshot}")
    print(f"You can verify this in the OPNsense Web GUI or by inspecting {store.path}.")


if __name__ == "__main__":
    main()
