"""Shared input validation and store coercion."""

from __future__ import annotations

import ipaddress
import os
import re
from typing import Any

from opnconf.exceptions import ValidationError
from opnconf.store.config_store import ConfigStore

VLAN_TAG_MIN = 1
VLAN_TAG_MAX = 4094


def _as_store(store: ConfigStore | str | os.PathLike[str]) -> ConfigStore:
    if isinstance(store, ConfigStore):
        return store
    return ConfigStore(store)


def _require_text(value: Any, what: str) -> str:
    """Return ``value`` stripped, or raise ValidationError if it is absent or blank."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{what} is required")
    return str(value).strip()


def _require_int(value: Any, what: str, minimum: int = 1, maximum: int | None = None) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{what} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{what} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{what} must be an integer, got {value!r}") from e
    if isinstance(value, float) and number != value:
        raise ValidationError(f"{what} must be an integer, got {value!r}")
    if number < minimum or (maximum is not None and number > maximum):
        upper = f"-{maximum}" if maximum is not None else " or more"
        raise ValidationError(f"{what} must be {minimum}{upper}, got {number}")
    return number


def _validate_interface_name(name: str) -> bool:
    """Validate interface name to prevent markup or shell injection."""
    return bool(re.match(r"^[a-zA-Z0-9._-]+$", name))


def _validate_ipv4(ip: str) -> bool:
    try:
        ipaddress.IPv4Address(ip)
        return True
    except ValueError:
        return False


def _validate_netmask(netmask: str) -> bool:
    """Accept contiguous dotted IPv4 netmasks only (``255.255.255.0``, not ``24`` or ``0.0.0.255``)."""
    try:
        mask = ipaddress.IPv4Address(netmask)
        network = ipaddress.IPv4Network(f"0.0.0.0/{netmask}")
    except ValueError:
        return False
    return network.netmask == mask and network.prefixlen > 0
