"""VLAN registrar: ensure a VLAN (and optionally its interface assignment) exists."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from typing import Any, Optional

from loguru import logger

from opnconf._util import (
    VLAN_TAG_MAX,
    VLAN_TAG_MIN,
    _as_store,
    _require_int,
    _require_text,
    _validate_interface_name,
    _validate_ipv4,
    _validate_netmask,
)
from opnconf.exceptions import ReloadError, ValidationError
from opnconf.reload import Reloader, ReloadScope
from opnconf.store.config_store import ConfigStore
from opnconf.store.document import get_text
from opnconf.vlans.models import (
    DEFAULT_NETMASK,
    InterfaceAssignment,
    VlanEntry,
    VlanRegistration,
    vlan_description,
)


def interface_name_for(tag: int) -> str:
    return f"vlan{tag}"


def find_vlan(vlans: ET.Element, parent_interface: str, tag: int) -> Optional[ET.Element]:
    """Return the ``<vlan>`` matching the (parent interface, tag) pair, if any."""
    for vlan in vlans.findall("vlan"):
        if get_text(vlan.find("if")).strip() != parent_interface:
            continue
        try:
            existing_tag = int(get_text(vlan.find("tag")).strip())
        except ValueError:
            continue
        if existing_tag == tag:
            return vlan
    return None


def list_vlans(vlans: ET.Element) -> list[VlanEntry]:
    entries = []
    for vlan in vlans.findall("vlan"):
        try:
            tag = int(get_text(vlan.find("tag")).strip())
        except ValueError:
            logger.warning(f"Skipping <vlan> with non-numeric tag {get_text(vlan.find('tag'))!r}")
            continue
        entries.append(
            VlanEntry(
                parent_interface=get_text(vlan.find("if")).strip(),
                tag=tag,
                description=get_text(vlan.find("descr")),
            )
        )
    return entries


def _build_request(
    parent_interface: Any, vlan_id: Any, ip_address: Any, netmask: Any
) -> tuple[VlanEntry, Optional[InterfaceAssignment]]:
    parent = _require_text(parent_interface, "Parent interface")
    if not _validate_interface_name(parent):
        raise ValidationError(f"Invalid parent interface name {parent!r}")
    tag = _require_int(vlan_id, "VLAN ID", VLAN_TAG_MIN, VLAN_TAG_MAX)
    vlan = VlanEntry(parent_interface=parent, tag=tag, description=vlan_description(tag))
    mask = DEFAULT_NETMASK if netmask is None or not str(netmask).strip() else str(netmask).strip()
    if not _validate_netmask(mask):
        raise ValidationError(f"Invalid netmask {mask!r}")

    if ip_address is None or not str(ip_address).strip():
        return vlan, None

    ip = str(ip_address).strip()
    if not _validate_ipv4(ip):
        raise ValidationError(f"Invalid IPv4 address {ip!r}")

    assignment = InterfaceAssignment(
        name=interface_name_for(tag),
        description=vlan_description(tag),
        enabled=True,
        ip_address=ip,
        netmask=mask,
    )
    return vlan, assignment


def register_vlan(
    store: ConfigStore | str | os.PathLike[str],
    parent_interface: str,
    vlan_id: int,
    ip_address: Optional[str] = None,
    netmask: str = DEFAULT_NETMASK,
    *,
    reloader: Optional[Reloader] = None,
    reload: bool = True,
) -> VlanRegistration:
    """Ensure a VLAN exists in the configuration, then run a full reload.

    Args:
        store: Configuration store (or path to the config file).
        parent_interface: Physical parent interface, e.g. ``igb1``.
        vlan_id: VLAN tag, 1-4094.
        ip_address: Optional IPv4 address; when given an interface assignment
            named ``vlan<vlan_id>`` is added as well.
        netmask: Dotted netmask for the interface assignment.
        reloader: Reloader to use (default: the stock OPNsense commands).
        reload: Set False to write the configuration without reloading.

    Returns:
        The registration outcome. ``created`` is False if a VLAN with the same
        (parent interface, tag) pair already existed; nothing is written then.

    Raises:
        ValidationError: On missing or malformed input (before any file access).
        SectionNotFoundError: If ``<vlans>`` (or ``<interfaces>`` when an IP
            is given) is missing; the document is left untouched.
        ReloadError: If the reload fails. The written change is not rolled back.
    """
    vlan, assignment = _build_request(parent_interface, vlan_id, ip_address, netmask)
    store = _as_store(store)
    reloader = reloader or Reloader()

    with store.snapshot() as backup:
        doc = store.load()
        vlans = doc.section("vlans")

        if find_vlan(vlans, *vlan.key) is not None:
            logger.info(f"VLAN {vlan.tag} on {vlan.parent_interface} already exists in the configuration")
            return VlanRegistration(vlan=vlan, created=False, snapshot=backup)

        interfaces = doc.section("interfaces") if assignment is not None else None
        if assignment is not None and interfaces is not None and interfaces.find(assignment.name) is not None:
            raise ValidationError(
                f"Interface assignment {assignment.name} already exists; "
                f"VLAN {vlan.tag} on {vlan.parent_interface} cannot be given an address"
            )

        logger.info(f"Adding VLAN {vlan.tag} on {vlan.parent_interface} to the configuration")
        doc.append_entry(vlans, vlan.to_element())
        if assignment is not None and interfaces is not None:
            logger.info(f"Adding interface assignment for VLAN {vlan.tag} with IP {assignment.ip_address}")
            doc.append_entry(interfaces, assignment.to_element())
        doc.save()

        result = VlanRegistration(vlan=vlan, interface=assignment, created=True, snapshot=backup)
        if reload:
            try:
                reloader.reload(ReloadScope.FULL)
            except ReloadError:
                logger.error(f"VLAN {vlan.tag} was written to {store.path} but the reload failed")
                raise
            result.reloaded = True

    return result
