"""Pydantic models for VLAN registration."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

DEFAULT_NETMASK = "255.255.255.0"


def vlan_description(tag: int) -> str:
    return f"VLAN_{tag}"


class VlanEntry(BaseModel):
    parent_interface: str
    tag: int
    description: str = ""

    @property
    def key(self) -> tuple[str, int]:
        return (self.parent_interface, self.tag)

    def to_element(self) -> ET.Element:
        elem = ET.Element("vlan")
        ET.SubElement(elem, "if").text = self.parent_interface
        ET.SubElement(elem, "tag").text = str(self.tag)
        ET.SubElement(elem, "descr").text = self.description
        return elem


class InterfaceAssignment(BaseModel):
    name: str  # e.g. "vlan20"
    description: str = ""
    enabled: bool = True
    ip_address: str
    netmask: str = DEFAULT_NETMASK

    def to_element(self) -> ET.Element:
        elem = ET.Element(self.name)
        ET.SubElement(elem, "if").text = self.name
        ET.SubElement(elem, "descr").text = self.description
        ET.SubElement(elem, "enable").text = "1" if self.enabled else "0"
        ET.SubElement(elem, "ipaddr").text = self.ip_address
        ET.SubElement(elem, "subnet").text = self.netmask
        return elem


class VlanRegistration(BaseModel):
    """Outcome of a registrar call. ``created`` is False when the VLAN already existed."""

    vlan: VlanEntry
    interface: Optional[InterfaceAssignment] = None
    created: bool = False
    snapshot: Optional[Path] = None
    reloaded: bool = False
