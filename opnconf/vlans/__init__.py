"""VLAN registrar: add VLANs and their interface assignments."""

from opnconf.vlans.models import InterfaceAssignment, VlanEntry, VlanRegistration
from opnconf.vlans.registrar import find_vlan, list_vlans, register_vlan

__all__ = [
    "register_vlan",
    "find_vlan",
    "list_vlans",
    "VlanEntry",
    "InterfaceAssignment",
    "VlanRegistration",
]
