"""Pydantic models for filter rule cloning."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from opnconf.store.document import get_text


class FirewallRule(BaseModel):
    """Read-only view of a ``<rule>`` under ``<filter>``."""

    rule_id: str
    interface: str = ""
    uuid: Optional[str] = None
    other_fields: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_element(cls, elem: ET.Element) -> FirewallRule:
        fields = {}
        for child in elem:
            if not isinstance(child.tag, str) or child.tag in ("ruleid", "interface"):
                continue
            fields[child.tag] = get_text(child).strip()
        return cls(
            rule_id=get_text(elem.find("ruleid")).strip() or elem.get("uuid", ""),
            interface=get_text(elem.find("interface")).strip(),
            uuid=elem.get("uuid"),
            other_fields=fields,
        )


class CloneResult(BaseModel):
    source_rule_id: str
    clones: list[FirewallRule] = Field(default_factory=list)
    snapshot: Optional[Path] = None
    reloaded: bool = False

    @property
    def clone_ids(self) -> list[str]:
        return [c.rule_id for c in self.clones]
