"""Rule cloner: duplicate a filter rule onto another interface."""

from __future__ import annotations

import copy
import os
import uuid
import xml.etree.ElementTree as ET
from typing import Callable, Optional

from loguru import logger

from opnconf._util import _as_store, _require_int, _require_text, _validate_interface_name
from opnconf.exceptions import NotFoundError, ReloadError, ValidationError
from opnconf.reload import Reloader, ReloadScope
from opnconf.rules.models import CloneResult, FirewallRule
from opnconf.store.config_store import ConfigStore
from opnconf.store.document import get_text


def _new_rule_id() -> str:
    return str(uuid.uuid4())


def find_rule(filter_section: ET.Element, rule_id: str) -> Optional[ET.Element]:
    """Find a ``<rule>`` by its ``<ruleid>`` text or its ``uuid`` attribute."""
    for rule in filter_section.findall("rule"):
        if get_text(rule.find("ruleid")).strip() == rule_id or rule.get("uuid") == rule_id:
            return rule
    return None


def _set_child_text(elem: ET.Element, tag: str, value: str) -> None:
    child = elem.find(tag)
    if child is None:
        child = ET.SubElement(elem, tag)
        # keep the new field on its own line, like its siblings
        if len(elem) > 1:
            prev = elem[-2]
            child.tail = prev.tail
            prev.tail = elem.text
    child.text = value


def _build_clone(source: ET.Element, new_id: str, new_interface: str) -> ET.Element:
    clone = copy.deepcopy(source)
    if source.find("ruleid") is not None or source.get("uuid") is None:
        _set_child_text(clone, "ruleid", new_id)
    if source.get("uuid") is not None:
        clone.set("uuid", new_id)
    _set_child_text(clone, "interface", new_interface)
    return clone


def _validate_interface_list(value: str) -> bool:
    # floating rules carry a comma separated list, e.g. "lan,opt1"
    return all(_validate_interface_name(part) for part in value.split(","))


def clone_rule(
    store: ConfigStore | str | os.PathLike[str],
    source_rule_id: str,
    clone_count: int,
    new_interface: str,
    *,
    reloader: Optional[Reloader] = None,
    reload: bool = True,
    id_factory: Callable[[], str] = _new_rule_id,
) -> CloneResult:
    """Clone a filter rule ``clone_count`` times onto ``new_interface``, then reload the filter.

    Every clone is a full copy of the source rule with a freshly generated
    identifier and the new interface; clones are appended to ``<filter>`` in
    creation order. The document is written once, after all clones are built.

    Raises:
        ValidationError: If a parameter is missing or ``clone_count`` < 1.
        SectionNotFoundError: If the document has no ``<filter>`` section.
        NotFoundError: If no rule has the given identifier.
        ReloadError: If the filter reload fails. Clones are not rolled back.
    """
    rule_id = _require_text(source_rule_id, "Source rule ID")
    count = _require_int(clone_count, "Number of clones", minimum=1)
    interface = _require_text(new_interface, "New source interface")
    if not _validate_interface_list(interface):
        raise ValidationError(f"Invalid interface name {interface!r}")

    store = _as_store(store)
    reloader = reloader or Reloader()

    with store.snapshot() as backup:
        doc = store.load()
        filter_section = doc.section("filter")
        logger.info(f"Extracting source rule with ID {rule_id}")
        source = find_rule(filter_section, rule_id)
        if source is None:
            raise NotFoundError(f"Source rule ID {rule_id} not found in configuration")

        logger.info(f"Cloning rule {rule_id} {count} times with new source interface '{interface}'")
        clones: list[FirewallRule] = []
        seen = {get_text(r.find("ruleid")).strip() for r in filter_section.findall("rule")}
        seen.update(r.get("uuid") for r in filter_section.findall("rule") if r.get("uuid"))
        for i in range(1, count + 1):
            new_id = id_factory()
            if not new_id or new_id in seen:
                raise ValidationError(f"Generated rule ID {new_id!r} is empty or already in use")
            seen.add(new_id)
            clone = _build_clone(source, new_id, interface)
            doc.append_entry(filter_section, clone, fresh=False)
            clones.append(FirewallRule.from_element(clone))
            logger.info(f"Created clone #{i} with ID {new_id}, interface set to {interface}")
        doc.save()

        result = CloneResult(source_rule_id=rule_id, clones=clones, snapshot=backup)
        logger.debug(f"Clones of rule {rule_id}: {', '.join(result.clone_ids)}")
        if reload:
            try:
                reloader.reload(ReloadScope.FILTER)
            except ReloadError:
                logger.error(f"{count} clone(s) of rule {rule_id} were written to {store.path} but the reload failed")
                raise
            result.reloaded = True

    return result
