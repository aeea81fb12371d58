"""Configuration store: the XML document and its snapshots."""

from opnconf.store.config_store import ConfigStore
from opnconf.store.document import ConfigDocument, get_text
from opnconf.store.snapshot import SnapshotInfo, list_snapshots, snapshot, take_snapshot

__all__ = [
    "ConfigStore",
    "ConfigDocument",
    "get_text",
    "SnapshotInfo",
    "take_snapshot",
    "snapshot",
    "list_snapshots",
]
