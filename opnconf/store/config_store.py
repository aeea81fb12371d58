"""Handle on a configuration file passed explicitly to every operation."""

from __future__ import annotations

import os
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Optional

from opnconf.settings import Settings
from opnconf.store.document import ConfigDocument
from opnconf.store.snapshot import SnapshotInfo, list_snapshots, snapshot


class ConfigStore:
    """A configuration file plus where its snapshots go.

    Callers must serialize all mutating operations against one store; there
    is no locking.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        backup_dir: Optional[str | os.PathLike[str]] = None,
        root_tag: str = "opnsense",
    ):
        self.path = Path(path)
        self.backup_dir = Path(backup_dir) if backup_dir is not None else None
        self.root_tag = root_tag

    @classmethod
    def from_settings(cls, settings: Settings) -> ConfigStore:
        return cls(settings.config_file, settings.backup_dir, settings.root_tag)

    def load(self) -> ConfigDocument:
        return ConfigDocument.load(self.path, root_tag=self.root_tag)

    def snapshot(self) -> AbstractContextManager[Path]:
        return snapshot(self.path, self.backup_dir)

    def snapshots(self) -> list[SnapshotInfo]:
        return list_snapshots(self.path, self.backup_dir)

    def __repr__(self) -> str:
        return f"ConfigStore({str(self.path)!r})"
