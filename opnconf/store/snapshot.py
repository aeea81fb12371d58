"""Timestamped pre-mutation copies of the configuration file.

Snapshots are the only recovery path: they are never validated, pruned or
restored automatically.
"""

from __future__ import annotations

import os
import re
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger
from pydantic import BaseModel

from opnconf.exceptions import DocumentError

SNAPSHOT_TIME_FORMAT = "%Y-%m-%d_%H:%M:%S"


class SnapshotInfo(BaseModel):
    path: Path
    taken_at: datetime
    size: int


def _snapshot_dir(path: Path, backup_dir: Optional[Path]) -> Path:
    return Path(backup_dir) if backup_dir is not None else path.parent


def take_snapshot(
    path: str | os.PathLike[str],
    backup_dir: Optional[Path] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Copy ``path`` to ``<name>.bak.<YYYY-MM-DD_HH:MM:SS>`` and return the copy's path.

    An existing snapshot with the same name is never overwritten; a numeric
    suffix is appended instead.
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentError(f"Configuration file {path} does not exist")

    target_dir = _snapshot_dir(path, backup_dir)
    stamp = (now or datetime.now()).strftime(SNAPSHOT_TIME_FORMAT)
    base = target_dir / f"{path.name}.bak.{stamp}"
    candidate = base
    n = 0
    while candidate.exists():
        n += 1
        candidate = base.with_name(f"{base.name}.{n}")

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, candidate)
    except OSError as e:
        raise DocumentError(f"Failed to back up {path} to {candidate}: {e}") from e

    logger.info(f"Backed up current configuration to {candidate}")
    return candidate


@contextmanager
def snapshot(path: str | os.PathLike[str], backup_dir: Optional[Path] = None) -> Iterator[Path]:
    """Take a snapshot and keep it whatever happens inside the ``with`` block."""
    backup = take_snapshot(path, backup_dir)
    try:
        yield backup
    except Exception:
        logger.error(f"Operation failed, pre-mutation snapshot retained at {backup}")
        raise


def list_snapshots(path: str | os.PathLike[str], backup_dir: Optional[Path] = None) -> list[SnapshotInfo]:
    """Return the retained snapshots of ``path``, oldest first."""
    path = Path(path)
    target_dir = _snapshot_dir(path, backup_dir)
    if not target_dir.is_dir():
        return []

    pattern = re.compile(re.escape(path.name) + r"\.bak\.(\d{4}-\d{2}-\d{2}_\d{2}:\d{2}:\d{2})(?:\.(\d+))?$")
    found: list[tuple[datetime, int, SnapshotInfo]] = []
    for candidate in target_dir.iterdir():
        m = pattern.match(candidate.name)
        if not m or not candidate.is_file():
            continue
        taken_at = datetime.strptime(m.group(1), SNAPSHOT_TIME_FORMAT)
        seq = int(m.group(2) or 0)
        info = SnapshotInfo(path=candidate, taken_at=taken_at, size=candidate.stat().st_size)
        found.append((taken_at, seq, info))

    return [info for _, _, info in sorted(found, key=lambda t: (t[0], t[1]))]
