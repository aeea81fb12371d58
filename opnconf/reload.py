"""Reload of the running daemon after a configuration change."""

from __future__ import annotations

import subprocess
from enum import Enum
from typing import Optional

from loguru import logger

from opnconf.exceptions import ReloadError
from opnconf.settings import DEFAULT_FILTER_RELOAD, DEFAULT_FULL_RELOAD, Settings


class ReloadScope(str, Enum):
    FULL = "full"
    FILTER = "filter"


class Reloader:
    """Runs the external reload command for a scope.

    The call blocks until the command exits and has no timeout; the exit
    status is the only error signal.
    """

    def __init__(
        self,
        full_command: Optional[list[str]] = None,
        filter_command: Optional[list[str]] = None,
    ):
        self.commands: dict[ReloadScope, list[str]] = {
            ReloadScope.FULL: list(full_command or DEFAULT_FULL_RELOAD),
            ReloadScope.FILTER: list(filter_command or DEFAULT_FILTER_RELOAD),
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> Reloader:
        return cls(settings.full_reload_command, settings.filter_reload_command)

    def reload(self, scope: ReloadScope) -> None:
        """Run the reload command for ``scope``.

        Raises:
            ReloadError: If the command cannot be started or exits nonzero.
        """
        scope = ReloadScope(scope)
        cmd = self.commands[scope]
        logger.info(f"Reloading ({scope.value}): {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ReloadError(f"Reload command {cmd[0]} could not be run: {e}", command=cmd) from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            msg = f"Reload command {' '.join(cmd)} exited with status {result.returncode}"
            if detail:
                msg += f": {detail}"
            raise ReloadError(msg, returncode=result.returncode, command=cmd)

        logger.debug(f"Reload ({scope.value}) finished")
