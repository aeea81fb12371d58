"""Runtime settings, read from the environment and overridden by CLI flags."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_CONFIG_FILE = Path("/conf/config.xml")
DEFAULT_FULL_RELOAD = ["/usr/local/etc/rc.reload_all"]
DEFAULT_FILTER_RELOAD = ["configctl", "filter", "reload"]


class Settings(BaseModel):
    config_file: Path = DEFAULT_CONFIG_FILE
    backup_dir: Optional[Path] = None
    full_reload_command: list[str] = Field(default_factory=lambda: list(DEFAULT_FULL_RELOAD))
    filter_reload_command: list[str] = Field(default_factory=lambda: list(DEFAULT_FILTER_RELOAD))
    root_tag: str = "opnsense"

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> Settings:
        """Build settings from ``OPNCONF_*`` environment variables.

        Reload commands are shell-split, so ``OPNCONF_FILTER_RELOAD="configctl filter reload"``
        yields ``["configctl", "filter", "reload"]``.
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get("OPNCONF_CONFIG_FILE"):
            values["config_file"] = Path(env["OPNCONF_CONFIG_FILE"])
        if env.get("OPNCONF_BACKUP_DIR"):
            values["backup_dir"] = Path(env["OPNCONF_BACKUP_DIR"])
        if env.get("OPNCONF_FULL_RELOAD"):
            values["full_reload_command"] = shlex.split(env["OPNCONF_FULL_RELOAD"])
        if env.get("OPNCONF_FILTER_RELOAD"):
            values["filter_reload_command"] = shlex.split(env["OPNCONF_FILTER_RELOAD"])
        return cls(**values)
