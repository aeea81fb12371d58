"""OPNsense configuration mutation library.

Structured edits to an OPNsense ``config.xml`` (VLAN registration, filter
rule cloning) followed by a reload of the running daemon.
"""

__version__ = "0.0.1"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink with a convenient format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


from opnconf.exceptions import (  # noqa: E402
    DocumentError,
    NotFoundError,
    OPNConfError,
    ReloadError,
    SectionNotFoundError,
    ValidationError,
)
from opnconf.reload import Reloader, ReloadScope  # noqa: E402
from opnconf.rules import CloneResult, clone_rule  # noqa: E402
from opnconf.settings import Settings  # noqa: E402
from opnconf.store import ConfigDocument, ConfigStore, list_snapshots, snapshot, take_snapshot  # noqa: E402
from opnconf.vlans import VlanRegistration, register_vlan  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "register_vlan",
    "clone_rule",
    "VlanRegistration",
    "CloneResult",
    "ConfigStore",
    "ConfigDocument",
    "take_snapshot",
    "snapshot",
    "list_snapshots",
    "Reloader",
    "ReloadScope",
    "Settings",
    "OPNConfError",
    "ValidationError",
    "NotFoundError",
    "SectionNotFoundError",
    "DocumentError",
    "ReloadError",
]
