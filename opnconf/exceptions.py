"""Exception hierarchy for configuration mutation."""

from __future__ import annotations


class OPNConfError(Exception):
    """Base exception for all configuration mutation errors."""


class ValidationError(OPNConfError):
    """Missing or malformed input."""


class NotFoundError(OPNConfError):
    """Referenced entity is absent from the configuration document."""


class SectionNotFoundError(NotFoundError):
    """A required section of the configuration document is missing."""

    def __init__(self, section: str, path: str | None = None):
        self.section = section
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"Section <{section}> not found{where}")


class DocumentError(OPNConfError):
    """Configuration document is missing, unreadable or malformed."""


class ReloadError(OPNConfError):
    """External reload process failed."""

    def __init__(self, message: str, returncode: int | None = None, command: list[str] | None = None):
        self.returncode = returncode
        self.command = command or []
        super().__init__(message)
