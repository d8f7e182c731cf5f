"""Error types raised while loading a whitelist or validating a command.

Every rejection reason other than "a flag is not on the allow-list" is a
distinct exception, so callers and audit logs can tell a denied command
apart from one that could not be evaluated at all.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .shell.types import ParseState


class WhitecmdError(Exception):
    """Base class for all whitecmd errors."""

    pass


class ConfigError(WhitecmdError, ValueError):
    """Raised when the whitelist configuration cannot be loaded."""

    pass


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


class EmptyCommandError(WhitecmdError):
    """Raised when the command line is blank."""

    def __init__(self) -> None:
        super().__init__("empty command")


class CommandSyntaxError(WhitecmdError):
    """Raised when input ends inside a quote, escape or substitution span."""

    def __init__(self, line: str, state: "ParseState"):
        self.line = line
        self.state = state
        self.message = f"invalid command line string: unclosed {state}"
        super().__init__(self.message)


class SubstitutionError(WhitecmdError):
    """Raised when a substituted sub-command fails to run.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, command: str, reason: str, stderr: str = ""):
        self.command = command
        self.reason = reason
        self.stderr = stderr
        detail = f"{stderr.strip()}: {reason}" if stderr.strip() else reason
        self.message = f"command substitution failed for '{command}': {detail}"
        super().__init__(self.message)


class UnknownCommandError(WhitecmdError):
    """Raised when the base command has no whitelist entry."""

    def __init__(self, command: str):
        self.command = command
        self.message = f"command '{command}' is not in the whitelist"
        super().__init__(self.message)


class MalformedTokenSequenceError(WhitecmdError):
    """Raised when a non-blank line tokenizes to nothing."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"invalid command format: no tokens in {line!r}")


class ChainedCommandError(WhitecmdError):
    """Raised when chained commands are denied and the line contains one."""

    def __init__(self, line: str, position: int, metacharacter: Optional[str] = None):
        self.line = line
        self.position = position
        self.metacharacter = metacharacter
        self.message = (
            f"command line continues after shell metacharacter "
            f"'{metacharacter}' at position {position}; "
            f"chained commands are not allowed"
        )
        super().__init__(self.message)


__all__ = [
    "ChainedCommandError",
    "CommandSyntaxError",
    "ConfigError",
    "EmptyCommandError",
    "MalformedTokenSequenceError",
    "SubstitutionError",
    "UnknownCommandError",
    "WhitecmdError",
]
