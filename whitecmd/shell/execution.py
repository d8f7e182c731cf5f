"""Sub-command execution for command substitution.

The tokenizer only ever runs a sub-command through a ``CommandExecutor``.
``ShellCommandExecutor`` is the default one and hands the text to the host
shell; tests and embedding applications can inject their own.

Security note: a substituted sub-command runs *before* the whitelist has
seen the outer command. Leave substitution disabled unless every caller
is trusted.
"""
from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Union

from ..errors import SubstitutionError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class CommandExecutor(Protocol):
    """Capability that runs a sub-command and returns its trimmed stdout."""

    def execute(self, command: str, working_directory: Optional[PathLike] = None) -> str:
        """Run ``command`` and return its output.

        Raises:
            SubstitutionError: If the command could not be run or failed
        """
        ...


def shell_argv(command: str) -> List[str]:
    """Build the argv that runs ``command`` through the host shell."""
    if os.name == "nt":
        shell = os.environ.get("COMSPEC") or "cmd"
        return [shell, "/c", command]
    return ["/bin/sh", "-c", command]


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class ShellCommandExecutor:
    """Run sub-commands through the host shell and capture stdout.

    Args:
        timeout: Seconds to wait before giving up (None waits forever)
        env: Environment for the child process (defaults to the current one)
    """

    def __init__(self, timeout: Optional[float] = None, env: Optional[dict] = None):
        self.timeout = timeout
        self.env = env

    def execute(self, command: str, working_directory: Optional[PathLike] = None) -> str:
        cwd = working_directory or None
        logger.info(f"Executing substituted command: {command!r} (cwd={cwd})")

        try:
            result = subprocess.run(
                shell_argv(command),
                cwd=cwd,
                capture_output=True,
                timeout=self.timeout,
                env=self.env,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise SubstitutionError(
                command,
                f"exit status {e.returncode}",
                stderr=_decode(e.stderr),
            ) from e
        except subprocess.TimeoutExpired as e:
            raise SubstitutionError(
                command,
                f"timed out after {self.timeout} seconds",
                stderr=_decode(e.stderr),
            ) from e
        except OSError as e:
            raise SubstitutionError(command, str(e)) from e

        return _decode(result.stdout).strip()


__all__ = [
    "CommandExecutor",
    "ShellCommandExecutor",
    "shell_argv",
]
