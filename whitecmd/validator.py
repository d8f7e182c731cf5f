"""Whitelist validation of shell command lines.

Whitelist model:
- The first token (lowercased) must name a command in the whitelist
- ``["*"]`` allows any arguments
- ``[]`` allows the bare command (and, for compatibility, one argument)
- Otherwise every ``-``-prefixed argument must be listed; ``--opt=value``
  is matched as ``--opt``. Positional arguments are not checked.

A flag that is not allowed makes ``validate`` return False. Every other
reason a line cannot be accepted is raised as a typed error.

Security note: by default only the part of a line before the first
unquoted ``; & | < >`` is validated. Set ``chained_commands: deny`` if
the caller hands whole lines to a shell.
"""
from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

from .config import WILDCARD, ValidatorSettings, WhitelistConfig, load_config
from .errors import (
    ChainedCommandError,
    EmptyCommandError,
    MalformedTokenSequenceError,
    UnknownCommandError,
)
from .shell.execution import CommandExecutor, ShellCommandExecutor
from .shell.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


def validate_args(args: Sequence[str], allowed: Sequence[str]) -> bool:
    """Check a command's arguments against its allowed specifiers.

    Args:
        args: Tokens after the base command
        allowed: Allowed flag specifiers for the base command

    Returns:
        True if the arguments are permitted
    """
    if len(allowed) == 0 and len(args) > 1:
        return False

    if len(allowed) == 1 and allowed[0] == WILDCARD:
        return True

    for arg in args:
        arg = arg.strip()
        if not arg or not arg.startswith("-"):
            continue

        flag = arg.split("=", 1)[0]
        if flag not in allowed:
            logger.debug(f"Argument '{arg}' is not in allowed list {list(allowed)}")
            return False
        logger.debug(f"Argument '{arg}' matches specifier '{flag}'")

    return True


class Validator:
    """Decide whether command lines are allowed by a whitelist.

    The rules are copied into a read-only mapping on construction, so one
    Validator can be shared between threads.

    Args:
        rules: Mapping of base command to allowed flag specifiers. Keys are
            lowercased.
        settings: Evaluation policy (substitution, chained commands)
        executor: Sub-command runner used when substitution is enabled.
            Defaults to a ``ShellCommandExecutor`` honouring
            ``settings.substitution_timeout``.
    """

    def __init__(
        self,
        rules: Mapping[str, Iterable[str]],
        settings: Optional[ValidatorSettings] = None,
        executor: Optional[CommandExecutor] = None,
    ):
        self._rules: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {name.lower(): tuple(allowed) for name, allowed in rules.items()}
        )
        self._settings = settings or ValidatorSettings()

        if executor is None and self._settings.allow_substitution:
            executor = ShellCommandExecutor(timeout=self._settings.substitution_timeout)
        self._tokenizer = Tokenizer(
            allow_substitution=self._settings.allow_substitution,
            working_directory=self._settings.working_directory,
            executor=executor,
        )

    @classmethod
    def from_config(
        cls,
        config: WhitelistConfig,
        executor: Optional[CommandExecutor] = None,
    ) -> "Validator":
        """Build a Validator from a loaded whitelist document."""
        return cls(config.rules(), settings=config.settings, executor=executor)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        executor: Optional[CommandExecutor] = None,
    ) -> "Validator":
        """Load a whitelist file and build a Validator from it."""
        return cls.from_config(load_config(path), executor=executor)

    @property
    def commands(self) -> Mapping[str, Tuple[str, ...]]:
        """Read-only mapping of command -> allowed specifiers."""
        return self._rules

    @property
    def settings(self) -> ValidatorSettings:
        return self._settings

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    def validate(self, line: str) -> bool:
        """Check a raw command line against the whitelist.

        Args:
            line: Command line as it would be given to a shell

        Returns:
            True if the command is allowed, False if an argument is not

        Raises:
            EmptyCommandError: If the line is blank
            CommandSyntaxError: If a quote, escape or substitution is unclosed
            SubstitutionError: If a substituted sub-command fails
            ChainedCommandError: If chained commands are denied and the line
                continues after a shell metacharacter
            MalformedTokenSequenceError: If the line yields no tokens
            UnknownCommandError: If the base command is not whitelisted
        """
        line = line.strip()
        if not line:
            raise EmptyCommandError()

        result = self._tokenizer.parse(line)

        if result.terminator is not None:
            metacharacter = line[result.terminator]
            if self._settings.chained_commands == "deny":
                raise ChainedCommandError(line, result.terminator, metacharacter)
            logger.warning(
                f"Validating only the first clause of {line!r}: "
                f"stopped at '{metacharacter}' (position {result.terminator})"
            )

        if not result.tokens:
            raise MalformedTokenSequenceError(line)

        base = result.tokens[0].lower()
        allowed = self._rules.get(base)
        if allowed is None:
            raise UnknownCommandError(base)

        decision = validate_args(result.tokens[1:], allowed)
        logger.info(f"Command {line!r} {'allowed' if decision else 'denied'}")
        return decision


__all__ = [
    "Validator",
    "validate_args",
]
