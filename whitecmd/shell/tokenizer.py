"""Shell-like command-line tokenizer.

The whitelist decision is computed over the argument vector this module
produces, so it has to split a line the way a POSIX shell would:

- whitespace separates words unless quoted or escaped
- ``\\`` outside quotes makes the next character literal
- single quotes keep everything literal
- double quotes keep everything literal except ``"``; a backslash is
  kept together with the character after it
- `` `cmd` `` and ``$(cmd)`` are evaluated only when substitution is
  enabled, otherwise they are ordinary text
- an unquoted ``; & | < >`` ends the command; the rest of the line is
  not scanned and the stop position is reported

The scan is a single pass over the decoded characters of the line with an
explicit state (see ``ParseState``).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import CommandSyntaxError, SubstitutionError
from .execution import CommandExecutor, ShellCommandExecutor
from .types import ParseResult, ParseState

logger = logging.getLogger(__name__)

WHITESPACE = frozenset(" \t\r\n")

# Unquoted, these end the command being tokenized
TERMINATORS = frozenset(";&|<>")


class Tokenizer:
    """Split command lines into argument tokens.

    Args:
        allow_substitution: Evaluate backtick and ``$(...)`` spans by
            running them through ``executor``. Off by default.
        working_directory: Directory sub-commands run in (None = cwd)
        executor: Capability used to run sub-commands. Defaults to a
            ``ShellCommandExecutor``; it is only called when substitution
            is enabled.
    """

    def __init__(
        self,
        allow_substitution: bool = False,
        working_directory: Optional[Union[str, Path]] = None,
        executor: Optional[CommandExecutor] = None,
    ):
        self._allow_substitution = allow_substitution
        self._working_directory = working_directory
        if executor is None:
            executor = ShellCommandExecutor()
        self._executor: CommandExecutor = executor

    @property
    def allow_substitution(self) -> bool:
        return self._allow_substitution

    @property
    def working_directory(self) -> Optional[Union[str, Path]]:
        return self._working_directory

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    def parse(self, line: str) -> ParseResult:
        """Tokenize a command line.

        Args:
            line: Raw command line

        Returns:
            ParseResult with the tokens in order and the terminator position

        Raises:
            CommandSyntaxError: If the line ends inside a quote, escape or
                substitution span
            SubstitutionError: If a substituted sub-command fails
        """
        tokens: List[str] = []
        current: List[str] = []
        span: List[str] = []
        state = ParseState.NORMAL
        terminator: Optional[int] = None

        def flush() -> None:
            token = "".join(current)
            if token:
                tokens.append(token)
            current.clear()

        length = len(line)
        i = 0
        while i < length:
            ch = line[i]

            if state is ParseState.NORMAL:
                if ch in WHITESPACE:
                    flush()
                elif ch == "\\":
                    state = ParseState.ESCAPED
                elif ch == "'":
                    state = ParseState.SINGLE_QUOTE
                elif ch == '"':
                    state = ParseState.DOUBLE_QUOTE
                elif ch == "`" and self._allow_substitution:
                    state = ParseState.BACKTICK
                elif (
                    ch == "$"
                    and self._allow_substitution
                    and i + 1 < length
                    and line[i + 1] == "("
                ):
                    state = ParseState.DOLLAR_COMMAND
                    i += 1
                elif ch in TERMINATORS:
                    flush()
                    terminator = i
                    break
                else:
                    current.append(ch)

            elif state is ParseState.ESCAPED:
                current.append(ch)
                state = ParseState.NORMAL

            elif state is ParseState.SINGLE_QUOTE:
                if ch == "'":
                    state = ParseState.NORMAL
                else:
                    current.append(ch)

            elif state is ParseState.DOUBLE_QUOTE:
                if ch == '"':
                    state = ParseState.NORMAL
                elif ch == "\\":
                    # Backslash is kept along with the escaped character
                    current.append(ch)
                    if i + 1 < length:
                        current.append(line[i + 1])
                        i += 1
                else:
                    current.append(ch)

            else:
                closer = "`" if state is ParseState.BACKTICK else ")"
                if ch == closer:
                    current.append(self._substitute("".join(span)))
                    span.clear()
                    state = ParseState.NORMAL
                else:
                    span.append(ch)

            i += 1

        if state is not ParseState.NORMAL:
            raise CommandSyntaxError(line, state)

        flush()
        logger.debug(f"Tokenized {line!r} into {tokens} (terminator={terminator})")
        return ParseResult(tokens=tuple(tokens), terminator=terminator)

    def _substitute(self, command: str) -> str:
        """Run a substituted sub-command and return its trimmed output."""
        try:
            output = self._executor.execute(command, self._working_directory)
        except SubstitutionError:
            raise
        except Exception as e:
            raise SubstitutionError(command, str(e)) from e
        return output.rstrip()


def parse_command(
    line: str,
    *,
    allow_substitution: bool = False,
    working_directory: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Tokenize ``line`` with a one-off Tokenizer and return the tokens."""
    tokenizer = Tokenizer(
        allow_substitution=allow_substitution,
        working_directory=working_directory,
    )
    return list(tokenizer.parse(line).tokens)


__all__ = [
    "TERMINATORS",
    "Tokenizer",
    "parse_command",
]
