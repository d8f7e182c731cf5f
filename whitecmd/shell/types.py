"""Tokenizer type definitions.

This module contains the data types used by the tokenizer:
- ParseState: Lexical mode of the scanner
- ParseResult: Token sequence plus where scanning stopped
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ParseState(Enum):
    """Lexical mode of the command-line scanner."""

    NORMAL = "normal"
    ESCAPED = "escape sequence"
    SINGLE_QUOTE = "single quote"
    DOUBLE_QUOTE = "double quote"
    BACKTICK = "backtick"
    DOLLAR_COMMAND = "dollar command"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ParseResult:
    """Result of tokenizing one command line.

    ``terminator`` is the character index of the unquoted ``; & | < >``
    that ended the scan early, or None when the whole line was consumed.
    """

    tokens: Tuple[str, ...]
    terminator: Optional[int] = None

    @property
    def truncated(self) -> bool:
        """True if scanning stopped at a shell metacharacter."""
        return self.terminator is not None


__all__ = [
    "ParseResult",
    "ParseState",
]
