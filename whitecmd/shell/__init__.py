"""Shell command-line tokenizing.

This package turns a raw command line into the argument vector a shell
would hand to the program, optionally evaluating command substitution
through an injected executor.
"""
from __future__ import annotations

from .execution import CommandExecutor, ShellCommandExecutor, shell_argv
from .tokenizer import TERMINATORS, Tokenizer, parse_command
from .types import ParseResult, ParseState

__all__ = [
    # Constants
    "TERMINATORS",
    # Types
    "ParseResult",
    "ParseState",
    # Execution
    "CommandExecutor",
    "ShellCommandExecutor",
    "shell_argv",
    # Tokenizing
    "Tokenizer",
    "parse_command",
]
