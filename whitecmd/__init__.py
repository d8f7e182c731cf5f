"""whitecmd: whitelist gate for shell command lines.

Callers submit a raw command line; whitecmd tokenizes it the way a shell
would and checks the base command and its flags against a configured
whitelist. It never runs the validated command itself.

Main entry points:
- whitecmd CLI: Validate commands against a YAML whitelist
- Validator: Programmatic API
"""
from __future__ import annotations

from .config import ValidatorSettings, WhitelistConfig, load_config
from .errors import (
    ChainedCommandError,
    CommandSyntaxError,
    ConfigError,
    EmptyCommandError,
    MalformedTokenSequenceError,
    SubstitutionError,
    UnknownCommandError,
    WhitecmdError,
)
from .shell import ParseResult, ShellCommandExecutor, Tokenizer, parse_command
from .validator import Validator, validate_args

__all__ = [
    # Validation
    "Validator",
    "validate_args",
    # Configuration
    "ValidatorSettings",
    "WhitelistConfig",
    "load_config",
    # Tokenizing
    "ParseResult",
    "ShellCommandExecutor",
    "Tokenizer",
    "parse_command",
    # Errors
    "ChainedCommandError",
    "CommandSyntaxError",
    "ConfigError",
    "EmptyCommandError",
    "MalformedTokenSequenceError",
    "SubstitutionError",
    "UnknownCommandError",
    "WhitecmdError",
    # Version
    "__version__",
]

__version__ = "0.1.0"
