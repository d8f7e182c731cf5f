#!/usr/bin/env python
"""Check shell commands against a whitelist.

Usage:
    whitecmd --cmd "git --version"
    whitecmd --config conf/whitelist.yaml --cmd "ls -la" --cmd "rm -rf /"
    printf 'git -v\\nls\\n' | whitecmd --json

Commands read from stdin are one per line; blank lines are skipped. A run
with no commands at all is an error.

Exit codes:
    0 - every command is allowed
    2 - at least one command is rejected by the whitelist
    1 - configuration error, no commands given, or a command could not
        be evaluated
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from typing import Any, Iterable, List, Optional

from ..config import CONFIG_ENV_VAR, ValidatorSettings, default_config_path, load_config
from ..errors import ConfigError, WhitecmdError
from ..validator import Validator

EXIT_ALLOWED = 0
EXIT_ERROR = 1
EXIT_DENIED = 2

ALLOWED_MESSAGE = "command allowed by whitelist"
DENIED_MESSAGE = "command rejected by whitelist"


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _read_commands(args: argparse.Namespace, parser: argparse.ArgumentParser) -> List[str]:
    if args.commands:
        return list(args.commands)
    if sys.stdin.isatty():
        parser.error("Command required (--cmd or via stdin)")
    # Blank stdin lines are separators, not commands
    return [line for line in sys.stdin.read().splitlines() if line.strip()]


def _build_validator(args: argparse.Namespace) -> Validator:
    config = load_config(args.config)
    overrides: dict[str, Any] = {}
    if args.allow_substitution:
        overrides["allow_substitution"] = True
    if args.dir is not None:
        overrides["working_directory"] = args.dir
    if args.deny_chained:
        overrides["chained_commands"] = "deny"
    if overrides:
        settings = ValidatorSettings.model_validate(
            {**config.settings.model_dump(), **overrides}
        )
        config = config.model_copy(update={"settings": settings})
    return Validator.from_config(config)


def _report(command: str, allowed: Optional[bool], error: Optional[str], as_json: bool) -> None:
    if as_json:
        print(json.dumps({"command": command, "allowed": allowed, "error": error}))
    elif error is not None:
        print(f"Error: {error}", file=sys.stderr)
    else:
        print(ALLOWED_MESSAGE if allowed else DENIED_MESSAGE)


def run(validator: Validator, commands: Iterable[str], as_json: bool = False) -> int:
    """Validate each command and report the outcome.

    Returns:
        Exit code for the whole batch
    """
    exit_code = EXIT_ALLOWED
    for command in commands:
        try:
            allowed = validator.validate(command)
        except WhitecmdError as e:
            _report(command, None, str(e), as_json)
            exit_code = EXIT_ERROR
            continue

        _report(command, allowed, None, as_json)
        if not allowed and exit_code == EXIT_ALLOWED:
            exit_code = EXIT_DENIED
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the whitecmd CLI.

    Returns:
        Exit code (0 allowed, 2 denied, 1 error)
    """
    parser = argparse.ArgumentParser(
        prog="whitecmd",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", "-c",
        default=str(default_config_path()),
        help=f"Whitelist YAML file (default: ${CONFIG_ENV_VAR} or conf/whitelist.yaml)",
    )
    parser.add_argument(
        "--cmd",
        action="append",
        dest="commands",
        default=[],
        metavar="COMMAND",
        help="Shell command to validate (repeatable; default: one per stdin line)",
    )
    parser.add_argument(
        "--allow-substitution",
        action="store_true",
        help="Evaluate `cmd` and $(cmd) by running them (runs code before validation!)",
    )
    parser.add_argument(
        "--dir",
        metavar="PATH",
        help="Working directory for substituted sub-commands",
    )
    parser.add_argument(
        "--deny-chained",
        action="store_true",
        help="Reject lines that continue after an unquoted ; & | < >",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output one JSON object per command",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log decisions (-v) and tokenization details (-vv) to stderr",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show full tracebacks on error",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    commands = _read_commands(args, parser)
    if not commands:
        print("Error: no commands to validate", file=sys.stderr)
        return EXIT_ERROR

    try:
        validator = _build_validator(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return EXIT_ERROR

    try:
        return run(validator, commands, as_json=args.json)
    except KeyboardInterrupt:
        print("\nAborted by user", file=sys.stderr)
        return EXIT_ERROR
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
