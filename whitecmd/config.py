"""Whitelist configuration loading.

The whitelist is a YAML document:

```yaml
commands:
  git: ["-v", "--version"]   # only these flags
  ls: ["*"]                  # any arguments
  echo: []                   # no flags at all
settings:
  allow_substitution: false
  working_directory: null
  chained_commands: first_clause
  substitution_timeout: null
```

Command names are matched case-insensitively, so keys are lowercased on
load. The loaded rules are exposed as a read-only mapping.
"""
from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

CONFIG_ENV_VAR = "WHITECMD_CONFIG"
DEFAULT_CONFIG_PATH = Path("conf") / "whitelist.yaml"

# Allowed-list entry that permits any arguments
WILDCARD = "*"

ChainedCommandPolicy = Literal["first_clause", "deny"]


class ValidatorSettings(BaseModel):
    """Evaluation policy fixed when a Validator is built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_substitution: bool = Field(
        default=False,
        description="Evaluate `cmd` and $(cmd) spans by running them",
    )
    working_directory: Optional[Path] = Field(
        default=None,
        description="Directory substituted sub-commands run in",
    )
    chained_commands: ChainedCommandPolicy = Field(
        default="first_clause",
        description=(
            "What to do when a line continues after an unquoted ; & | < >: "
            "'first_clause' validates only the part before it, 'deny' rejects the line"
        ),
    )
    substitution_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds a substituted sub-command may run (None = no limit)",
    )


class WhitelistConfig(BaseModel):
    """Parsed whitelist document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    commands: Dict[str, List[str]]
    settings: ValidatorSettings = Field(default_factory=ValidatorSettings)

    @field_validator("commands", mode="before")
    @classmethod
    def _normalize_commands(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        normalized: Dict[str, Any] = {}
        for name, allowed in value.items():
            key = str(name).strip().lower()
            if not key:
                raise ValueError("command names must not be empty")
            if key in normalized:
                raise ValueError(f"duplicate command '{key}' (names are case-insensitive)")
            normalized[key] = [] if allowed is None else allowed
        return normalized

    @field_validator("settings", mode="before")
    @classmethod
    def _default_settings(cls, value: Any) -> Any:
        return {} if value is None else value

    def rules(self) -> Mapping[str, Tuple[str, ...]]:
        """Return the read-only command -> allowed specifiers mapping."""
        return MappingProxyType(
            {name: tuple(allowed) for name, allowed in self.commands.items()}
        )


def default_config_path() -> Path:
    """Config path from $WHITECMD_CONFIG, else ./conf/whitelist.yaml."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def parse_config(data: Any, source: str = "<config>") -> WhitelistConfig:
    """Validate an already-parsed whitelist document."""
    try:
        return WhitelistConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid whitelist configuration in {source}: {e}") from e


def load_config(path: str | Path) -> WhitelistConfig:
    """Load a whitelist configuration from a YAML file.

    Args:
        path: Path to the YAML document

    Returns:
        Validated WhitelistConfig

    Raises:
        ConfigError: If the file is missing, unreadable, not valid YAML, or
            does not match the expected schema
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Whitelist configuration not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    return parse_config(data, source=str(config_path))


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "WILDCARD",
    "ValidatorSettings",
    "WhitelistConfig",
    "default_config_path",
    "load_config",
    "parse_config",
]
