"""Shared test fixtures and helpers for the whitecmd test suite."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from whitecmd.errors import SubstitutionError


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "posix_shell: tests that spawn /bin/sh",
    )


def pytest_collection_modifyitems(config, items):
    if os.name != "nt":
        return
    skip = pytest.mark.skip(reason="requires /bin/sh")
    for item in items:
        if "posix_shell" in item.keywords:
            item.add_marker(skip)


class FakeExecutor:
    """Deterministic stand-in for ShellCommandExecutor.

    Returns ``outputs[command]`` (or ``default``) and records every call.
    Set ``error`` to make every call raise it.
    """

    def __init__(self, outputs: Optional[Dict[str, str]] = None, default: str = "out"):
        self.outputs = dict(outputs or {})
        self.default = default
        self.error: Optional[BaseException] = None
        self.calls: List[Tuple[str, object]] = []

    def execute(self, command: str, working_directory=None) -> str:
        self.calls.append((command, working_directory))
        if self.error is not None:
            raise self.error
        return self.outputs.get(command, self.default)


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """Executor that never spawns processes."""
    return FakeExecutor()


@pytest.fixture
def failing_executor() -> FakeExecutor:
    """Executor whose every call fails like a non-zero exit."""
    executor = FakeExecutor()
    executor.error = SubstitutionError("false", "exit status 1", stderr="boom")
    return executor


GIT_WHITELIST = """\
commands:
  git: ["-v", "--version"]
  ls: ["*"]
  echo: []
"""


@pytest.fixture
def write_whitelist(tmp_path: Path) -> Callable[..., Path]:
    """Write a whitelist YAML document and return its path."""

    def _write(content: str = GIT_WHITELIST, name: str = "whitelist.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
