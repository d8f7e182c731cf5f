"""Tests for sub-command execution through the host shell."""
from __future__ import annotations

import os
import subprocess

import pytest

from whitecmd.errors import SubstitutionError
from whitecmd.shell import ShellCommandExecutor, Tokenizer, shell_argv


class TestShellArgv:
    """Tests for choosing the host shell."""

    @pytest.mark.skipif(os.name == "nt", reason="POSIX shell selection")
    def test_posix_shell(self):
        assert shell_argv("ls -la") == ["/bin/sh", "-c", "ls -la"]

    def test_windows_uses_comspec(self, monkeypatch):
        monkeypatch.setattr("whitecmd.shell.execution.os.name", "nt")
        monkeypatch.setenv("COMSPEC", r"C:\Windows\system32\cmd.exe")
        assert shell_argv("dir") == [r"C:\Windows\system32\cmd.exe", "/c", "dir"]

    def test_windows_falls_back_to_cmd(self, monkeypatch):
        monkeypatch.setattr("whitecmd.shell.execution.os.name", "nt")
        monkeypatch.delenv("COMSPEC", raising=False)
        assert shell_argv("dir") == ["cmd", "/c", "dir"]


@pytest.mark.posix_shell
class TestShellCommandExecutor:
    """Tests for running sub-commands with /bin/sh."""

    def test_captures_stdout(self):
        assert ShellCommandExecutor().execute("echo hello") == "hello"

    def test_output_is_trimmed(self):
        assert ShellCommandExecutor().execute("printf '  hi  \\n\\n'") == "hi"

    def test_working_directory(self, tmp_path):
        (tmp_path / "marker.txt").write_text("content")
        assert ShellCommandExecutor().execute("ls", tmp_path) == "marker.txt"

    def test_empty_working_directory_uses_cwd(self):
        assert ShellCommandExecutor().execute("echo ok", "") == "ok"

    def test_failure_includes_stderr(self):
        with pytest.raises(SubstitutionError, match="exit status 3") as exc_info:
            ShellCommandExecutor().execute("echo oops >&2; exit 3")
        assert "oops" in exc_info.value.stderr
        assert "oops" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, subprocess.CalledProcessError)

    def test_missing_working_directory(self, tmp_path):
        with pytest.raises(SubstitutionError) as exc_info:
            ShellCommandExecutor().execute("echo hi", tmp_path / "missing")
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_timeout(self):
        with pytest.raises(SubstitutionError, match="timed out") as exc_info:
            ShellCommandExecutor(timeout=0.2).execute("sleep 2")
        assert isinstance(exc_info.value.__cause__, subprocess.TimeoutExpired)

    def test_env(self):
        executor = ShellCommandExecutor(env={"WHITECMD_TEST_VALUE": "42", "PATH": os.environ.get("PATH", "")})
        assert executor.execute("echo $WHITECMD_TEST_VALUE") == "42"

    def test_tokenizer_default_executor(self, tmp_path):
        tokenizer = Tokenizer(allow_substitution=True, working_directory=tmp_path)
        assert list(tokenizer.parse("git `echo --version`").tokens) == ["git", "--version"]
