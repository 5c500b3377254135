"""Tests for the command executor."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from tutorterm.exec import CommandExecutor, ExecError


def test_run_shell_captures_output(tmp_path: Path) -> None:
    result = CommandExecutor().run_shell("echo hello", tmp_path)
    assert result.ok
    assert result.stdout.strip() == "hello"
    assert result.argv == ("echo hello",)
    assert result.cwd == tmp_path


def test_run_shell_nonzero_exit(tmp_path: Path) -> None:
    result = CommandExecutor().run_shell("exit 3", tmp_path)
    assert result.returncode == 3
    assert result.ok is False
    assert result.error is None


@pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX sleep")
def test_timeout_is_reported_not_raised(tmp_path: Path) -> None:
    result = CommandExecutor(timeout=0.2).run_shell("sleep 5", tmp_path)
    assert result.timed_out is True
    assert result.ok is False
    assert "timed out" in (result.error or "")


def test_spawn_error_is_reported(tmp_path: Path) -> None:
    result = CommandExecutor().run_git(["status"], tmp_path / "missing-dir")
    assert result.ok is False
    assert result.error


def test_check_mode_raises(tmp_path: Path) -> None:
    with pytest.raises(ExecError) as excinfo:
        CommandExecutor().run_shell("exit 1", tmp_path, check=True)
    assert excinfo.value.result.returncode == 1


def test_run_git_prefixes_git(tmp_path: Path) -> None:
    result = CommandExecutor().run_git(["--version"], tmp_path)
    assert result.ok
    assert result.argv == ("git", "--version")
    assert result.stdout.startswith("git version")
