"""CLI tests for the tt command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tutorterm import __version__
from tutorterm.cli import cli
from tutorterm.progress import ProgressStore

RUNNER = CliRunner()


def test_version() -> None:
    result = RUNNER.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_check_fails_with_exit_code(workdir: Path) -> None:
    result = RUNNER.invoke(cli, ["check", "git-initialized", "--cwd", str(workdir), "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["passed"] is False
    assert "git init" in payload["message"]


def test_check_case_tolerant_file(workdir: Path) -> None:
    (workdir / "readme.md").write_text("x")
    result = RUNNER.invoke(cli, ["check", "file-exists", "-f", "README.md", "--cwd", str(workdir), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["resolvedPath"] == "readme.md"
    assert payload["warnings"] == ["File exists as 'readme.md' instead of 'README.md'"]


def test_check_strict_case_from_env(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TT_STRICT_CASE", "1")
    (workdir / "readme.md").write_text("x")
    result = RUNNER.invoke(cli, ["check", "file-exists", "-f", "README.md", "--cwd", str(workdir), "--json"])
    assert result.exit_code == 1


def test_check_multiple_files(workdir: Path) -> None:
    (workdir / "a.txt").write_text("")
    result = RUNNER.invoke(
        cli, ["check", "files-exist", "-f", "a.txt", "-f", "b.txt", "--cwd", str(workdir), "--json"]
    )
    assert result.exit_code == 1
    assert "Missing files: b.txt" in json.loads(result.output)["message"]


def test_check_single_file_kind_rejects_repeated_file(workdir: Path) -> None:
    (workdir / "a.txt").write_text("")
    result = RUNNER.invoke(cli, ["check", "file-exists", "-f", "a.txt", "-f", "b.txt", "--cwd", str(workdir)])
    assert result.exit_code == 1
    assert "file-exists takes a single --file, got 2" in result.output


def test_check_unknown_kind(workdir: Path) -> None:
    result = RUNNER.invoke(cli, ["check", "teleport", "--cwd", str(workdir), "--json"])
    assert result.exit_code == 1
    assert json.loads(result.output)["message"] == "Unknown validation type: teleport"


def test_list_shows_packaged_lessons() -> None:
    result = RUNNER.invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "git-basics: Git Basics [0/10]" in result.output


def test_start_unknown_lesson() -> None:
    result = RUNNER.invoke(cli, ["start", "nope", "--no-sandbox"])
    assert result.exit_code == 1
    assert "Lesson file not found" in result.output


def test_start_runs_steps_in_current_directory(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(workdir)
    result = RUNNER.invoke(cli, ["start", "git-basics", "--no-sandbox", "--max-steps", "1"], input="git init\n")
    assert result.exit_code == 0, result.output
    assert (workdir / ".git").is_dir()
    store = ProgressStore(Path.home() / ".tutor-terminal" / "progress.json")
    assert store.completed_steps("git-basics") == ["init"]


def test_progress_show_and_reset() -> None:
    store = ProgressStore(Path.home() / ".tutor-terminal" / "progress.json")

    result = RUNNER.invoke(cli, ["progress"])
    assert "No progress recorded yet." in result.output

    store.mark_step_complete("git-basics", "init")
    result = RUNNER.invoke(cli, ["progress"])
    assert "git-basics: init" in result.output

    result = RUNNER.invoke(cli, ["progress", "--reset"])
    assert result.exit_code == 0
    assert store.load() == {}


def test_invalid_config_file_exits() -> None:
    config_dir = Path.home() / ".tutor-terminal"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.yaml").write_text("max_attempts: 0\n", encoding="utf-8")
    result = RUNNER.invoke(cli, ["list"])
    assert result.exit_code == 1
    assert "max_attempts" in result.output
