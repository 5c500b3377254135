"""Pytest configuration and fixtures for tutorterm tests."""
import os
import subprocess
from pathlib import Path

import pytest


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))
    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'tutorterm' (the package) not 'src/tutorterm' (filesystem path).",
            returncode=1,
        )


def git(repo: Path, *args: str) -> subprocess.CompletedProcess[str]:
    """Run git in ``repo`` and fail the test on error."""
    return subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True)


@pytest.fixture(autouse=True)
def _isolated_git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user/system git config and progress files out of tests."""
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("TT_DEBUG", "TT_STRICT_CASE", "TT_TIMEOUT", "TT_PROGRESS_PATH", "TT_LESSONS_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Empty lesson directory."""
    path = tmp_path / "lesson"
    path.mkdir()
    return path


@pytest.fixture
def git_repo(workdir: Path) -> Path:
    """Initialized repository on branch main with no commits."""
    git(workdir, "init")
    git(workdir, "symbolic-ref", "HEAD", "refs/heads/main")
    return workdir


@pytest.fixture
def case_sensitive_fs(tmp_path: Path) -> bool:
    probe = tmp_path / "CaseProbe"
    probe.write_text("x")
    return not (tmp_path / "caseprobe").exists()
