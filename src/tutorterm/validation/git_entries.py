"""Git introspection helpers for the validation engine.

Entry readers return None when git cannot be queried so callers can tell
"failed to read git state" apart from "file not found". The remaining
helpers raise ``GitStateError`` for the same condition.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from tutorterm.exec import ExecResult
from tutorterm.validation.paths import normalize_git_entry


class GitRunner(Protocol):
    def run_git(self, args: list[str], cwd: Path, *, check: bool = False) -> ExecResult: ...


class GitStateError(RuntimeError):
    """Raised when a git query fails to run (timeout, spawn error, bad exit)."""


def parse_nul_listing(stdout: str) -> list[str]:
    """Split NUL-delimited git output into normalized, non-empty entries."""
    entries = (normalize_git_entry(chunk) for chunk in stdout.split("\0"))
    return [entry for entry in entries if entry]


def read_staged_entries(git: GitRunner, cwd: Path) -> list[str] | None:
    """Paths currently staged in the index, exact casing preserved."""
    result = git.run_git(["diff", "--cached", "--name-only", "-z"], cwd)
    if not result.ok:
        return None
    return parse_nul_listing(result.stdout)


def read_tracked_entries(git: GitRunner, cwd: Path) -> list[str] | None:
    """Every path git tracks, exact casing preserved."""
    result = git.run_git(["ls-files", "-z"], cwd)
    if not result.ok:
        return None
    return parse_nul_listing(result.stdout)


def path_history(git: GitRunner, cwd: Path, path: str) -> list[str]:
    """One-line log entries touching ``path``; empty when there is no history."""
    result = git.run_git(["--literal-pathspecs", "log", "--oneline", "--", path], cwd)
    if result.error is not None:
        raise GitStateError(f"Failed to check git history: {result.error}")
    if result.returncode != 0:
        # An unborn branch has no log at all.
        return []
    return [line for line in result.stdout.splitlines() if line.strip()]


def latest_commit_message(git: GitRunner, cwd: Path) -> str | None:
    """Full message of HEAD, or None when no commit exists yet."""
    result = git.run_git(["log", "-1", "--format=%B"], cwd)
    if result.error is not None:
        raise GitStateError(f"Failed to check git history: {result.error}")
    if result.returncode != 0:
        return None
    message = result.stdout.strip()
    return message or None


def list_branches(git: GitRunner, cwd: Path) -> list[str]:
    """Local branch names with the current/worktree markers stripped."""
    result = git.run_git(["branch"], cwd)
    if not result.ok:
        raise GitStateError("Failed to list branches")
    branches: list[str] = []
    for line in result.stdout.splitlines():
        name = line.strip()
        if name[:1] in ("*", "+"):
            name = name[1:].strip()
        if name:
            branches.append(name)
    return branches


def current_branch(git: GitRunner, cwd: Path) -> str:
    """Name of the checked-out branch, empty when HEAD is detached."""
    result = git.run_git(["branch", "--show-current"], cwd)
    if not result.ok:
        raise GitStateError("Failed to check current branch")
    return result.stdout.strip()
