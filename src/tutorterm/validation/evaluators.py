"""Per-kind evaluators composing the resolver, git readers and reconciler.

Every evaluator re-reads the filesystem and git state it needs, tolerates
case-only differences (reporting them as ``CaseWarning``) and turns
absence, ambiguity and collaborator failures into failed verdicts that
carry a concrete next step.
"""

from __future__ import annotations

import functools
import shlex
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TypeVar

from tutorterm.validation.git_entries import (
    GitRunner,
    GitStateError,
    current_branch,
    latest_commit_message,
    list_branches,
    path_history,
    read_staged_entries,
    read_tracked_entries,
)
from tutorterm.validation.paths import PathEscapeError, contained_relative
from tutorterm.validation.reconcile import Ambiguous, CaseInsensitiveMatch, ExactMatch, NoMatch, reconcile
from tutorterm.validation.resolver import AmbiguousCaseError, resolve_relative_path
from tutorterm.validation.types import (
    BranchActive,
    BranchExists,
    CaseWarning,
    CommitExists,
    FileCommitted,
    FileContains,
    FileExists,
    FilesExist,
    FileStaged,
    FilesStaged,
    Verdict,
)

_C = TypeVar("_C")

GIT_STATUS_FAILED = "Failed to check git status"


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs shared by every evaluator for one call."""

    working_dir: Path
    git: GitRunner
    strict_case: bool = False
    windows: bool = False


def guarded(fn: Callable[[EvaluationContext, _C], Verdict]) -> Callable[[EvaluationContext, _C], Verdict]:
    """Convert the engine's known failure modes into failed verdicts."""

    @functools.wraps(fn)
    def wrapper(ctx: EvaluationContext, check: _C) -> Verdict:
        try:
            return fn(ctx, check)
        except AmbiguousCaseError as exc:
            return Verdict(passed=False, message=str(exc))
        except PathEscapeError as exc:
            return Verdict(passed=False, message=f"Malformed check: {exc}")
        except GitStateError as exc:
            return Verdict(passed=False, message=str(exc))
        except OSError as exc:
            return Verdict(passed=False, message=f"Failed to read filesystem state: {exc}")

    return wrapper


# --- hint rendering -------------------------------------------------------


def _quote(name: str, windows: bool) -> str:
    if windows:
        return f'"{name}"' if " " in name else name
    return shlex.quote(name)


def create_hint(name: str, windows: bool) -> str:
    target = _quote(name, windows)
    return f"echo hello>{target}" if windows else f'echo "hello" > {target}'


def folder_fix_hint(actual: str, expected: str, windows: bool) -> str:
    """Rename the folder out of the way, then create the file."""
    backup = f"{actual}.bak"
    if windows:
        return f"ren {_quote(actual, True)} {_quote(PurePosixPath(backup).name, True)} && echo Hello>{_quote(expected, True)}"
    return f'mv {_quote(actual, False)} {_quote(backup, False)} && echo "Hello" > {_quote(expected, False)}'


def wrong_type_message(actual: str, expected: str, windows: bool) -> str:
    actual_name = PurePosixPath(actual).name
    expected_name = PurePosixPath(expected).name
    return (
        f"A folder named '{actual_name}' exists, but a file named '{expected_name}' is required. "
        "Do not use mkdir. Check the folder's contents first, then rename it and create the file: "
        f"{folder_fix_hint(actual, expected, windows)}"
    )


# --- shared resolution ----------------------------------------------------


@dataclass(frozen=True)
class _DiskFile:
    expected: str
    actual: str | None
    is_file: bool
    is_dir: bool

    def warning(self) -> CaseWarning | None:
        if self.actual is None or self.actual == self.expected:
            return None
        return CaseWarning(expected=self.expected, actual=self.actual, location="disk")


def _locate(ctx: EvaluationContext, file: str) -> _DiskFile:
    expected = contained_relative(file)
    actual = resolve_relative_path(ctx.working_dir, expected)
    if actual is None:
        return _DiskFile(expected=expected, actual=None, is_file=False, is_dir=False)
    path = ctx.working_dir / actual
    return _DiskFile(expected=expected, actual=actual, is_file=path.is_file(), is_dir=path.is_dir())


def _strict_rename_message(file: str, actual: str, ctx: EvaluationContext, *, git: bool) -> str:
    expected = contained_relative(file)
    if git:
        return f"File {file} is recorded by git as '{actual}'. Try: git mv {_quote(actual, False)} {_quote(expected, False)}"
    command = "ren" if ctx.windows else "mv"
    return (
        f"File {file} exists only as '{actual}'. "
        f"Try: {command} {_quote(actual, ctx.windows)} {_quote(expected, ctx.windows)}"
    )


def _add_target(ctx: EvaluationContext, file: str) -> str:
    """Best name to suggest for `git add`: the on-disk spelling when known."""
    try:
        actual = resolve_relative_path(ctx.working_dir, file)
    except AmbiguousCaseError:
        return file
    return actual or file


# --- evaluators -----------------------------------------------------------


@guarded
def evaluate_git_initialized(ctx: EvaluationContext, _check: object) -> Verdict:
    if (ctx.working_dir / ".git").exists():
        return Verdict(passed=True, message="Git repository initialized successfully")
    return Verdict(passed=False, message="Git repository not found. Try: git init")


@guarded
def evaluate_file_exists(ctx: EvaluationContext, check: FileExists) -> Verdict:
    found = _locate(ctx, check.file)
    if found.actual is None:
        return Verdict(
            passed=False,
            message=f"File {check.file} not found. Try: {create_hint(found.expected, ctx.windows)}",
        )
    if found.is_dir:
        return Verdict(
            passed=False,
            message=wrong_type_message(found.actual, found.expected, ctx.windows),
            resolved_path=found.actual,
        )
    if not found.is_file:
        return Verdict(
            passed=False,
            message=f"'{found.actual}' exists but is not a regular file. Replace it with a file named '{found.expected}'.",
            resolved_path=found.actual,
        )

    warning = found.warning()
    if warning is None:
        return Verdict(passed=True, message=f"File {check.file} exists", resolved_path=found.actual)
    if ctx.strict_case:
        return Verdict(
            passed=False,
            message=_strict_rename_message(check.file, found.actual, ctx, git=False),
            resolved_path=found.actual,
        )
    return Verdict(
        passed=True,
        message=f"File {check.file} exists (as {found.actual})",
        resolved_path=found.actual,
        warnings=(warning,),
    )


@guarded
def evaluate_files_exist(ctx: EvaluationContext, check: FilesExist) -> Verdict:
    missing: list[tuple[str, str]] = []
    wrong_type: list[tuple[str, str]] = []
    warnings: list[CaseWarning] = []

    for file in check.files:
        found = _locate(ctx, file)
        if found.actual is None:
            missing.append((file, found.expected))
            continue
        if not found.is_file:
            wrong_type.append((found.expected, found.actual))
            continue
        warning = found.warning()
        if warning is not None:
            if ctx.strict_case:
                missing.append((f"{file} (found as {found.actual})", found.expected))
            else:
                warnings.append(warning)

    if wrong_type:
        detail = ", ".join(f"{expected} (found folder: {actual})" for expected, actual in wrong_type)
        return Verdict(
            passed=False,
            message=(
                f"A folder exists where a file is required: {detail}. "
                "Do not use mkdir. Check each folder's contents, rename it, then create the file."
            ),
        )
    if missing:
        listed = ", ".join(display for display, _ in missing)
        return Verdict(
            passed=False,
            message=f"Missing files: {listed}. Example: {create_hint(missing[0][1], ctx.windows)}",
        )
    return Verdict(passed=True, message="All files exist", warnings=tuple(warnings))


@guarded
def evaluate_file_staged(ctx: EvaluationContext, check: FileStaged) -> Verdict:
    staged = read_staged_entries(ctx.git, ctx.working_dir)
    if staged is None:
        return Verdict(passed=False, message=GIT_STATUS_FAILED)

    target = contained_relative(check.file)
    outcome = reconcile(staged, target)
    match outcome:
        case ExactMatch(path=path):
            return Verdict(passed=True, message=f"File {check.file} is staged", resolved_path=path)
        case CaseInsensitiveMatch(path=path):
            if ctx.strict_case:
                return Verdict(
                    passed=False,
                    message=f"File {check.file} is not staged; the index has '{path}' instead. "
                    f"Try: git mv {_quote(path, False)} {_quote(target, False)}",
                    resolved_path=path,
                )
            return Verdict(
                passed=True,
                message=f"File {check.file} is staged (as {path})",
                resolved_path=path,
                warnings=(CaseWarning(expected=target, actual=path, location="index"),),
            )
        case Ambiguous(candidates=candidates):
            return Verdict(
                passed=False,
                message=f"Multiple staged files match '{check.file}' ignoring case: "
                f"{', '.join(candidates)}. Keep only one.",
            )
        case NoMatch():
            return Verdict(
                passed=False,
                message=f"File {check.file} is not staged. Try: git add {_quote(_add_target(ctx, target), False)}",
            )


@guarded
def evaluate_files_staged(ctx: EvaluationContext, check: FilesStaged) -> Verdict:
    staged = read_staged_entries(ctx.git, ctx.working_dir)
    if staged is None:
        return Verdict(passed=False, message=GIT_STATUS_FAILED)

    unstaged: list[str] = []
    to_add: list[str] = []
    warnings: list[CaseWarning] = []
    for file in check.files:
        target = contained_relative(file)
        outcome = reconcile(staged, target)
        if isinstance(outcome, Ambiguous):
            return Verdict(
                passed=False,
                message=f"Multiple staged files match '{file}' ignoring case: "
                f"{', '.join(outcome.candidates)}. Keep only one.",
            )
        if isinstance(outcome, CaseInsensitiveMatch):
            if ctx.strict_case:
                unstaged.append(f"{file} (staged as {outcome.path})")
            else:
                warnings.append(CaseWarning(expected=target, actual=outcome.path, location="index"))
            continue
        if isinstance(outcome, NoMatch):
            unstaged.append(file)
            to_add.append(_add_target(ctx, target))

    if unstaged:
        hint = f" Try: git add {' '.join(_quote(p, False) for p in to_add)}" if to_add else ""
        return Verdict(passed=False, message=f"Files not staged: {', '.join(unstaged)}.{hint}")
    return Verdict(passed=True, message="All files are staged", warnings=tuple(warnings))


@guarded
def evaluate_file_committed(ctx: EvaluationContext, check: FileCommitted) -> Verdict:
    found = _locate(ctx, check.file)
    if found.actual is None:
        return Verdict(
            passed=False,
            message=f"Progress: create the file '{found.expected}'. Example: {create_hint(found.expected, ctx.windows)}",
        )
    if not found.is_file:
        return Verdict(
            passed=False,
            message=wrong_type_message(found.actual, found.expected, ctx.windows),
            resolved_path=found.actual,
        )

    tracked = read_tracked_entries(ctx.git, ctx.working_dir)
    if tracked is None:
        return Verdict(passed=False, message=GIT_STATUS_FAILED)

    # A committed file is tracked, so the log lookup uses the tree's spelling.
    commit_target = found.actual
    tracked_outcome = reconcile(tracked, found.actual)
    if isinstance(tracked_outcome, Ambiguous):
        return Verdict(
            passed=False,
            message=f"Multiple tracked files match '{check.file}' ignoring case: "
            f"{', '.join(tracked_outcome.candidates)}. Keep only one.",
        )
    if isinstance(tracked_outcome, ExactMatch | CaseInsensitiveMatch):
        commit_target = tracked_outcome.path

    expected = contained_relative(check.file)
    if path_history(ctx.git, ctx.working_dir, commit_target):
        if commit_target == expected:
            return Verdict(passed=True, message=f"File {check.file} has been committed", resolved_path=commit_target)
        if ctx.strict_case:
            return Verdict(
                passed=False,
                message=_strict_rename_message(check.file, commit_target, ctx, git=True),
                resolved_path=commit_target,
            )
        return Verdict(
            passed=True,
            message=f"File {check.file} has been committed (as {commit_target})",
            resolved_path=commit_target,
            warnings=(CaseWarning(expected=expected, actual=commit_target, location="tree"),),
        )

    staged = read_staged_entries(ctx.git, ctx.working_dir)
    if staged is None:
        return Verdict(passed=False, message=GIT_STATUS_FAILED)

    staged_outcome = reconcile(staged, commit_target)
    match staged_outcome:
        case Ambiguous(candidates=candidates):
            return Verdict(
                passed=False,
                message=f"Multiple staged files match '{check.file}' ignoring case: "
                f"{', '.join(candidates)}. Keep only one.",
            )
        case ExactMatch(path=path) | CaseInsensitiveMatch(path=path):
            warnings: tuple[CaseWarning, ...] = ()
            if path != expected:
                warnings = (CaseWarning(expected=expected, actual=path, location="index"),)
            return Verdict(
                passed=False,
                message=f'Progress: file staged. Next: commit it. Run: git commit -m "add {PurePosixPath(path).name}"',
                resolved_path=path,
                warnings=warnings,
            )
        case NoMatch():
            return Verdict(
                passed=False,
                message=f"Progress: file created. Next: stage it. Run: git add {_quote(found.actual, False)}",
                resolved_path=commit_target,
            )


@guarded
def evaluate_commit_exists(ctx: EvaluationContext, check: CommitExists) -> Verdict:
    message = latest_commit_message(ctx.git, ctx.working_dir)
    if message is None:
        return Verdict(passed=False, message='No commits found. Try: git commit -m "message"')
    if check.message is None:
        return Verdict(passed=True, message="Commit exists")
    if check.message in message:
        return Verdict(passed=True, message="Commit created with expected message")
    subject = message.splitlines()[0]
    return Verdict(
        passed=False,
        message=f'Commit message doesn\'t match. Expected: "{check.message}", latest: "{subject}". '
        f'Try: git commit --amend -m "{check.message}"',
    )


@guarded
def evaluate_branch_exists(ctx: EvaluationContext, check: BranchExists) -> Verdict:
    if check.branch in list_branches(ctx.git, ctx.working_dir):
        return Verdict(passed=True, message=f"Branch {check.branch} exists")
    return Verdict(passed=False, message=f"Branch {check.branch} not found. Try: git branch {check.branch}")


@guarded
def evaluate_branch_active(ctx: EvaluationContext, check: BranchActive) -> Verdict:
    current = current_branch(ctx.git, ctx.working_dir)
    if current == check.branch:
        return Verdict(passed=True, message=f"On branch {check.branch}")
    return Verdict(
        passed=False,
        message=f"Not on branch {check.branch}. Current: {current or '(detached HEAD)'}. "
        f"Try: git checkout {check.branch}",
    )


@guarded
def evaluate_file_contains(ctx: EvaluationContext, check: FileContains) -> Verdict:
    found = _locate(ctx, check.file)
    if found.actual is None:
        return Verdict(
            passed=False,
            message=f"File {check.file} not found. Try: {create_hint(found.expected, ctx.windows)}",
        )
    if not found.is_file:
        return Verdict(
            passed=False,
            message=f"Expected a file but found a folder: {check.file}",
            resolved_path=found.actual,
        )

    warning = found.warning()
    if warning is not None and ctx.strict_case:
        return Verdict(
            passed=False,
            message=_strict_rename_message(check.file, found.actual, ctx, git=False),
            resolved_path=found.actual,
        )

    try:
        text = (ctx.working_dir / found.actual).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return Verdict(passed=False, message=f"Failed to read {check.file}", resolved_path=found.actual)

    warnings = (warning,) if warning is not None else ()
    if check.content in text:
        return Verdict(
            passed=True,
            message=f"File {check.file} contains expected content",
            resolved_path=found.actual,
            warnings=warnings,
        )
    return Verdict(
        passed=False,
        message=f"File {check.file} doesn't contain expected content. Expected to find: {check.content!r}",
        resolved_path=found.actual,
        warnings=warnings,
    )
