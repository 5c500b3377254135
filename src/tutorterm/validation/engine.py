"""Route check descriptors to their evaluators.

``ValidationEngine.evaluate`` is the only entry point the lesson runner
needs. It never raises: malformed descriptors, unknown kinds and any
unexpected evaluator failure come back as a failed ``Verdict``.
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Mapping
from pathlib import Path
from typing import Any, assert_never

from tutorterm.config import TutorConfig
from tutorterm.exec import CommandExecutor
from tutorterm.validation.evaluators import (
    EvaluationContext,
    evaluate_branch_active,
    evaluate_branch_exists,
    evaluate_commit_exists,
    evaluate_file_committed,
    evaluate_file_contains,
    evaluate_file_exists,
    evaluate_file_staged,
    evaluate_files_exist,
    evaluate_files_staged,
    evaluate_git_initialized,
)
from tutorterm.validation.git_entries import GitRunner
from tutorterm.validation.types import (
    BranchActive,
    BranchExists,
    CheckDescriptor,
    CheckDescriptorError,
    CommitExists,
    FileCommitted,
    FileContains,
    FileExists,
    FilesExist,
    FileStaged,
    FilesStaged,
    GitInitialized,
    Verdict,
    parse_check,
)

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Stateless evaluator of lesson checks against a working directory."""

    def __init__(
        self,
        git: GitRunner | None = None,
        *,
        debug: bool = False,
        strict_case: bool = False,
        windows: bool | None = None,
    ) -> None:
        self.git = git if git is not None else CommandExecutor(debug=debug)
        self.debug = debug
        self.strict_case = strict_case
        self.windows = platform.system() == "Windows" if windows is None else windows

    @classmethod
    def from_config(cls, config: TutorConfig, executor: CommandExecutor | None = None) -> ValidationEngine:
        git = executor or CommandExecutor(timeout=config.command_timeout, debug=config.debug)
        return cls(git, debug=config.debug, strict_case=config.strict_case)

    def evaluate(self, check: CheckDescriptor | Mapping[str, Any], working_dir: Path | str) -> Verdict:
        """Evaluate one check; always returns a verdict."""
        if isinstance(check, Mapping):
            try:
                check = parse_check(check)
            except CheckDescriptorError as exc:
                return Verdict(passed=False, message=str(exc))
        if not isinstance(check, CheckDescriptor):
            return Verdict(passed=False, message=f"Unknown validation type: {type(check).__name__}")

        ctx = EvaluationContext(
            working_dir=Path(working_dir),
            git=self.git,
            strict_case=self.strict_case,
            windows=self.windows,
        )
        if self.debug:
            logger.debug("evaluate %s in %s: %r", check.kind, ctx.working_dir, check)
        try:
            verdict = self._dispatch(ctx, check)
        except Exception as exc:
            logger.debug("evaluator for %s raised", check.kind, exc_info=True)
            return Verdict(passed=False, message=str(exc) or "Validation error")
        if self.debug:
            logger.debug("verdict %s: %r", check.kind, verdict)
        return verdict

    def _dispatch(self, ctx: EvaluationContext, check: CheckDescriptor) -> Verdict:
        match check:
            case GitInitialized():
                return evaluate_git_initialized(ctx, check)
            case FileExists():
                return evaluate_file_exists(ctx, check)
            case FilesExist():
                return evaluate_files_exist(ctx, check)
            case FileStaged():
                return evaluate_file_staged(ctx, check)
            case FilesStaged():
                return evaluate_files_staged(ctx, check)
            case FileCommitted():
                return evaluate_file_committed(ctx, check)
            case CommitExists():
                return evaluate_commit_exists(ctx, check)
            case BranchExists():
                return evaluate_branch_exists(ctx, check)
            case BranchActive():
                return evaluate_branch_active(ctx, check)
            case FileContains():
                return evaluate_file_contains(ctx, check)
            case _:
                assert_never(check)


def validate_step(check: CheckDescriptor | Mapping[str, Any], working_dir: Path | str) -> Verdict:
    """Evaluate ``check`` with a default engine."""
    return ValidationEngine().evaluate(check, working_dir)
