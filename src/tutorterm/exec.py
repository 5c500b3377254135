"""Command runners for lesson commands and git introspection."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str
    error: str | None = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        """True only for a process that ran and exited with status zero."""
        return self.error is None and self.returncode == 0


class ExecError(RuntimeError):
    """Raised when a command returns non-zero in check mode."""

    def __init__(self, result: ExecResult):
        rendered = " ".join(result.argv)
        detail = (result.error or result.stderr or result.stdout).strip()
        super().__init__(f"command failed ({result.returncode}): {rendered}\n{detail}")
        self.result = result


class CommandExecutor:
    """Run shell and git commands under a fixed timeout.

    Timeouts and spawn failures never raise; they come back as an
    ``ExecResult`` with ``error`` set and a non-zero ``returncode``.
    """

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT_SECONDS, debug: bool = False) -> None:
        self.timeout = timeout
        self.debug = debug

    def run_shell(self, command: str, cwd: Path, *, check: bool = False) -> ExecResult:
        """Run a user-typed command string through the shell."""
        return self._run(command, (command,), cwd=cwd, shell=True, check=check)

    def run_git(self, args: list[str], cwd: Path, *, check: bool = False) -> ExecResult:
        """Run git with an explicit argv rooted at ``cwd``."""
        argv = ["git", *args]
        return self._run(argv, tuple(argv), cwd=cwd, shell=False, check=check)

    def _run(
        self,
        command: str | list[str],
        argv: tuple[str, ...],
        *,
        cwd: Path,
        shell: bool,
        check: bool,
    ) -> ExecResult:
        if self.debug:
            logger.debug("exec in %s: %s", cwd, " ".join(argv))
        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                shell=shell,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            result = ExecResult(
                argv=argv,
                cwd=cwd,
                returncode=-1,
                stdout="",
                stderr="",
                error=f"command timed out after {self.timeout:g}s",
                timed_out=True,
            )
        except OSError as exc:
            result = ExecResult(argv=argv, cwd=cwd, returncode=-1, stdout="", stderr="", error=str(exc))
        else:
            result = ExecResult(
                argv=argv,
                cwd=cwd,
                returncode=completed.returncode,
                stdout=completed.stdout or "",
                stderr=completed.stderr or "",
            )

        if self.debug:
            logger.debug(
                "exit=%s stdout=%d bytes error=%s",
                result.returncode,
                len(result.stdout),
                result.error,
            )
        if check and not result.ok:
            raise ExecError(result)
        return result
