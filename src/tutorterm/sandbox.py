"""Sandbox working directories and per-step setup files."""

from __future__ import annotations

import tempfile
import time
import uuid
from pathlib import Path

from tutorterm.lessons import Step
from tutorterm.validation.paths import resolve_within

SANDBOX_PREFIX = "tutor-terminal"


def create_sandbox(base_dir: Path | None = None) -> Path:
    """Create a fresh empty directory under the system temp dir."""
    root = base_dir or Path(tempfile.gettempdir())
    sandbox = root / f"{SANDBOX_PREFIX}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"
    sandbox.mkdir(parents=True, exist_ok=False)
    return sandbox


def apply_setup_files(step: Step, workdir: Path) -> list[Path]:
    """Write the step's setup files inside ``workdir`` and return their paths."""
    written: list[Path] = []
    for setup in step.setup_files:
        target = resolve_within(workdir, setup.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(setup.content, encoding="utf-8")
        written.append(target)
    return written
