"""Interactive lesson loop: prompt, execute, validate, repeat."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from tutorterm.config import TutorConfig
from tutorterm.exec import CommandExecutor
from tutorterm.lessons import Lesson, Step
from tutorterm.progress import ProgressStore
from tutorterm.sandbox import apply_setup_files
from tutorterm.ui import console as default_console
from tutorterm.ui import render_exec_output, render_lesson_header, render_step_header, render_verdict
from tutorterm.validation.engine import ValidationEngine

logger = logging.getLogger(__name__)

PromptFn = Callable[[str], str | None]


@dataclass(frozen=True)
class LessonOutcome:
    """How far a lesson run got."""

    lesson_id: str
    workdir: Path
    completed_steps: tuple[str, ...]
    total_steps: int
    stopped_reason: str | None = None

    @property
    def completed(self) -> bool:
        return self.stopped_reason is None and len(self.completed_steps) == self.total_steps


def rich_prompt(console: Console) -> PromptFn:
    def ask(message: str) -> str | None:
        return Prompt.ask(message, console=console, default="", show_default=False)

    return ask


class LessonRunner:
    """Drive one lesson against a working directory."""

    def __init__(
        self,
        config: TutorConfig,
        *,
        engine: ValidationEngine | None = None,
        executor: CommandExecutor | None = None,
        progress: ProgressStore | None = None,
        prompt: PromptFn | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.executor = executor or CommandExecutor(timeout=config.command_timeout, debug=config.debug)
        self.engine = engine or ValidationEngine.from_config(config, self.executor)
        self.progress = progress or ProgressStore(config.resolved_progress_path())
        self.console = console or default_console
        self.prompt = prompt or rich_prompt(self.console)

    def run(self, lesson: Lesson, workdir: Path, *, max_steps: int | None = None) -> LessonOutcome:
        render_lesson_header(lesson.title, lesson.description, self.console)
        if self.config.debug:
            logger.debug("lesson %s in %s", lesson.id, workdir)

        steps = lesson.steps[:max_steps] if max_steps else lesson.steps
        completed: list[str] = []
        for number, step in enumerate(steps, start=1):
            apply_setup_files(step, workdir)
            reason = self.run_step(step, number, len(steps), workdir)
            if reason is not None:
                self.console.print(Text("\nLesson stopped. Try again when ready.\n", style="red"))
                return LessonOutcome(lesson.id, workdir, tuple(completed), len(steps), reason)
            self.progress.mark_step_complete(lesson.id, step.id)
            completed.append(step.id)

        self.console.print(Text("\n✓ Lesson complete!\n", style="bold green"))
        return LessonOutcome(lesson.id, workdir, tuple(completed), len(steps))

    def run_step(self, step: Step, number: int, total: int, workdir: Path) -> str | None:
        """Return None when the step passes, else the reason it stopped."""
        render_step_header(number, total, step.goal, step.instruction, self.console)

        for attempt in range(1, self.config.max_attempts + 1):
            command = (self.prompt("Your command") or "").strip()
            if not command:
                self.console.print(Text("\nSkipping step.\n", style="yellow"))
                return "skipped"

            self.console.print(Text(f"\nExecuting: {command}", style="dim"))
            result = self.executor.run_shell(command, workdir)
            render_exec_output(result, self.console)

            verdict = self.engine.evaluate(step.validation, workdir)
            render_verdict(verdict, self.console)
            if verdict.passed:
                self.console.print()
                return None

            if attempt >= self.config.max_attempts:
                self.console.print(Text("\nMax attempts reached.", style="yellow"))
                return "max-attempts"
            if step.hint:
                self.console.print(Text(f"Hint: {step.hint}", style="dim"))
            self.console.print()
        return "max-attempts"
