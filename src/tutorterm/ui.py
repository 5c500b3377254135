from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from tutorterm.exec import ExecResult
from tutorterm.validation.types import Verdict

console = Console()
err_console = Console(stderr=True)


def configure_logging(debug: bool) -> None:
    """Route library logging through rich; DEBUG only when asked for."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=debug, markup=False)],
        force=True,
    )


def render_lesson_header(title: str, description: str | None, out: Console | None = None) -> None:
    out = out or console
    out.print()
    out.print(Text(title, style="bold"))
    if description:
        out.print(Text(description, style="dim"))
    out.print()


def render_step_header(number: int, total: int, goal: str, instruction: str, out: Console | None = None) -> None:
    out = out or console
    out.print(Text(f"Step {number}/{total}: {goal}", style="bold"))
    out.print(Text(instruction, style="dim"))
    out.print()


def render_exec_output(result: ExecResult, out: Console | None = None) -> None:
    out = out or console
    if result.stdout:
        out.print(Text(result.stdout.rstrip("\n")))
    if result.stderr:
        out.print(Text(result.stderr.rstrip("\n"), style="red"))
    if result.error:
        out.print(Text(result.error, style="bold red"))
    out.print()


def render_warnings(verdict: Verdict, out: Console | None = None) -> None:
    out = out or console
    for warning in verdict.warnings:
        out.print(Text(f"Note: {warning.message}", style="yellow"))


def render_verdict(verdict: Verdict, out: Console | None = None) -> None:
    out = out or console
    render_warnings(verdict, out)
    if verdict.passed:
        out.print(Text(f"✓ {verdict.message}", style="green"))
    else:
        out.print(Text(f"✗ {verdict.message}", style="red"))
