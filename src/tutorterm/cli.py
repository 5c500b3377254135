"""tt - interactive terminal tutor CLI."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import typer

from tutorterm import __version__
from tutorterm.config import ConfigError, TutorConfig, load_config
from tutorterm.lessons import LessonError, available_lessons, load_lesson
from tutorterm.progress import ProgressStore
from tutorterm.runner import LessonRunner
from tutorterm.sandbox import create_sandbox
from tutorterm.ui import configure_logging, console, render_verdict
from tutorterm.validation import CHECK_KINDS, ValidationEngine

DEMO_LESSON = "git-basics"
DEMO_STEPS = 3

cli = typer.Typer(
    name="tt",
    help="Interactive command line tutor",
    no_args_is_help=True,
)


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Trace executed commands and validation decisions."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Load configuration once per invocation."""
    _ = version
    try:
        config = load_config()
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    if debug:
        config = replace(config, debug=True)
    configure_logging(config.debug)
    ctx.obj = config


def _config(ctx: typer.Context) -> TutorConfig:
    config = ctx.obj
    if not isinstance(config, TutorConfig):
        config = load_config()
    return config


def _run_lesson(config: TutorConfig, lesson_id: str, *, sandbox: bool, max_steps: int | None) -> None:
    try:
        lesson = load_lesson(lesson_id, config.lessons_dir)
    except LessonError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    workdir = create_sandbox() if sandbox else Path.cwd()
    if sandbox:
        console.print(f"[dim]Sandbox: {workdir}[/dim]")

    outcome = LessonRunner(config).run(lesson, workdir, max_steps=max_steps)
    if not outcome.completed:
        raise typer.Exit(1)


@cli.command()
def demo(ctx: typer.Context) -> None:
    """Run the first steps of the git-basics lesson in a sandbox."""
    _run_lesson(_config(ctx), DEMO_LESSON, sandbox=True, max_steps=DEMO_STEPS)


@cli.command()
def start(
    ctx: typer.Context,
    lesson_pack: str = typer.Argument(..., metavar="LESSON"),
    sandbox: bool = typer.Option(True, "--sandbox/--no-sandbox", help="Run in a temp sandbox or the current directory."),
    max_steps: int | None = typer.Option(None, "--max-steps", min=1, help="Stop after this many steps."),
) -> None:
    """Run a complete lesson pack."""
    _run_lesson(_config(ctx), lesson_pack, sandbox=sandbox, max_steps=max_steps)


@cli.command("list")
def list_cmd(ctx: typer.Context) -> None:
    """List available lessons and your progress in each."""
    config = _config(ctx)
    store = ProgressStore(config.resolved_progress_path())
    lesson_ids = available_lessons(config.lessons_dir)
    if not lesson_ids:
        typer.echo("No lessons found.")
        return
    for lesson_id in lesson_ids:
        try:
            lesson = load_lesson(lesson_id, config.lessons_dir)
        except LessonError as exc:
            typer.echo(f"{lesson_id}: invalid ({exc})")
            continue
        done = len(set(store.completed_steps(lesson_id)) & {step.id for step in lesson.steps})
        typer.echo(f"{lesson_id}: {lesson.title} [{done}/{len(lesson.steps)}]")


@cli.command()
def check(
    ctx: typer.Context,
    kind: str = typer.Argument(..., metavar="TYPE", help=f"One of: {', '.join(CHECK_KINDS)}"),
    file: list[str] = typer.Option([], "--file", "-f", help="File path; repeat for files-* checks."),
    branch: str | None = typer.Option(None, "--branch", "-b"),
    message: str | None = typer.Option(None, "--message", "-m"),
    content: str | None = typer.Option(None, "--content", "-c"),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Directory to inspect."),
    as_json: bool = typer.Option(False, "--json", help="Print the verdict as JSON."),
) -> None:
    """Evaluate one validation check against a directory."""
    config = _config(ctx)
    raw: dict[str, object] = {"type": kind}
    if kind.startswith("files-"):
        raw["files"] = list(file)
    elif len(file) > 1:
        typer.echo(f"Error: {kind} takes a single --file, got {len(file)}", err=True)
        raise typer.Exit(1)
    elif file:
        raw["file"] = file[0]
    if branch is not None:
        raw["branch"] = branch
    if message is not None:
        raw["message"] = message
    if content is not None:
        raw["content"] = content

    verdict = ValidationEngine.from_config(config).evaluate(raw, cwd.resolve())
    if as_json:
        typer.echo(json.dumps(verdict.to_dict(), sort_keys=True))
    else:
        render_verdict(verdict, console)
    if not verdict.passed:
        raise typer.Exit(1)


@cli.command()
def progress(
    ctx: typer.Context,
    reset: bool = typer.Option(False, "--reset", help="Forget recorded progress."),
    lesson: str | None = typer.Option(None, "--lesson", help="Limit --reset to one lesson."),
) -> None:
    """Show or reset recorded lesson progress."""
    store = ProgressStore(_config(ctx).resolved_progress_path())
    if reset:
        if not store.reset(lesson):
            typer.echo(f"Error: could not write {store.path}", err=True)
            raise typer.Exit(1)
        typer.echo(f"Progress reset{f' for {lesson}' if lesson else ''}.")
        return

    data = store.load()
    if not data:
        typer.echo("No progress recorded yet.")
        return
    for lesson_id in sorted(data):
        steps = store.completed_steps(lesson_id)
        typer.echo(f"{lesson_id}: {', '.join(steps) or '-'} (updated {data[lesson_id].get('lastUpdated', '?')})")


def main() -> None:
    cli()
