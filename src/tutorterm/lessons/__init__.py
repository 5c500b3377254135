"""Lesson pack loading and schema validation.

Lesson packs are YAML documents shipped in this package (or read from an
override directory)::

    id: git-basics
    title: Git Basics
    description: optional
    steps:
      - id: init
        goal: Create a repository
        instruction: Run git init
        validation: {type: git-initialized}
        hint: optional
        setupFiles: [{path: notes.txt, content: "..."}]
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from tutorterm.validation.types import CheckDescriptor, CheckDescriptorError, parse_check

LESSON_REASON_MISSING = "LESSON_MISSING"
LESSON_REASON_PARSE_ERROR = "LESSON_PARSE_ERROR"
LESSON_REASON_SCHEMA_INVALID = "LESSON_SCHEMA_INVALID"

LESSON_SUFFIX = ".yaml"


class LessonError(ValueError):
    """Lesson pack loading or validation error."""

    reason_code: str

    def __init__(self, message: str, reason_code: str = LESSON_REASON_SCHEMA_INVALID) -> None:
        super().__init__(message)
        self.reason_code = reason_code


@dataclass(frozen=True)
class SetupFile:
    path: str
    content: str


@dataclass(frozen=True)
class Step:
    """One lesson step and the check that proves it is done."""

    id: str
    goal: str
    instruction: str
    validation: CheckDescriptor
    hint: str | None = None
    setup_files: tuple[SetupFile, ...] = ()


@dataclass(frozen=True)
class Lesson:
    id: str
    title: str
    steps: tuple[Step, ...]
    description: str | None = None


def _packaged_lessons_dir() -> Path:
    return Path(str(resources.files("tutorterm.lessons")))


def available_lessons(lessons_dir: Path | None = None) -> list[str]:
    """Sorted ids of every lesson pack in ``lessons_dir`` (default: packaged)."""
    root = lessons_dir or _packaged_lessons_dir()
    if not root.is_dir():
        return []
    return sorted(path.stem for path in root.iterdir() if path.suffix == LESSON_SUFFIX and path.is_file())


def load_lesson(lesson_id: str, lessons_dir: Path | None = None) -> Lesson:
    """Load and validate lesson ``lesson_id``."""
    root = lessons_dir or _packaged_lessons_dir()
    path = root / f"{lesson_id}{LESSON_SUFFIX}"
    if "/" in lesson_id or "\\" in lesson_id or not path.is_file():
        raise LessonError(f"Lesson file not found: {path}", LESSON_REASON_MISSING)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise LessonError(f"Failed to load lesson: {exc}", LESSON_REASON_PARSE_ERROR) from exc
    return lesson_from_dict(raw)


def lesson_from_dict(raw: Any) -> Lesson:
    """Validate a parsed lesson document."""
    if not isinstance(raw, dict):
        raise LessonError("Failed to load lesson: expected mapping at top level", LESSON_REASON_PARSE_ERROR)

    lesson_id = _require_text(raw, "id", "lesson")
    title = _require_text(raw, "title", f"lesson `{lesson_id}`")
    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        raise LessonError(f"lesson `{lesson_id}`.description must be a string")

    steps_raw = raw.get("steps")
    if not isinstance(steps_raw, list) or not steps_raw:
        raise LessonError(f"lesson `{lesson_id}` missing required non-empty `steps` list")

    steps: list[Step] = []
    seen: set[str] = set()
    for index, entry in enumerate(steps_raw):
        step = _parse_step(entry, f"steps[{index}]")
        if step.id in seen:
            raise LessonError(f"lesson `{lesson_id}` has duplicate step id `{step.id}`")
        seen.add(step.id)
        steps.append(step)

    return Lesson(id=lesson_id, title=title, description=description, steps=tuple(steps))


def _parse_step(entry: Any, where: str) -> Step:
    if not isinstance(entry, dict):
        raise LessonError(f"{where} must be a mapping")

    step_id = _require_text(entry, "id", where)
    goal = _require_text(entry, "goal", where)
    instruction = _require_text(entry, "instruction", where)

    validation_raw = entry.get("validation")
    if not isinstance(validation_raw, dict):
        raise LessonError(f"{where}.validation must be a mapping")
    try:
        validation = parse_check(validation_raw)
    except CheckDescriptorError as exc:
        raise LessonError(f"{where}.validation: {exc}") from exc

    hint = entry.get("hint")
    if hint is not None and not isinstance(hint, str):
        raise LessonError(f"{where}.hint must be a string")

    setup_raw = entry.get("setupFiles") or []
    if not isinstance(setup_raw, list):
        raise LessonError(f"{where}.setupFiles must be a list")
    setup_files: list[SetupFile] = []
    for file_index, item in enumerate(setup_raw):
        item_where = f"{where}.setupFiles[{file_index}]"
        if not isinstance(item, dict):
            raise LessonError(f"{item_where} must be a mapping")
        content = item.get("content")
        if not isinstance(content, str):
            raise LessonError(f"{item_where}.content must be a string")
        setup_files.append(SetupFile(path=_require_text(item, "path", item_where), content=content))

    return Step(
        id=step_id,
        goal=goal,
        instruction=instruction,
        validation=validation,
        hint=hint,
        setup_files=tuple(setup_files),
    )


def _require_text(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise LessonError(f"{where} missing required string `{key}`")
    return value
