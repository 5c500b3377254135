"""Tests for lesson pack loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tutorterm.lessons import (
    LESSON_REASON_MISSING,
    LESSON_REASON_PARSE_ERROR,
    LESSON_REASON_SCHEMA_INVALID,
    LessonError,
    available_lessons,
    lesson_from_dict,
    load_lesson,
)
from tutorterm.validation.types import CHECK_KINDS, FileExists, GitInitialized


def _minimal(**overrides):
    data = {
        "id": "demo",
        "title": "Demo",
        "steps": [
            {
                "id": "init",
                "goal": "Init",
                "instruction": "Run git init",
                "validation": {"type": "git-initialized"},
            }
        ],
    }
    data.update(overrides)
    return data


def test_packaged_git_basics_loads() -> None:
    assert "git-basics" in available_lessons()
    lesson = load_lesson("git-basics")
    assert lesson.id == "git-basics"
    assert lesson.steps[0].validation == GitInitialized()
    assert lesson.steps[1].validation == FileExists(file="README.md")
    assert {step.validation.kind for step in lesson.steps} == set(CHECK_KINDS)


def test_setup_files_are_parsed() -> None:
    lesson = load_lesson("git-basics")
    notes = next(step for step in lesson.steps if step.setup_files)
    assert notes.setup_files[0].path == "notes.txt"
    assert notes.setup_files[0].content == "Project notes\n"


def test_missing_lesson(tmp_path: Path) -> None:
    with pytest.raises(LessonError) as excinfo:
        load_lesson("nope", tmp_path)
    assert excinfo.value.reason_code == LESSON_REASON_MISSING
    assert "Lesson file not found" in str(excinfo.value)


def test_lesson_id_cannot_traverse(tmp_path: Path) -> None:
    (tmp_path / "inner").mkdir()
    with pytest.raises(LessonError):
        load_lesson("../inner/x", tmp_path / "inner")


def test_yaml_parse_error(tmp_path: Path) -> None:
    (tmp_path / "bad.yaml").write_text("id: [oops\n", encoding="utf-8")
    with pytest.raises(LessonError) as excinfo:
        load_lesson("bad", tmp_path)
    assert excinfo.value.reason_code == LESSON_REASON_PARSE_ERROR


def test_override_directory(tmp_path: Path) -> None:
    (tmp_path / "custom.yaml").write_text(
        "id: custom\ntitle: Custom\nsteps:\n  - id: s1\n    goal: g\n    instruction: i\n"
        "    validation: {type: branch-exists, branch: main}\n",
        encoding="utf-8",
    )
    assert available_lessons(tmp_path) == ["custom"]
    assert load_lesson("custom", tmp_path).title == "Custom"


@pytest.mark.parametrize(
    ("overrides", "fragment"),
    [
        ({"title": ""}, "missing required string `title`"),
        ({"steps": []}, "non-empty `steps`"),
        ({"description": 3}, "description must be a string"),
        (
            {"steps": [{"id": "a", "goal": "g", "instruction": "i", "validation": {"type": "file-exists"}}]},
            "steps[0].validation",
        ),
        (
            {"steps": [{"id": "a", "goal": "g", "instruction": "i", "validation": {"type": "teleport"}}]},
            "Unknown validation type: teleport",
        ),
        (
            {
                "steps": [
                    {"id": "a", "goal": "g", "instruction": "i", "validation": {"type": "git-initialized"}},
                    {"id": "a", "goal": "g", "instruction": "i", "validation": {"type": "git-initialized"}},
                ]
            },
            "duplicate step id `a`",
        ),
        (
            {
                "steps": [
                    {
                        "id": "a",
                        "goal": "g",
                        "instruction": "i",
                        "validation": {"type": "git-initialized"},
                        "setupFiles": [{"path": "x.txt"}],
                    }
                ]
            },
            "content must be a string",
        ),
    ],
)
def test_schema_errors(overrides: dict, fragment: str) -> None:
    with pytest.raises(LessonError) as excinfo:
        lesson_from_dict(_minimal(**overrides))
    assert excinfo.value.reason_code == LESSON_REASON_SCHEMA_INVALID
    assert fragment in str(excinfo.value)
