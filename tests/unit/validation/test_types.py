"""Tests for check descriptor parsing and verdict serialization."""

from __future__ import annotations

import pytest

from tutorterm.validation.types import (
    CHECK_KINDS,
    BranchActive,
    CaseWarning,
    CheckDescriptorError,
    CommitExists,
    FileContains,
    FileExists,
    FilesExist,
    GitInitialized,
    Verdict,
    parse_check,
)


def test_every_kind_is_parseable() -> None:
    samples = {
        "git-initialized": {},
        "file-exists": {"file": "a"},
        "files-exist": {"files": ["a", "b"]},
        "file-staged": {"file": "a"},
        "files-staged": {"files": ["a"]},
        "file-committed": {"file": "a"},
        "commit-exists": {},
        "branch-exists": {"branch": "main"},
        "branch-active": {"branch": "main"},
        "file-contains": {"file": "a", "content": "x"},
    }
    assert set(samples) == set(CHECK_KINDS)
    for kind, fields in samples.items():
        assert parse_check({"type": kind, **fields}).kind == kind


def test_parse_builds_typed_descriptors() -> None:
    assert parse_check({"type": "git-initialized"}) == GitInitialized()
    assert parse_check({"type": "file-exists", "file": "README.md"}) == FileExists(file="README.md")
    assert parse_check({"type": "files-exist", "files": ["a", "b"]}) == FilesExist(files=("a", "b"))
    assert parse_check({"type": "commit-exists", "message": "init"}) == CommitExists(message="init")
    assert parse_check({"type": "commit-exists", "message": ""}) == CommitExists(message=None)
    assert parse_check({"type": "branch-active", "branch": "dev"}) == BranchActive(branch="dev")
    assert parse_check({"type": "file-contains", "file": "a", "content": ""}) == FileContains(file="a", content="")


def test_unknown_kind() -> None:
    with pytest.raises(CheckDescriptorError, match="Unknown validation type: file-deleted"):
        parse_check({"type": "file-deleted", "file": "a"})


@pytest.mark.parametrize(
    ("raw", "fragment"),
    [
        ({"type": "file-exists"}, "missing required field `file`"),
        ({"type": "file-staged", "file": "  "}, "missing required field `file`"),
        ({"type": "files-exist", "files": []}, "missing required field `files`"),
        ({"type": "files-staged", "files": "a.txt"}, "missing required field `files`"),
        ({"type": "files-exist", "files": ["a", 3]}, "list of non-empty strings"),
        ({"type": "branch-exists"}, "missing required field `branch`"),
        ({"type": "file-contains", "file": "a"}, "missing required field `content`"),
        ({"type": "commit-exists", "message": 5}, "`message` must be a string"),
        ({"file": "a"}, "missing required field `type`"),
        ({"type": "file-exists", "file": "a", "path": "b"}, "Unknown check field(s): path"),
    ],
)
def test_malformed_descriptors(raw: dict, fragment: str) -> None:
    with pytest.raises(CheckDescriptorError) as excinfo:
        parse_check(raw)
    assert fragment in str(excinfo.value)


def test_verdict_to_dict() -> None:
    verdict = Verdict(
        passed=True,
        message="File README.md exists (as readme.md)",
        resolved_path="readme.md",
        warnings=(CaseWarning(expected="README.md", actual="readme.md", location="disk"),),
    )
    assert verdict.to_dict() == {
        "passed": True,
        "message": "File README.md exists (as readme.md)",
        "resolvedPath": "readme.md",
        "warnings": ["File exists as 'readme.md' instead of 'README.md'"],
    }
    assert Verdict(passed=False, message="nope").to_dict() == {"passed": False, "message": "nope"}


def test_case_warning_messages() -> None:
    assert CaseWarning("A", "a", "index").message == "File staged as 'a' instead of 'A'"
    assert CaseWarning("A", "a", "tree").message == "File tracked as 'a' instead of 'A'"
