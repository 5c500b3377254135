"""Check descriptors and verdicts for lesson step validation.

Lesson authors write checks declaratively as
``{type, file?, files?, branch?, message?, content?}``. ``parse_check``
turns that mapping into one of the frozen descriptor classes below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Literal

CHECK_FIELDS: tuple[str, ...] = ("type", "file", "files", "branch", "message", "content")

CaseLocation = Literal["disk", "index", "tree"]


class CheckDescriptorError(ValueError):
    """Raised for an unknown check kind or a missing/ill-typed field."""


@dataclass(frozen=True)
class GitInitialized:
    kind: ClassVar[str] = "git-initialized"


@dataclass(frozen=True)
class FileExists:
    kind: ClassVar[str] = "file-exists"
    file: str


@dataclass(frozen=True)
class FilesExist:
    kind: ClassVar[str] = "files-exist"
    files: tuple[str, ...]


@dataclass(frozen=True)
class FileStaged:
    kind: ClassVar[str] = "file-staged"
    file: str


@dataclass(frozen=True)
class FilesStaged:
    kind: ClassVar[str] = "files-staged"
    files: tuple[str, ...]


@dataclass(frozen=True)
class FileCommitted:
    kind: ClassVar[str] = "file-committed"
    file: str


@dataclass(frozen=True)
class CommitExists:
    kind: ClassVar[str] = "commit-exists"
    message: str | None = None


@dataclass(frozen=True)
class BranchExists:
    kind: ClassVar[str] = "branch-exists"
    branch: str


@dataclass(frozen=True)
class BranchActive:
    kind: ClassVar[str] = "branch-active"
    branch: str


@dataclass(frozen=True)
class FileContains:
    kind: ClassVar[str] = "file-contains"
    file: str
    content: str


CheckDescriptor = (
    GitInitialized
    | FileExists
    | FilesExist
    | FileStaged
    | FilesStaged
    | FileCommitted
    | CommitExists
    | BranchExists
    | BranchActive
    | FileContains
)

CHECK_KINDS: tuple[str, ...] = (
    GitInitialized.kind,
    FileExists.kind,
    FilesExist.kind,
    FileStaged.kind,
    FilesStaged.kind,
    FileCommitted.kind,
    CommitExists.kind,
    BranchExists.kind,
    BranchActive.kind,
    FileContains.kind,
)


@dataclass(frozen=True)
class CaseWarning:
    """Structured notice that a name matched only ignoring case."""

    expected: str
    actual: str
    location: CaseLocation

    @property
    def message(self) -> str:
        verb = {"disk": "exists", "index": "staged", "tree": "tracked"}[self.location]
        return f"File {verb} as '{self.actual}' instead of '{self.expected}'"


@dataclass(frozen=True)
class Verdict:
    """Outcome of one evaluation."""

    passed: bool
    message: str
    resolved_path: str | None = None
    warnings: tuple[CaseWarning, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"passed": self.passed, "message": self.message}
        if self.resolved_path is not None:
            data["resolvedPath"] = self.resolved_path
        if self.warnings:
            data["warnings"] = [warning.message for warning in self.warnings]
        return data


def parse_check(raw: Mapping[str, Any]) -> CheckDescriptor:
    """Validate a declarative check mapping and build its descriptor."""
    if not isinstance(raw, Mapping):
        raise CheckDescriptorError("Check must be a mapping with a `type` field")
    unknown = sorted(set(raw) - set(CHECK_FIELDS))
    if unknown:
        raise CheckDescriptorError(f"Unknown check field(s): {', '.join(unknown)}")

    kind = raw.get("type")
    if not isinstance(kind, str) or not kind.strip():
        raise CheckDescriptorError("Check is missing required field `type`")
    kind = kind.strip()

    if kind == GitInitialized.kind:
        return GitInitialized()
    if kind == FileExists.kind:
        return FileExists(file=_require_str(raw, kind, "file"))
    if kind == FilesExist.kind:
        return FilesExist(files=_require_str_list(raw, kind))
    if kind == FileStaged.kind:
        return FileStaged(file=_require_str(raw, kind, "file"))
    if kind == FilesStaged.kind:
        return FilesStaged(files=_require_str_list(raw, kind))
    if kind == FileCommitted.kind:
        return FileCommitted(file=_require_str(raw, kind, "file"))
    if kind == CommitExists.kind:
        message = raw.get("message")
        if message is not None and not isinstance(message, str):
            raise CheckDescriptorError(f"Malformed '{kind}' check: `message` must be a string")
        return CommitExists(message=message or None)
    if kind == BranchExists.kind:
        return BranchExists(branch=_require_str(raw, kind, "branch"))
    if kind == BranchActive.kind:
        return BranchActive(branch=_require_str(raw, kind, "branch"))
    if kind == FileContains.kind:
        return FileContains(
            file=_require_str(raw, kind, "file"),
            content=_require_str(raw, kind, "content", allow_blank=True),
        )
    raise CheckDescriptorError(f"Unknown validation type: {kind}")


def _require_str(raw: Mapping[str, Any], kind: str, field_name: str, *, allow_blank: bool = False) -> str:
    value = raw.get(field_name)
    if not isinstance(value, str) or (not allow_blank and not value.strip()):
        raise CheckDescriptorError(f"Malformed '{kind}' check: missing required field `{field_name}`")
    return value


def _require_str_list(raw: Mapping[str, Any], kind: str) -> tuple[str, ...]:
    value = raw.get("files")
    if not isinstance(value, list | tuple) or not value:
        raise CheckDescriptorError(f"Malformed '{kind}' check: missing required field `files`")
    if not all(isinstance(item, str) and item.strip() for item in value):
        raise CheckDescriptorError(f"Malformed '{kind}' check: `files` must be a list of non-empty strings")
    return tuple(value)
