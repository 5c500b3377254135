"""Case-insensitive lookup of expected names among real directory entries."""

from __future__ import annotations

import os
from pathlib import Path

from tutorterm.validation.paths import contained_relative


class AmbiguousCaseError(RuntimeError):
    """Raised when several entries differ from an expected name only by case."""

    def __init__(self, expected: str, matches: list[str]):
        self.expected = expected
        self.matches = sorted(matches)
        super().__init__(
            f"Multiple entries match '{expected}' with different casing: "
            f"{', '.join(self.matches)}. Keep only one."
        )


def case_matches(directory: Path, expected_base: str) -> list[str]:
    """Return every entry of ``directory`` equal to ``expected_base`` ignoring case."""
    try:
        entries = os.listdir(directory)
    except OSError:
        return []
    target = expected_base.lower()
    return [entry for entry in entries if entry.lower() == target]


def resolve_actual_name(directory: Path, expected_base: str) -> str | None:
    """Resolve the on-disk spelling of ``expected_base`` inside ``directory``.

    Returns None when nothing matches (including an unreadable directory)
    and the single match otherwise, whether or not its casing is exact.

    Raises:
        AmbiguousCaseError: two or more entries collide case-insensitively
    """
    matches = case_matches(directory, expected_base)
    if not matches:
        return None
    if len(matches) == 1:
        return matches[0]
    raise AmbiguousCaseError(expected_base, matches)


def resolve_relative_path(working_dir: Path, rel: str) -> str | None:
    """Resolve every segment of ``rel`` against the filesystem.

    Intermediate segments must resolve to directories. Returns the
    actual relative path as it exists on disk, or None when any segment
    is missing.
    """
    parts = contained_relative(rel).split("/")
    current = working_dir
    actual_parts: list[str] = []
    for index, part in enumerate(parts):
        actual = resolve_actual_name(current, part)
        if actual is None:
            return None
        current = current / actual
        actual_parts.append(actual)
        if index < len(parts) - 1 and not current.is_dir():
            return None
    return "/".join(actual_parts)
