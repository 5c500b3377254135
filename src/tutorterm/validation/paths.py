"""Relative path normalization shared by filesystem and git comparisons."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

_LEADING_DOT_SLASH = re.compile(r"^(?:\./+)+")


class PathEscapeError(ValueError):
    """Raised when a check path points outside the working directory."""


def normalize_relative(path: str) -> str:
    """Canonicalize a relative path string.

    Backslashes become forward slashes, carriage returns are dropped,
    surrounding whitespace is trimmed and any run of leading ``./``
    segments is removed. Total and idempotent.
    """
    cleaned = path.replace("\\", "/").replace("\r", "").strip()
    while True:
        stripped = _LEADING_DOT_SLASH.sub("", cleaned).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def normalize_git_entry(entry: str) -> str:
    """Normalize one entry of a NUL-delimited git listing."""
    return normalize_relative(entry)


def split_parts(rel: str) -> list[str]:
    """Split a normalized relative path into its non-empty segments."""
    return [part for part in rel.split("/") if part and part != "."]


def contained_relative(rel: str) -> str:
    """Normalize ``rel`` and fold inner ``..`` segments into a plain path.

    The result is the spelling used for both disk lookups and index
    comparisons, so ``docs/../README.md`` and ``README.md`` agree.

    Raises:
        PathEscapeError: the path is empty, absolute or leaves the directory
    """
    normalized = normalize_relative(rel)
    if not normalized:
        raise PathEscapeError("Path is empty")
    if normalized.startswith("/") or PurePosixPath(normalized).is_absolute() or re.match(r"^[A-Za-z]:", normalized):
        raise PathEscapeError(f"Path must be relative to the lesson directory: {rel}")

    kept: list[str] = []
    for part in split_parts(normalized):
        if part != "..":
            kept.append(part)
        elif kept:
            kept.pop()
        else:
            raise PathEscapeError(f"Path leaves the lesson directory: {rel}")
    if not kept:
        raise PathEscapeError(f"Path names the lesson directory itself: {rel}")
    return "/".join(kept)


def resolve_within(working_dir: Path, rel: str) -> Path:
    """Join ``rel`` onto ``working_dir``, refusing anything that escapes it."""
    return working_dir.joinpath(*contained_relative(rel).split("/"))
