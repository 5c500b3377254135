"""Decide how an expected path relates to a set of candidate paths."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class NoMatch:
    """Nothing in the candidate set resembles the expected path."""


@dataclass(frozen=True)
class ExactMatch:
    path: str


@dataclass(frozen=True)
class CaseInsensitiveMatch:
    """Exactly one candidate equals the expected path ignoring case."""

    path: str


@dataclass(frozen=True)
class Ambiguous:
    """Several candidates equal the expected path ignoring case."""

    candidates: tuple[str, ...]


MatchOutcome = NoMatch | ExactMatch | CaseInsensitiveMatch | Ambiguous


def reconcile(candidates: Sequence[str], expected: str) -> MatchOutcome:
    """Match ``expected`` against ``candidates``, exact spelling first."""
    if expected in candidates:
        return ExactMatch(expected)

    target = expected.lower()
    hits = sorted({candidate for candidate in candidates if candidate.lower() == target})
    if not hits:
        return NoMatch()
    if len(hits) == 1:
        return CaseInsensitiveMatch(hits[0])
    return Ambiguous(tuple(hits))


def matched_path(outcome: MatchOutcome) -> str | None:
    """Return the resolved path of a successful outcome, else None."""
    if isinstance(outcome, ExactMatch | CaseInsensitiveMatch):
        return outcome.path
    return None
