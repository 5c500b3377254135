"""Per-user lesson progress persisted as JSON."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class ProgressStore:
    """Completed steps per lesson, stored at ``path``.

    File shape::

        {"git-basics": {"completedSteps": ["init"], "lastUpdated": "..."}}
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, dict[str, Any]]:
        """Return stored progress; unreadable or malformed files read as empty."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(value, dict)}

    def save(self, progress: dict[str, dict[str, Any]]) -> bool:
        """Write progress; failures are logged and reported as False."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(progress, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save progress to %s: %s", self.path, exc)
            return False
        return True

    def completed_steps(self, lesson_id: str) -> list[str]:
        entry = self.load().get(lesson_id, {})
        steps = entry.get("completedSteps", [])
        return [step for step in steps if isinstance(step, str)] if isinstance(steps, list) else []

    def is_step_complete(self, lesson_id: str, step_id: str) -> bool:
        return step_id in self.completed_steps(lesson_id)

    def mark_step_complete(self, lesson_id: str, step_id: str) -> bool:
        progress = self.load()
        completed = self.completed_steps(lesson_id)
        if step_id not in completed:
            completed.append(step_id)
        progress[lesson_id] = {"completedSteps": completed, "lastUpdated": _now()}
        return self.save(progress)

    def reset(self, lesson_id: str | None = None) -> bool:
        """Forget one lesson, or everything when ``lesson_id`` is None."""
        if lesson_id is None:
            return self.save({})
        progress = self.load()
        progress.pop(lesson_id, None)
        return self.save(progress)
