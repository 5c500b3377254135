"""Load and validate tutor configuration.

Precedence, lowest to highest: built-in defaults, the optional
``~/.tutor-terminal/config.yaml`` file, then ``TT_*`` environment toggles.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from tutorterm.exec import DEFAULT_TIMEOUT_SECONDS

CONFIG_DIR_NAME = ".tutor-terminal"
CONFIG_FILENAME = "config.yaml"
PROGRESS_FILENAME = "progress.json"

DEFAULT_MAX_ATTEMPTS = 3

ENV_DEBUG = "TT_DEBUG"
ENV_STRICT_CASE = "TT_STRICT_CASE"
ENV_TIMEOUT = "TT_TIMEOUT"
ENV_PROGRESS_PATH = "TT_PROGRESS_PATH"
ENV_LESSONS_DIR = "TT_LESSONS_DIR"

CONFIG_REASON_PARSE_ERROR = "CONFIG_PARSE_ERROR"
CONFIG_REASON_SCHEMA_INVALID = "CONFIG_SCHEMA_INVALID"


class ConfigError(ValueError):
    """Tutor configuration validation error."""

    reason_code: str

    def __init__(self, message: str, reason_code: str = CONFIG_REASON_SCHEMA_INVALID) -> None:
        super().__init__(message)
        self.reason_code = reason_code


def config_home() -> Path:
    """Return the per-user tutor directory."""
    return Path.home() / CONFIG_DIR_NAME


@dataclass(frozen=True)
class TutorConfig:
    """Normalized tutor configuration."""

    debug: bool = False
    strict_case: bool = False
    command_timeout: float = DEFAULT_TIMEOUT_SECONDS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    progress_path: Path | None = None
    lessons_dir: Path | None = None

    def resolved_progress_path(self) -> Path:
        return self.progress_path or config_home() / PROGRESS_FILENAME


def load_config(
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> TutorConfig:
    """Build a ``TutorConfig`` from defaults, the YAML file and the environment."""
    environ = os.environ if env is None else env
    path = config_path or config_home() / CONFIG_FILENAME

    config = TutorConfig()
    if path.exists():
        config = _apply_file(config, path)
    return _apply_env(config, environ)


def _apply_file(config: TutorConfig, path: Path) -> TutorConfig:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path.name} parse error: {exc}", CONFIG_REASON_PARSE_ERROR) from exc
    if raw is None:
        return config
    if not isinstance(raw, dict):
        raise ConfigError(f"{path.name} parse error: expected mapping at top level", CONFIG_REASON_PARSE_ERROR)

    unknown = sorted(set(raw) - {"debug", "strict_case", "command_timeout", "max_attempts", "progress_path", "lessons_dir"})
    if unknown:
        raise ConfigError(f"{path.name} has unknown keys: {', '.join(unknown)}")

    updates: dict[str, Any] = {}
    for key in ("debug", "strict_case"):
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ConfigError(f"{key} must be true or false")
            updates[key] = raw[key]
    if "command_timeout" in raw:
        updates["command_timeout"] = _positive_float(raw["command_timeout"], "command_timeout")
    if "max_attempts" in raw:
        value = raw["max_attempts"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigError("max_attempts must be an integer >= 1")
        updates["max_attempts"] = value
    for key in ("progress_path", "lessons_dir"):
        if key in raw:
            if not isinstance(raw[key], str) or not raw[key].strip():
                raise ConfigError(f"{key} must be a non-empty path string")
            updates[key] = Path(raw[key]).expanduser()

    return replace(config, **updates)


def _apply_env(config: TutorConfig, env: Mapping[str, str]) -> TutorConfig:
    updates: dict[str, Any] = {}
    if ENV_DEBUG in env:
        updates["debug"] = env[ENV_DEBUG] == "1"
    if ENV_STRICT_CASE in env:
        updates["strict_case"] = env[ENV_STRICT_CASE] == "1"
    if env.get(ENV_TIMEOUT, "").strip():
        updates["command_timeout"] = _positive_float(env[ENV_TIMEOUT].strip(), ENV_TIMEOUT)
    if env.get(ENV_PROGRESS_PATH, "").strip():
        updates["progress_path"] = Path(env[ENV_PROGRESS_PATH].strip()).expanduser()
    if env.get(ENV_LESSONS_DIR, "").strip():
        updates["lessons_dir"] = Path(env[ENV_LESSONS_DIR].strip()).expanduser()
    return replace(config, **updates)


def _positive_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a positive number of seconds")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a positive number of seconds") from exc
    if number <= 0:
        raise ConfigError(f"{field_name} must be a positive number of seconds")
    return number
