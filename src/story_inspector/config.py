"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class PollConfig:
    """Adaptive polling delay for the tracker's watch loop.

    The delay after each check is `factor` times the duration of that check,
    clamped to [min_delay, max_delay] seconds.
    """

    min_delay: float = 0.5
    max_delay: float = 30.0
    factor: float = 5.0


@dataclass
class InspectorConfig:
    root_path: str = "State"
    ignore_file: str = ""
    log_level: str = "info"
    poll: PollConfig = field(default_factory=PollConfig)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"STORY_INSPECTOR_{key}", default)


def _env_float(key: str, default: float, min_val: float = 0.0) -> float:
    return max(float(_env(key, str(default))), min_val)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> InspectorConfig:
    """Load configuration from STORY_INSPECTOR_* environment variables."""
    min_delay = _env_float("POLL_MIN_DELAY", 0.5)
    return InspectorConfig(
        root_path=_env("ROOT_PATH", "State"),
        ignore_file=_env("IGNORE_FILE", ""),
        log_level=_validate_log_level(_env("LOG_LEVEL", "info")),
        poll=PollConfig(
            min_delay=min_delay,
            max_delay=_env_float("POLL_MAX_DELAY", 30.0, min_val=min_delay),
            factor=_env_float("POLL_FACTOR", 5.0),
        ),
    )
