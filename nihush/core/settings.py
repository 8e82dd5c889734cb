from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from nihush.core.clues import DEFAULT_CLUE_POINTS, validate_clue_points

logger = logging.getLogger(__name__)

ENV_DURATION = "NIHUSH_DURATION_SECONDS"
ENV_FIREBASE_URL = "NIHUSH_FIREBASE_URL"
ENV_FIREBASE_AUTH = "NIHUSH_FIREBASE_AUTH"


@dataclass(frozen=True)
class GameSettings:
    duration_seconds: int = 120
    clue_points: Tuple[int, ...] = field(default=DEFAULT_CLUE_POINTS)
    solved_delay_ms: int = 1000
    gave_up_delay_ms: int = 2000
    leaderboard_size: int = 10
    firebase_url: Optional[str] = None
    firebase_auth: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "clue_points", validate_clue_points(self.clue_points))
        if self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")
        if self.solved_delay_ms < 0 or self.gave_up_delay_ms < 0:
            raise ValueError("round transition delays must not be negative")
        if self.leaderboard_size <= 0:
            raise ValueError("leaderboard_size must be positive")


def default_config_path() -> Path:
    return Path.home() / ".nihush" / "config.yaml"


_FILE_KEYS = (
    "duration_seconds",
    "clue_points",
    "solved_delay_ms",
    "gave_up_delay_ms",
    "leaderboard_size",
    "firebase_url",
    "firebase_auth",
)


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Could not load settings from %s: %s", path, e)
        return {}
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring %s: expected a mapping at the top level", path)
        return {}
    unknown = set(raw) - set(_FILE_KEYS)
    if unknown:
        logger.warning("Ignoring unknown settings in %s: %s", path.name, ", ".join(sorted(unknown)))
    return {key: raw[key] for key in _FILE_KEYS if key in raw}


def load_settings(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> GameSettings:
    """Build settings from defaults, then the YAML config file, then the environment.

    When *env* is not given, a ``.env`` file is loaded into ``os.environ`` first.
    Invalid values in the file are logged and the defaults are kept.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    settings = GameSettings()
    overrides = _read_config_file(config_path or default_config_path())
    if "clue_points" in overrides and isinstance(overrides["clue_points"], list):
        overrides["clue_points"] = tuple(overrides["clue_points"])
    try:
        settings = replace(settings, **overrides)
    except (TypeError, ValueError) as e:
        logger.warning("Invalid settings file, using defaults: %s", e)

    duration = env.get(ENV_DURATION)
    if duration:
        try:
            settings = replace(settings, duration_seconds=int(duration))
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", ENV_DURATION, duration, e)
    if env.get(ENV_FIREBASE_URL):
        settings = replace(settings, firebase_url=env[ENV_FIREBASE_URL].strip())
    if env.get(ENV_FIREBASE_AUTH):
        settings = replace(settings, firebase_auth=env[ENV_FIREBASE_AUTH].strip())
    return settings
