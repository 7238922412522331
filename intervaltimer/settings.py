"""Start-up configuration.

Settings live in memory for the lifetime of the process.  An optional
JSON file can seed them at launch; it is only ever read, never written::

    {"work_duration": 45, "rest_duration": 15, "sound_volume": 50}

Usage::

    settings = load_settings(Path("workout.json"))
    engine.set_work_duration(settings.work_duration)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

from loguru import logger

from .timer.engine import DEFAULT_REST_SECONDS, DEFAULT_WORK_SECONDS, MAX_COMPONENT


MAX_DURATION = MAX_COMPONENT * 60 + MAX_COMPONENT  # 59:59


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = DEFAULT_WORK_SECONDS   # seconds
    rest_duration: int = DEFAULT_REST_SECONDS

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                      # 0-100
    round_sound: str | None = None              # custom round cue file

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from *path*, falling back to defaults.

    Values of the wrong type are dropped with a warning; durations are
    clamped to 0-59:59 and the volume to 0-100.
    """
    if path is None:
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring config file {}: {}", path, exc)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Ignoring config file {}: expected a JSON object", path)
        return Settings()
    # Only use keys that exist in the dataclass
    valid_keys = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - valid_keys)
    if unknown:
        logger.debug("Unknown config keys ignored: {}", ", ".join(unknown))

    kept = {}
    for key in valid_keys & set(data):
        value = _VALIDATORS[key](data[key])
        if value is _INVALID:
            logger.warning("Ignoring config value {}={!r} in {}", key, data[key], path)
        else:
            kept[key] = value
    return Settings(**kept)


def is_log_level(name: str) -> bool:
    """True when loguru knows a level called *name* (case-insensitive)."""
    try:
        logger.level(name.upper())
    except ValueError:
        return False
    return True


# ── per-field checks: return the cleaned value or _INVALID ────────────────

_INVALID = object()


def _int_in(low: int, high: int):
    def check(value):
        # bool is an int subclass but never a sensible duration or volume
        if not isinstance(value, int) or isinstance(value, bool):
            return _INVALID
        return max(low, min(value, high))
    return check


def _boolean(value):
    return value if isinstance(value, bool) else _INVALID


def _optional_path(value):
    return value if value is None or (isinstance(value, str) and value) else _INVALID


def _log_level(value):
    return value if isinstance(value, str) and is_log_level(value) else _INVALID


_VALIDATORS = {
    "work_duration": _int_in(0, MAX_DURATION),
    "rest_duration": _int_in(0, MAX_DURATION),
    "sound_enabled": _boolean,
    "sound_volume": _int_in(0, 100),
    "round_sound": _optional_path,
    "log_level": _log_level,
}


def parse_duration(text: str) -> int:
    """``"3:00"`` → 180, ``"45"`` → 45.

    Minutes and seconds are each limited to 0-59, matching the pickers.
    Raises ``ValueError`` on anything else.
    """
    parts = text.strip().split(":")
    if len(parts) > 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"not a duration: {text!r}")
    if len(parts) == 1:
        seconds = int(parts[0])
        if seconds > MAX_DURATION:
            raise ValueError(f"duration too long: {text!r}")
        return seconds
    minutes, seconds = int(parts[0]), int(parts[1])
    if minutes > MAX_COMPONENT or seconds > MAX_COMPONENT:
        raise ValueError(f"minutes and seconds must be 0-59: {text!r}")
    return minutes * 60 + seconds
