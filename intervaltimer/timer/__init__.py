"""Timer package."""

from .engine import (
    TimerEngine,
    TimerSnapshot,
    Phase,
    NotificationEvent,
    NotificationSink,
    DEFAULT_WORK_SECONDS,
    DEFAULT_REST_SECONDS,
    MAX_COMPONENT,
    format_time,
)

__all__ = [
    "TimerEngine",
    "TimerSnapshot",
    "Phase",
    "NotificationEvent",
    "NotificationSink",
    "DEFAULT_WORK_SECONDS",
    "DEFAULT_REST_SECONDS",
    "MAX_COMPONENT",
    "format_time",
]
