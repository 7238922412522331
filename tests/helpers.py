"""Shared test helpers for IntervalTimer."""

from datetime import datetime, timedelta

from intervaltimer.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def __call__(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class RecordingSink:
    """Notification sink that remembers every call."""

    def __init__(self, fail_activate: bool = False, fail_notify: bool = False):
        self.events: list = []
        self.activations = 0
        self._fail_activate = fail_activate
        self._fail_notify = fail_notify

    def activate(self):
        self.activations += 1
        if self._fail_activate:
            raise RuntimeError("audio session refused")

    def notify(self, event):
        self.events.append(event)
        if self._fail_notify:
            raise RuntimeError("speaker unplugged")


def tick_n(engine: TimerEngine, clock: FakeClock, n: int) -> None:
    """Deliver *n* on-time ticks, one simulated second apart."""
    for _ in range(n):
        clock.advance(1)
        engine.tick()


def state_of(engine: TimerEngine) -> tuple:
    return (engine.phase, engine.remaining, engine.round)
