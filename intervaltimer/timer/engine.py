"""Interval timer state machine.

Phases
------
WORK    Work countdown.
REST    Rest countdown.

Each phase can be running or paused, which gives four states in total.
The engine starts in (WORK, paused) and loops rounds forever.

Transitions
-----------
start / pause                     toggle the running bit, phase unchanged
tick / resynchronize at 0         WORK → REST  (phase-end-work)
                                  REST → WORK  (round-complete, round += 1)
reset                             → (WORK, paused), round 1

Suspension
----------
When the host cannot deliver ticks (process suspended, machine asleep) the
engine keeps ``running`` and ``anchor_time``.  On resume,
``resynchronize(now)`` replays every transition that the missed ticks would
have produced.  Only after that is the 1 s ``QTimer`` re-armed.

All mutation happens on the Qt thread that owns the engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Protocol

from loguru import logger
from PyQt6.QtCore import QObject, QTimer, pyqtSignal


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    WORK = "work"
    REST = "rest"


class NotificationEvent(Enum):
    PHASE_END_WORK = "phase-end-work"
    ROUND_COMPLETE = "round-complete"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_WORK_SECONDS = 3 * 60
DEFAULT_REST_SECONDS = 60
MAX_COMPONENT = 59  # picker range for both minutes and seconds
TICK_INTERVAL_MS = 1000
SUSPEND_GAP_SECONDS = 2  # a timeout this late means the host was asleep


# ── collaborators ─────────────────────────────────────────────────────────


class NotificationSink(Protocol):
    """Turns transitions into audio (or other) feedback."""

    def activate(self) -> None: ...

    def notify(self, event: NotificationEvent) -> None: ...


# ── snapshot ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerSnapshot:
    """Read-only view of the engine for presentation code."""

    phase: Phase
    remaining: int
    round: int
    running: bool
    progress: float


def format_time(seconds: int) -> str:
    """Render *seconds* as ``mm:ss``."""
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based WORK/REST interval timer with background catch-up.

    Signals
    -------
    state_changed(snapshot: TimerSnapshot)
        Emitted after every operation that changed observable state.
    transitioned(event: NotificationEvent)
        Emitted once per phase transition, including transitions replayed
        by ``resynchronize``.

    The optional *sink* receives the same events through ``notify(event)``
    and is asked to ``activate()`` on every start.  Both calls are
    fire-and-forget: failures are logged and never reach the caller.
    """

    state_changed = pyqtSignal(object)
    transitioned = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sink: NotificationSink | None = None,
        clock: Callable[[], datetime] = datetime.now,
        work_duration: int = DEFAULT_WORK_SECONDS,
        rest_duration: int = DEFAULT_REST_SECONDS,
    ) -> None:
        super().__init__(parent)

        # ── collaborators ─────────────────────────────────────────────
        self._sink = sink
        self._clock = clock

        # ── configuration ─────────────────────────────────────────────
        self._durations: dict[Phase, int] = {
            Phase.WORK: max(0, int(work_duration)),
            Phase.REST: max(0, int(rest_duration)),
        }

        # ── countdown state ───────────────────────────────────────────
        self._phase: Phase = Phase.WORK
        self._remaining: int = self._durations[Phase.WORK]
        self._round: int = 1
        self._running: bool = False
        self._suspended: bool = False
        self._anchor_time: datetime | None = None

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_timeout)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining(self) -> int:
        """Seconds left in the current phase."""
        return self._remaining

    @property
    def round(self) -> int:
        return self._round

    @property
    def running(self) -> bool:
        return self._running

    @property
    def is_suspended(self) -> bool:
        """True between ``suspended()`` and ``resumed()`` while running."""
        return self._suspended

    @property
    def anchor_time(self) -> datetime | None:
        """Instant at which ``remaining`` was last known accurate."""
        return self._anchor_time

    @property
    def work_duration(self) -> int:
        return self._durations[Phase.WORK]

    @property
    def rest_duration(self) -> int:
        return self._durations[Phase.REST]

    @property
    def work_minutes(self) -> int:
        return self.work_duration // 60

    @property
    def work_seconds(self) -> int:
        return self.work_duration % 60

    @property
    def rest_minutes(self) -> int:
        return self.rest_duration // 60

    @property
    def rest_seconds(self) -> int:
        return self.rest_duration % 60

    @property
    def progress(self) -> float:
        """0.0 → 1.0 progress through the current phase.

        A zero-length phase counts as already finished.
        """
        duration = self._durations[self._phase]
        if duration <= 0:
            return 1.0
        elapsed = duration - self._remaining
        return max(0.0, min(1.0, elapsed / duration))

    @property
    def remaining_text(self) -> str:
        return format_time(self._remaining)

    def duration_for(self, phase: Phase) -> int:
        return self._durations[phase]

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            remaining=self._remaining,
            round=self._round,
            running=self._running,
            progress=self.progress,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def set_work_duration(self, seconds: int) -> None:
        self._set_duration(Phase.WORK, seconds)

    def set_rest_duration(self, seconds: int) -> None:
        self._set_duration(Phase.REST, seconds)

    def set_work_time(self, minutes: int, seconds: int) -> None:
        """Set the work duration from picker-style ``(minutes, seconds)``."""
        self.set_work_duration(_to_seconds(minutes, seconds))

    def set_rest_time(self, minutes: int, seconds: int) -> None:
        """Set the rest duration from picker-style ``(minutes, seconds)``."""
        self.set_rest_duration(_to_seconds(minutes, seconds))

    def _set_duration(self, phase: Phase, seconds: int) -> None:
        seconds = max(0, int(seconds))
        self._durations[phase] = seconds
        if self._phase == phase:
            if not self._running:
                # Idle display follows the edited duration.
                self._remaining = seconds
            elif self._remaining > seconds:
                self._remaining = seconds
        logger.debug("{} duration set to {}", phase.value, format_time(seconds))
        self._emit_state()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start counting down.  No-op while already running."""
        if self._running:
            return
        self._running = True
        self._suspended = False
        self._anchor_time = self._clock()
        self._qt_timer.start()
        logger.info(
            "Timer started: {} round {} at {}",
            self._phase.value, self._round, self.remaining_text,
        )
        self._activate_sink()
        self._emit_state()

    def pause(self) -> None:
        """Stop counting down, keeping phase, round and remaining."""
        if not self._running:
            return
        self._stop()
        logger.info("Timer paused at {}", self.remaining_text)
        self._emit_state()

    def reset(self) -> None:
        """Return to (WORK, paused), round 1, full work duration."""
        self._stop()
        self._phase = Phase.WORK
        self._remaining = self._durations[Phase.WORK]
        self._round = 1
        logger.info("Timer reset")
        self._emit_state()

    def tick(self) -> None:
        """Advance the countdown by one second.  No-op while paused."""
        if not self._running:
            return
        if self._remaining > 0:
            self._remaining -= 1
        if self._remaining == 0:
            self._transition()
        self._anchor_time = self._clock()
        self._emit_state()

    def resynchronize(self, now: datetime | None = None) -> None:
        """Catch up with wall-clock time after ticks could not be delivered.

        Replays exactly what ``tick()`` would have done once per whole
        elapsed second, firing every transition on the way.  Each step of
        the replay consumes at least one simulated second, so zero-length
        phases cannot stall it.
        """
        if not self._running or self._anchor_time is None:
            return
        if now is None:
            now = self._clock()

        left = max(0, math.floor((now - self._anchor_time).total_seconds()))
        elapsed = left
        transitions = 0
        while left > 0:
            if self._remaining > 0:
                step = min(self._remaining, left)
                self._remaining -= step
                left -= step
                if self._remaining == 0:
                    self._transition()
                    transitions += 1
            else:
                left -= 1
                self._transition()
                transitions += 1

        self._anchor_time = now
        logger.debug(
            "Resynchronized {}s gap: {} transition(s), now {} round {} at {}",
            elapsed, transitions, self._phase.value, self._round,
            self.remaining_text,
        )
        self._emit_state()

    # ── host lifecycle ────────────────────────────────────────────────

    def suspended(self) -> None:
        """The host can no longer deliver ticks."""
        if not self._running or self._suspended:
            return
        self._qt_timer.stop()
        self._suspended = True
        logger.debug("Tick delivery suspended at {}", self.remaining_text)

    def resumed(self, now: datetime | None = None) -> None:
        """The host can deliver ticks again.

        Catches up first, then re-arms the tick so the gap is not counted
        twice.
        """
        if not self._running:
            return
        self._suspended = False
        self.resynchronize(now)
        self._qt_timer.start()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_timeout(self) -> None:
        if not self._running or self._anchor_time is None:
            return
        anchor = self._anchor_time
        now = self._clock()
        whole = max(0, math.floor((now - anchor).total_seconds()))
        if whole >= SUSPEND_GAP_SECONDS:
            # The event loop itself was frozen (machine sleep).
            logger.debug("Late tick detected, resynchronizing")
            self.resynchronize(now)
            counted = whole
        else:
            self.tick()
            counted = 1
        if self._running:
            # Carry the sub-second remainder so late timeouts do not drift;
            # an early timeout never moves the anchor past now.
            self._anchor_time = min(anchor + timedelta(seconds=counted), now)

    def _transition(self) -> None:
        if self._phase == Phase.WORK:
            event = NotificationEvent.PHASE_END_WORK
            self._phase = Phase.REST
        else:
            event = NotificationEvent.ROUND_COMPLETE
            self._phase = Phase.WORK
            self._round += 1
        self._remaining = self._durations[self._phase]
        logger.info("{} → {} (round {})", event.value, self._phase.value, self._round)
        self._notify(event)
        self.transitioned.emit(event)

    def _stop(self) -> None:
        self._qt_timer.stop()
        self._running = False
        self._suspended = False
        self._anchor_time = None

    def _activate_sink(self) -> None:
        if self._sink is None:
            return
        try:
            self._sink.activate()
        except Exception as exc:
            logger.warning("Audio output unavailable, continuing silently: {}", exc)

    def _notify(self, event: NotificationEvent) -> None:
        if self._sink is None:
            return
        try:
            self._sink.notify(event)
        except Exception as exc:
            logger.warning("Notification for {} failed: {}", event.value, exc)

    def _emit_state(self) -> None:
        self.state_changed.emit(self.snapshot())


def _to_seconds(minutes: int, seconds: int) -> int:
    minutes = max(0, min(minutes, MAX_COMPONENT))
    seconds = max(0, min(seconds, MAX_COMPONENT))
    return minutes * 60 + seconds
