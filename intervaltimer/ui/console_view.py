"""Single-line terminal display of the running timer."""

from __future__ import annotations

import sys
from typing import TextIO

from PyQt6.QtCore import QObject

from ..timer.engine import Phase, TimerEngine, TimerSnapshot, format_time


PHASE_LABELS: dict[Phase, str] = {
    Phase.WORK: "WORK",
    Phase.REST: "REST",
}


def render(snapshot: TimerSnapshot) -> str:
    """``Round 2  REST  00:42`` plus a marker while paused."""
    line = (
        f"Round {snapshot.round}  "
        f"{PHASE_LABELS[snapshot.phase]}  "
        f"{format_time(snapshot.remaining)}"
    )
    if not snapshot.running:
        line += "  (paused)"
    return line


class ConsoleView(QObject):
    """Redraws one terminal line whenever the engine state changes."""

    def __init__(
        self,
        engine: TimerEngine,
        stream: TextIO | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._stream = stream or sys.stdout
        self._last = ""
        engine.state_changed.connect(self.refresh)
        self.refresh(engine.snapshot())

    @property
    def last_line(self) -> str:
        return self._last

    def refresh(self, snapshot: TimerSnapshot) -> None:
        line = render(snapshot)
        if line == self._last:
            return
        # Pad so a shorter line fully covers the previous one.
        width = max(len(line), len(self._last))
        self._stream.write("\r" + line.ljust(width))
        self._stream.flush()
        self._last = line
