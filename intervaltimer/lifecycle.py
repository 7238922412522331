"""Bridge between Qt application state and the timer's suspend/resume."""

from __future__ import annotations

from loguru import logger
from PyQt6.QtCore import QObject, Qt
from PyQt6.QtGui import QGuiApplication

from .timer.engine import TimerEngine


class LifecycleMonitor(QObject):
    """Forward ``applicationStateChanged`` to the engine.

    Only ``ApplicationSuspended`` stops tick delivery.  A hidden or
    inactive window keeps ticking so the cues still sound.
    """

    def __init__(
        self,
        engine: TimerEngine,
        app: QGuiApplication | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._was_suspended = False
        app = app or QGuiApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self.on_state_changed)

    def on_state_changed(self, state: Qt.ApplicationState) -> None:
        if state == Qt.ApplicationState.ApplicationSuspended:
            if not self._was_suspended:
                logger.debug("Application suspended")
                self._was_suspended = True
                self._engine.suspended()
        elif self._was_suspended:
            logger.debug("Application resumed ({})", state.name)
            self._was_suspended = False
            self._engine.resumed()
