"""Shared pytest fixtures for IntervalTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from intervaltimer.timer.engine import TimerEngine

from helpers import FakeClock, RecordingSink


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def engine(qapp, clock, sink):
    """Fresh TimerEngine with default 180/60 durations and a fake clock."""
    return TimerEngine(parent=None, sink=sink, clock=clock)


def make_engine(clock, sink=None, work=180, rest=60):
    return TimerEngine(
        parent=None, sink=sink, clock=clock,
        work_duration=work, rest_duration=rest,
    )


@pytest.fixture
def engine_factory(qapp, clock):
    """Build engines with custom durations sharing the test's clock."""
    def factory(work=180, rest=60, sink=None):
        return make_engine(clock, sink=sink or RecordingSink(), work=work, rest=rest)
    return factory
