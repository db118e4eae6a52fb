"""Shared pytest fixtures for Stillpoint tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from stillpoint.database.db import configure_engine, init_db
from stillpoint.persistence.store import MemoryStateStore
from stillpoint.timer.clock import ManualClock
from stillpoint.timer.engine import TimerEngine


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def make_engine(qapp, clock, store):
    """Build engines sharing the test's clock and store (simulates restarts)."""
    created = []

    def factory(**kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("store", store)
        eng = TimerEngine(**kwargs)
        created.append(eng)
        return eng

    yield factory
    for eng in created:
        eng.shutdown()


@pytest.fixture
def engine(make_engine):
    """Fresh TimerEngine on virtual time with an in-memory store."""
    return make_engine()
