"""Shared pytest fixtures for MenuTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from menutimer.database.db import configure_engine, init_db
from menutimer.store import PreferencesStore
from menutimer.timer.coordinator import TimerCoordinator

from helpers import RecordingDispatcher


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def store(qapp):
    """Fresh PreferencesStore over the empty test database."""
    return PreferencesStore()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def coordinator(qapp, dispatcher):
    """TimerCoordinator whose alerts land in ``dispatcher.alerts``."""
    coord = TimerCoordinator(dispatcher)
    yield coord
    coord.stop()
