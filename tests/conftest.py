"""Pytest configuration and fixtures."""

import os
import sys
import tempfile
from datetime import datetime, timedelta

import pytest

# Keep logs and default data files out of the real home directory
os.environ.setdefault("REMINDER_HOME", tempfile.mkdtemp(prefix="reminder_test_"))

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from domains.reminders.manager import ReminderManager
from domains.reminders.settings import ReminderSettings, SettingsStore
from domains.reminders.store import ReminderStore


class FakeAlerts:
    """Records side effects instead of touching the desktop."""

    def __init__(self):
        self.notifications = []
        self.sounds = []

    def notify(self, title, body, sound_hint=None):
        self.notifications.append((title, body, sound_hint))

    def play_sound(self, settings):
        self.sounds.append(settings.selected_sound)


class FakeClock:
    """Controllable local clock."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime.now().replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def alerts():
    return FakeAlerts()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "reminders.json"


@pytest.fixture
def store(store_path):
    return ReminderStore(store_path)


@pytest.fixture
def settings_store(tmp_path):
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def settings():
    return ReminderSettings()


@pytest.fixture
def scheduler():
    """Unstarted scheduler: jobs stay pending and can be inspected."""
    return AsyncIOScheduler()


@pytest.fixture
def make_manager(scheduler, store, settings_store, alerts, clock):
    """Build a manager on temp files; call with overrides if needed."""
    def _make(**kwargs):
        options = {
            "alerts": alerts,
            "clock": clock,
            "wake_monitor": False,
        }
        options.update(kwargs)
        return ReminderManager(scheduler, store, settings_store, **options)
    return _make
