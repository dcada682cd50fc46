"""Reminders: parse a time from free text, persist, fire exactly once.

Uses APScheduler date triggers with JSON file persistence.
"""

from .parser import parse_reminder, ParsedReminder
from .models import ReminderItem
from .store import ReminderStore
from .settings import ReminderSettings, SettingsStore
from .executor import DesktopAlerts
from .scheduler import FireScheduler
from .reconcile import ReconciliationPass, WakeMonitor
from .manager import ReminderManager
from .handler import handle_command

__all__ = [
    "parse_reminder",
    "ParsedReminder",
    "ReminderItem",
    "ReminderStore",
    "ReminderSettings",
    "SettingsStore",
    "DesktopAlerts",
    "FireScheduler",
    "ReconciliationPass",
    "WakeMonitor",
    "ReminderManager",
    "handle_command",
]
