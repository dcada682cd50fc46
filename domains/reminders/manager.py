"""Reminder manager - the one entry point for presentation code.

Composes the store, the fire scheduler, reconciliation and preferences.
Every mutating call refreshes the pending_reminders / fired_reminders
snapshots and then notifies subscribers.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from logger import logger
from .config import CUSTOM_SOUND_MARKER, SILENT_MARKER, SYSTEM_SOUNDS
from .executor import DesktopAlerts
from .models import ReminderItem
from .parser import ParsedReminder, parse_reminder
from .reconcile import ReconciliationPass, WakeMonitor
from .scheduler import FireScheduler
from .settings import SettingsStore
from .store import ReminderStore


class ReminderManager:
    """Schedules, edits and removes reminders; owns preferences."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        store: ReminderStore,
        settings_store: SettingsStore,
        alerts=None,
        clock: Callable[[], datetime] = datetime.now,
        pick_file: Optional[Callable[[], Optional[str]]] = None,
        wake_monitor: bool = True
    ):
        """Initialize manager.

        Args:
            scheduler: APScheduler instance (started by the caller)
            store: Reminder store
            settings_store: Preference persistence
            alerts: Banner/sound side effects (default: DesktopAlerts)
            clock: Returns the current local time
            pick_file: Asks the user for a sound file; returns a path or None
            wake_monitor: Run the sleep/clock-jump heartbeat
        """
        self._scheduler = scheduler
        self._store = store
        self._settings_store = settings_store
        self._alerts = alerts or DesktopAlerts()
        self._clock = clock
        self._pick_file = pick_file
        self._listeners: list[Callable[["ReminderManager"], None]] = []

        self.settings = settings_store.read()

        self.fire_scheduler = FireScheduler(
            scheduler,
            store,
            self.settings,
            self._alerts,
            clock=clock,
            on_fired=lambda item: self._refresh()
        )
        self.reconciliation = ReconciliationPass(store, self.fire_scheduler, clock=clock)
        self._wake_monitor = WakeMonitor(scheduler, self.handle_system_wake) if wake_monitor else None

        self.pending_reminders: list[ReminderItem] = []
        self.fired_reminders: list[ReminderItem] = []

    # --- Lifecycle ---

    def start(self):
        """Load reminders, catch up on missed ones, arm the rest."""
        self._store.load()

        self.reconciliation.run()

        armed = 0
        for item in self._store.pending_view():
            self.fire_scheduler.arm(item)
            armed += 1

        if self._wake_monitor:
            self._wake_monitor.start()

        self._refresh()
        logger.info(f"Reminder manager started: {armed} pending, {len(self.fired_reminders)} fired")

    def shutdown(self):
        if self._wake_monitor:
            self._wake_monitor.stop()
        self.fire_scheduler.cancel_all()
        logger.info("Reminder manager stopped")

    def subscribe(self, callback: Callable[["ReminderManager"], None]):
        """Call callback(manager) after every change to the reminder lists."""
        self._listeners.append(callback)

    def _refresh(self):
        self.pending_reminders = self._store.pending_view()
        self.fired_reminders = self._store.fired_view()
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Reminder listener failed: {e}")

    # --- Reminders ---

    def preview(self, text: str) -> Optional[ParsedReminder]:
        """Parse text without scheduling anything."""
        return parse_reminder(text, now=self._clock())

    def schedule_reminder(self, note: str, fire_date: datetime) -> ReminderItem:
        item = self._store.add(note, fire_date)
        self.fire_scheduler.arm(item)
        self._refresh()
        return item

    def schedule_from_text(self, text: str) -> Optional[ReminderItem]:
        """Parse and schedule. Returns None (and changes nothing) if unparseable."""
        parsed = self.preview(text)
        if parsed is None:
            logger.info(f"Could not parse reminder text: '{text}'")
            return None

        note = parsed.note or text.strip()
        return self.schedule_reminder(note, parsed.date)

    def update_reminder(self, item: ReminderItem, note: str, fire_date: datetime) -> Optional[ReminderItem]:
        """Change note and fire date; a fired reminder becomes pending again."""
        self.fire_scheduler.cancel(item.id)

        updated = self._store.update(item.id, note, fire_date)
        if updated is None:
            return None

        if not updated.archived:
            self.fire_scheduler.arm(updated)
        self._refresh()
        return self._store.get(item.id)

    def remove_reminder(self, item: ReminderItem):
        """Archive or delete, depending on archive_on_delete."""
        self.fire_scheduler.cancel(item.id)
        if self._store.remove(item.id, archive_instead=self.settings.archive_on_delete):
            self._refresh()

    def find_reminder(self, id_prefix: str) -> Optional[ReminderItem]:
        """Visible reminder whose id starts with id_prefix (case-insensitive)."""
        prefix = id_prefix.strip().upper()
        if not prefix:
            return None
        matches = [
            r for r in self.pending_reminders + self.fired_reminders
            if r.id.upper().startswith(prefix)
        ]
        return matches[0] if len(matches) == 1 else None

    # --- Wake signals ---

    def handle_system_wake(self):
        """System resumed from sleep (or the wall clock jumped)."""
        self._catch_up("wake")

    def handle_session_unlock(self):
        self._catch_up("unlock")

    def _catch_up(self, reason: str):
        logger.info(f"Checking for overdue reminders ({reason})")
        self.reconciliation.run()
        if self._scheduler.running:
            # Recompute the next wakeup against the current clock
            self._scheduler.wakeup()
        self._refresh()

    # --- Sound ---

    def preview_sound(self):
        try:
            self._alerts.play_sound(self.settings)
        except Exception as e:
            logger.warning(f"Sound preview failed: {e}")

    def select_silent(self):
        self.settings.selected_sound = SILENT_MARKER
        self._save_settings()

    def select_system_sound(self, name: str) -> bool:
        """Select one of SYSTEM_SOUNDS (case-insensitive)."""
        for sound in SYSTEM_SOUNDS:
            if sound.lower() == name.strip().lower():
                self.settings.selected_sound = sound
                self._save_settings()
                return True
        logger.warning(f"Unknown system sound: {name}")
        return False

    def select_custom_sound(self, path: Optional[str] = None) -> bool:
        """Use an audio file. Without a path, ask the file picker.

        Returns:
            True if the selection changed
        """
        if path is None and self._pick_file is not None:
            path = self._pick_file()
        if not path:
            return False

        sound_path = Path(path).expanduser()
        if not sound_path.is_file():
            logger.warning(f"Custom sound file not found: {sound_path}")
            return False

        self.settings.custom_sound_path = str(sound_path)
        self.settings.selected_sound = CUSTOM_SOUND_MARKER
        self._save_settings()
        return True

    # --- Preferences ---

    @property
    def archive_on_delete(self) -> bool:
        return self.settings.archive_on_delete

    @archive_on_delete.setter
    def archive_on_delete(self, value: bool):
        self.settings.archive_on_delete = bool(value)
        self._save_settings()

    @property
    def auto_mark_expired(self) -> bool:
        return self.settings.auto_mark_expired

    @auto_mark_expired.setter
    def auto_mark_expired(self, value: bool):
        self.settings.auto_mark_expired = bool(value)
        self._save_settings()

    def _save_settings(self):
        self._settings_store.write(self.settings)
