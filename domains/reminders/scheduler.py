"""One APScheduler date job per pending reminder.

Each armed reminder has exactly one entry in ``_timers`` (reminder id ->
TimerHandle) and one job in the scheduler under the same id. The job
callback only acts if its handle is still the registered one, so once
cancel() returns a late callback is a no-op.

The callback is a coroutine so AsyncIOScheduler runs it on the event loop
thread, alongside every other store mutation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from logger import logger
from . import config
from .models import ReminderItem
from .settings import ReminderSettings
from .store import ReminderStore


@dataclass(eq=False)
class TimerHandle:
    """Registration of one armed reminder."""
    reminder_id: str
    due: datetime


class FireScheduler:
    """Arms, cancels and fires reminder timers."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        store: ReminderStore,
        settings: ReminderSettings,
        alerts,
        clock: Callable[[], datetime] = datetime.now,
        on_fired: Optional[Callable[[ReminderItem], None]] = None
    ):
        """Initialize fire scheduler.

        Args:
            scheduler: APScheduler instance the jobs are added to
            store: Reminder store (all state changes go through it)
            settings: Live preference values (sound, auto-mark-expired)
            alerts: Object with notify(title, body, sound_hint) and play_sound(settings)
            clock: Returns the current local time
            on_fired: Called after a reminder is marked fired
        """
        self._scheduler = scheduler
        self._store = store
        self._settings = settings
        self._alerts = alerts
        self._clock = clock
        self.on_fired = on_fired
        self._timers: dict[str, TimerHandle] = {}

    def arm(self, item: ReminderItem):
        """Schedule item to fire at its fire date.

        An item already due fires straight away through the expiry path.
        """
        self.cancel(item.id)

        if not item.is_pending:
            return

        if item.fire_date <= self._clock():
            self.expire(item, immediate=True)
            return

        handle = TimerHandle(reminder_id=item.id, due=item.fire_date)
        self._timers[item.id] = handle

        self._scheduler.add_job(
            self._on_timer,
            trigger=DateTrigger(run_date=item.fire_date),
            args=[handle],
            id=item.id,
            name=f"reminder:{item.note[:30]}",
            replace_existing=True,
            misfire_grace_time=None,
            coalesce=True
        )
        logger.info(f"Armed reminder {item.id}: '{item.note}' at {item.fire_date}")

    def cancel(self, reminder_id: str):
        """Drop the timer for reminder_id, if any."""
        handle = self._timers.pop(reminder_id, None)
        if handle is None:
            return

        try:
            self._scheduler.remove_job(reminder_id)
        except JobLookupError:
            # Already ran or was never submitted
            pass
        logger.debug(f"Cancelled timer for reminder {reminder_id}")

    def cancel_all(self):
        for reminder_id in list(self._timers):
            self.cancel(reminder_id)

    def has_timer(self, reminder_id: str) -> bool:
        return reminder_id in self._timers

    def armed_ids(self) -> set[str]:
        return set(self._timers)

    async def _on_timer(self, handle: TimerHandle):
        """APScheduler job callback."""
        if self._timers.get(handle.reminder_id) is not handle:
            logger.debug(f"Ignoring stale timer for reminder {handle.reminder_id}")
            return

        item = self._store.get(handle.reminder_id)
        if item is None:
            self._timers.pop(handle.reminder_id, None)
            return

        logger.debug(f"Timer expired for reminder {item.id} (due {handle.due})")
        self.expire(item, immediate=False)

    def expire(self, item: ReminderItem, immediate: bool):
        """Fire a reminder whose time has come.

        Args:
            item: The reminder
            immediate: True when the fire date had already passed before any
                timer ran (arming a past date, or reconciliation). With
                auto_mark_expired on, such reminders are marked fired silently.
        """
        # Own timer entry goes first so nothing can fire this twice
        self.cancel(item.id)

        current = self._store.get(item.id)
        if current is None or not current.is_pending:
            return
        item = current

        if immediate and self._settings.auto_mark_expired:
            if self._store.mark_fired(item.id):
                logger.info(f"Auto-marked expired reminder {item.id} as fired")
                self._notify_fired(item)
            return

        if not self._store.mark_fired(item.id):
            return

        logger.info(f"Fired reminder {item.id}: {item.note}")
        self._notify_fired(item)

        try:
            self._alerts.play_sound(self._settings)
        except Exception as e:
            logger.warning(f"Sound failed for reminder {item.id}: {e}")

        try:
            self._alerts.notify(
                config.NOTIFICATION_TITLE,
                item.note,
                self._settings.notification_sound
            )
        except Exception as e:
            logger.warning(f"Notification failed for reminder {item.id}: {e}")

    def _notify_fired(self, item: ReminderItem):
        if self.on_fired is None:
            return
        try:
            self.on_fired(item)
        except Exception as e:
            logger.error(f"on_fired callback failed for reminder {item.id}: {e}")
