"""Catch up on reminders missed while no timer was running.

Runs at startup, on resume from sleep and on session unlock. The
WakeMonitor heartbeat notices sleep and wall-clock jumps by comparing
wall time against the monotonic clock, which stops while suspended.
"""

import time
from datetime import datetime
from typing import Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from logger import logger
from . import config
from .scheduler import FireScheduler
from .store import ReminderStore


class ReconciliationPass:
    """Fires (or silently expires) every overdue pending reminder."""

    def __init__(
        self,
        store: ReminderStore,
        fire_scheduler: FireScheduler,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._store = store
        self._fire_scheduler = fire_scheduler
        self._clock = clock

    def run(self) -> int:
        """Handle overdue reminders.

        Safe to call repeatedly: a reminder already marked fired is skipped.

        Returns:
            Number of overdue reminders found
        """
        overdue = self._store.due(self._clock())
        for item in overdue:
            self._fire_scheduler.cancel(item.id)
            self._fire_scheduler.expire(item, immediate=True)

        if overdue:
            logger.info(f"Reconciled {len(overdue)} overdue reminder(s)")
        return len(overdue)


class WakeMonitor:
    """Interval job that detects sleep/resume and clock changes."""

    JOB_ID = "reminder_wake_monitor"

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        on_wake: Callable[[], None],
        interval: int = config.WAKE_CHECK_INTERVAL,
        threshold: float = config.WAKE_DRIFT_THRESHOLD,
        wall_clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic
    ):
        self._scheduler = scheduler
        self._on_wake = on_wake
        self.interval = interval
        self.threshold = threshold
        self._wall_clock = wall_clock
        self._monotonic = monotonic
        self._last_wall = None
        self._last_mono = None

    def start(self):
        self._reset_baseline()
        self._scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=self.interval),
            id=self.JOB_ID,
            name="Detect sleep/resume for reminders",
            replace_existing=True,
            coalesce=True
        )
        logger.info(f"Started wake monitor (every {self.interval}s)")

    def stop(self):
        try:
            self._scheduler.remove_job(self.JOB_ID)
        except JobLookupError:
            pass

    def _reset_baseline(self):
        self._last_wall = self._wall_clock()
        self._last_mono = self._monotonic()

    async def _tick(self):
        self.check()

    def check(self) -> bool:
        """Compare clocks since the last check.

        Returns:
            True if a wake (or clock jump) was detected
        """
        if self._last_wall is None:
            self._reset_baseline()
            return False

        wall, mono = self._wall_clock(), self._monotonic()
        drift = (wall - self._last_wall) - (mono - self._last_mono)
        self._last_wall, self._last_mono = wall, mono

        if abs(drift) <= self.threshold:
            return False

        logger.info(f"Wall clock drifted {drift:.0f}s from monotonic clock, treating as wake")
        try:
            self._on_wake()
        except Exception as e:
            logger.error(f"Wake handler failed: {e}")
        return True
