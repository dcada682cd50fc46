"""Reminder scheduler - main process.

Loads reminders, catches up on any that were missed, arms timers and
reads commands from stdin. Unix SIGUSR1 acts as a "session unlocked"
signal and SIGUSR2 as "system resumed", so desktop hooks can poke the
process after sleep.
"""

import argparse
import asyncio
import signal
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from logger import logger
from config import REMINDER_STORE_PATH, SETTINGS_PATH
from domains.reminders import ReminderManager, ReminderStore, SettingsStore, handle_command


def build_manager(scheduler: AsyncIOScheduler) -> ReminderManager:
    """Wire the manager to the default file locations."""
    return ReminderManager(
        scheduler,
        ReminderStore(REMINDER_STORE_PATH),
        SettingsStore(SETTINGS_PATH),
    )


def _install_wake_signals(loop: asyncio.AbstractEventLoop, manager: ReminderManager):
    if not hasattr(signal, "SIGUSR1"):
        return
    try:
        loop.add_signal_handler(signal.SIGUSR1, manager.handle_session_unlock)
        loop.add_signal_handler(signal.SIGUSR2, manager.handle_system_wake)
    except (NotImplementedError, RuntimeError) as e:
        logger.warning(f"Wake signals unavailable: {e}")


async def run(interactive: bool = True):
    """Run until stdin closes (or forever when not interactive)."""
    loop = asyncio.get_running_loop()

    scheduler = AsyncIOScheduler()
    scheduler.start()

    manager = build_manager(scheduler)
    manager.start()
    _install_wake_signals(loop, manager)

    logger.info(f"Reminder scheduler running with {len(manager.pending_reminders)} pending reminders")

    try:
        if not interactive:
            await asyncio.Event().wait()
            return

        print(handle_command("help", manager), flush=True)
        while True:
            print("> ", end="", flush=True)
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            if line.strip().lower() in ("quit", "exit"):
                break
            print(handle_command(line, manager), flush=True)
    finally:
        manager.shutdown()
        scheduler.shutdown(wait=False)
        logger.info("Reminder scheduler stopped")


def main():
    """Entry point."""
    arg_parser = argparse.ArgumentParser(description="Personal reminder scheduler")
    arg_parser.add_argument(
        "--daemon",
        action="store_true",
        help="Run without reading commands from stdin"
    )
    args = arg_parser.parse_args()

    logger.info("Starting reminder scheduler...")
    try:
        asyncio.run(run(interactive=not args.daemon))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
