"""Desktop side effects of a reminder firing: banner and sound.

Everything here is best effort. The reminder is already marked fired
before these run, so a failure only costs the user the alert.
"""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional

from plyer import notification

from logger import logger
from . import config
from .settings import ReminderSettings


def escape_applescript(text: str) -> str:
    """Escape text for use inside an AppleScript string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def find_sound_player() -> Optional[list[str]]:
    """First installed command-line audio player, as an argv prefix."""
    for command in config.SOUND_PLAYERS:
        if shutil.which(command[0]):
            return command
    return None


def resolve_sound_file(settings: ReminderSettings) -> Optional[Path]:
    """File to play for the current selection, or None for silence."""
    if settings.is_silent:
        return None
    if settings.is_custom_sound:
        if not settings.custom_sound_path:
            return None
        return Path(settings.custom_sound_path)
    return config.SYSTEM_SOUND_DIR / f"{settings.selected_sound}{config.SYSTEM_SOUND_EXT}"


class DesktopAlerts:
    """Shows a notification banner and plays the configured sound."""

    def __init__(self):
        # Detached players and osascript runs; polled so finished ones get reaped
        self._children: list[subprocess.Popen] = []

    def _spawn(self, argv: list[str]) -> subprocess.Popen:
        self.reap()
        process = subprocess.Popen(
            argv,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True
        )
        self._children.append(process)
        return process

    def reap(self) -> int:
        """Collect exited child processes.

        Returns:
            Number still running
        """
        self._children = [p for p in self._children if p.poll() is None]
        return len(self._children)

    def notify(self, title: str, body: str, sound_hint: Optional[str] = None):
        """Fire-and-forget desktop notification."""
        try:
            if sys.platform == "darwin":
                self._notify_macos(title, body, sound_hint)
            else:
                notification.notify(
                    title=title,
                    message=body,
                    app_name=config.NOTIFICATION_APP_NAME,
                    timeout=config.NOTIFICATION_TIMEOUT
                )
        except Exception as e:
            logger.warning(f"Notification failed: {e}")

    def _notify_macos(self, title: str, body: str, sound_hint: Optional[str]):
        # osascript only knows system sound names; custom/silent play separately
        sound_clause = f' sound name "{escape_applescript(sound_hint)}"' if sound_hint else ""
        script = (
            f'display notification "{escape_applescript(body)}" '
            f'with title "{escape_applescript(title)}"{sound_clause}'
        )
        self._spawn(["/usr/bin/osascript", "-e", script])

    def play_sound(self, settings: ReminderSettings):
        """Fire-and-forget playback of the selected sound."""
        sound_file = resolve_sound_file(settings)
        if sound_file is None:
            return

        if not sound_file.is_file():
            logger.warning(f"Sound file not found: {sound_file}")
            return

        player = find_sound_player()
        if player is None:
            logger.warning("No audio player available, skipping sound")
            return

        try:
            self._spawn([*player, str(sound_file)])
        except OSError as e:
            logger.warning(f"Failed to play {sound_file}: {e}")
