"""Reminders domain configuration - sounds, settings keys, wake detection."""

import os
from pathlib import Path

# Sound selection markers (stored in place of a system sound name)
SILENT_MARKER = "__silent__"
CUSTOM_SOUND_MARKER = "__custom__"

DEFAULT_SOUND = "Glass"

SYSTEM_SOUNDS = [
    "Basso", "Blow", "Bottle", "Frog", "Funk", "Glass", "Hero",
    "Morse", "Ping", "Pop", "Purr", "Sosumi", "Submarine", "Tink",
]

# Where system sounds live and their file extension
SYSTEM_SOUND_DIR = Path(os.environ.get("REMINDER_SYSTEM_SOUND_DIR", "/System/Library/Sounds"))
SYSTEM_SOUND_EXT = ".aiff"

# Command-line players tried in order for sound playback
SOUND_PLAYERS = [
    ["afplay"],
    ["paplay"],
    ["aplay", "-q"],
    ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"],
]

# Settings store keys
SOUND_KEY = "reminder_sound"
CUSTOM_SOUND_KEY = "reminder_custom_sound_path"
ARCHIVE_KEY = "reminder_archive_on_delete"
AUTO_MARK_EXPIRED_KEY = "reminder_auto_mark_expired"

# Notification
NOTIFICATION_TITLE = "Reminder"
NOTIFICATION_APP_NAME = "Reminder"
NOTIFICATION_TIMEOUT = 10  # seconds (ignored on macOS)

# Wake / clock-change detection
WAKE_CHECK_INTERVAL = int(os.environ.get("REMINDER_WAKE_CHECK_SECONDS", 30))
WAKE_DRIFT_THRESHOLD = float(os.environ.get("REMINDER_WAKE_DRIFT_SECONDS", 60))

# Shown when free text can't be turned into a reminder
PARSE_ERROR_MESSAGE = 'Could not parse. Try "Buy milk tomorrow at 9am" or "Call mom in 2h".'
