"""Global configuration for the reminder scheduler."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Data directory (reminders, settings, logs)
REMINDER_HOME = Path(os.getenv("REMINDER_HOME", Path.home() / ".local" / "reminder"))

# Reminder document
REMINDER_STORE_PATH = Path(os.getenv("REMINDER_STORE_PATH", REMINDER_HOME / "reminders.json"))

# Sound / archive / auto-expire preferences
SETTINGS_PATH = Path(os.getenv("REMINDER_SETTINGS_PATH", REMINDER_HOME / "settings.json"))

# Logging
LOG_DIR = Path(os.getenv("REMINDER_LOG_DIR", REMINDER_HOME / "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)
