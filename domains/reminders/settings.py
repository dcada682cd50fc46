"""Persistent reminder preferences - survive restarts.

Stores: selected sound, custom sound file, archive-on-delete,
auto-mark-expired. Kept as a flat key/value JSON file.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from logger import logger
from .config import (
    ARCHIVE_KEY,
    AUTO_MARK_EXPIRED_KEY,
    CUSTOM_SOUND_KEY,
    CUSTOM_SOUND_MARKER,
    DEFAULT_SOUND,
    SILENT_MARKER,
    SOUND_KEY,
)


@dataclass
class ReminderSettings:
    """Current preference values, shared by the manager and the scheduler."""
    selected_sound: str = DEFAULT_SOUND
    custom_sound_path: Optional[str] = None
    archive_on_delete: bool = True
    auto_mark_expired: bool = False

    @property
    def is_silent(self) -> bool:
        return self.selected_sound == SILENT_MARKER

    @property
    def is_custom_sound(self) -> bool:
        return self.selected_sound == CUSTOM_SOUND_MARKER

    @property
    def custom_sound_display_name(self) -> Optional[str]:
        if not self.custom_sound_path:
            return None
        return Path(self.custom_sound_path).name

    @property
    def sound_display_name(self) -> str:
        if self.is_silent:
            return "Silent"
        if self.is_custom_sound:
            return self.custom_sound_display_name or "Custom"
        return self.selected_sound

    @property
    def notification_sound(self) -> Optional[str]:
        """System sound name for the banner; custom and silent play separately."""
        if self.is_silent or self.is_custom_sound:
            return None
        return self.selected_sound


class SettingsStore:
    """Key/value preference file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Corrupted settings file {self.path}: {e}")
            self._backup_corrupt()
            return {}
        except OSError as e:
            logger.error(f"Failed to read settings {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _backup_corrupt(self):
        backup_path = self.path.with_name(self.path.name + ".bak")
        try:
            self.path.replace(backup_path)
            logger.warning(f"Moved corrupted settings file to {backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up corrupted settings file: {e}")

    def _save(self, values: dict):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to save settings {self.path}: {e}")

    def read(self) -> ReminderSettings:
        """Build settings from the file, falling back to defaults per key."""
        values = self._load()
        defaults = ReminderSettings()

        sound = values.get(SOUND_KEY)
        custom_path = values.get(CUSTOM_SOUND_KEY)
        archive = values.get(ARCHIVE_KEY)
        auto_mark = values.get(AUTO_MARK_EXPIRED_KEY)

        return ReminderSettings(
            selected_sound=sound if isinstance(sound, str) and sound else defaults.selected_sound,
            custom_sound_path=custom_path if isinstance(custom_path, str) else None,
            archive_on_delete=archive if isinstance(archive, bool) else defaults.archive_on_delete,
            auto_mark_expired=auto_mark if isinstance(auto_mark, bool) else defaults.auto_mark_expired,
        )

    def write(self, settings: ReminderSettings):
        """Persist every preference value."""
        values = self._load()
        values.update({
            SOUND_KEY: settings.selected_sound,
            CUSTOM_SOUND_KEY: settings.custom_sound_path,
            ARCHIVE_KEY: settings.archive_on_delete,
            AUTO_MARK_EXPIRED_KEY: settings.auto_mark_expired,
        })
        self._save(values)
