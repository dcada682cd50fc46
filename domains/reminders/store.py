"""JSON file persistence for reminders.

The whole collection lives in memory and is written out as one document
after every mutation:

    [
      {
        "archived": false,
        "fireDate": "2025-01-31T09:00:00Z",
        "fired": false,
        "id": "6F1C...",
        "note": "Buy milk"
      }
    ]

Writes go to a temp file in the same directory and are swapped in with
os.replace, so a crash mid-write leaves the previous document intact.
Write failures are logged, never raised: the in-memory collection stays
authoritative and the next successful write catches the file up.
"""

import json
import os
import tempfile
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from logger import logger
from .models import ReminderItem, new_reminder_id


class ReminderStore:
    """Ordered reminder collection backed by a JSON document."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._items: list[ReminderItem] = []

    # --- Loading / saving ---

    def load(self) -> int:
        """Load the document, replacing the in-memory collection.

        A missing file is an empty store. A malformed file is also an empty
        store; the bad file is moved aside so the next save can't clobber it.

        Returns:
            Number of reminders loaded
        """
        self._items = []

        if not self.path.exists():
            logger.info(f"No reminder file at {self.path}, starting empty")
            return 0

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Corrupted reminder file {self.path}: {e}")
            self._backup_corrupt()
            return 0
        except OSError as e:
            logger.error(f"Failed to read reminder file {self.path}: {e}")
            return 0

        if not isinstance(data, list):
            logger.error(f"Reminder file {self.path} is not a JSON array, ignoring")
            self._backup_corrupt()
            return 0

        items = []
        for record in data:
            try:
                items.append(ReminderItem.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping invalid reminder record: {e}")

        self._items = items
        self._sort()
        logger.info(f"Loaded {len(self._items)} reminders from {self.path}")
        return len(self._items)

    def save(self) -> bool:
        """Write the collection atomically.

        Returns:
            True if the document was written
        """
        payload = json.dumps(
            [item.to_dict() for item in self._items],
            indent=2,
            sort_keys=True,
            ensure_ascii=False
        )

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
            logger.debug(f"Saved {len(self._items)} reminders")
            return True
        except OSError as e:
            logger.error(f"Failed to save reminders to {self.path}: {e}")
            return False
        finally:
            if tmp_name:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def _backup_corrupt(self):
        backup_path = self.path.with_name(self.path.name + ".bak")
        try:
            self.path.replace(backup_path)
            logger.warning(f"Moved corrupted reminder file to {backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up corrupted reminder file: {e}")

    def _sort(self):
        self._items.sort(key=lambda item: item.fire_date)

    # --- Mutations ---

    def add(self, note: str, fire_date: datetime) -> ReminderItem:
        """Create, insert and persist a new pending reminder."""
        item = ReminderItem(id=new_reminder_id(), note=note, fire_date=fire_date)
        self._items.append(item)
        self._sort()
        self.save()
        logger.info(f"Added reminder {item.id}: '{note}' at {fire_date}")
        return replace(item)

    def update(self, reminder_id: str, note: str, fire_date: datetime) -> Optional[ReminderItem]:
        """Replace note and fire date; the reminder becomes pending again.

        Returns:
            The updated reminder, or None if the id is unknown
        """
        item = self._find(reminder_id)
        if item is None:
            logger.warning(f"Reminder {reminder_id} not found for update")
            return None

        item.note = note
        item.fire_date = fire_date
        item.fired = False
        self._sort()
        self.save()
        logger.info(f"Updated reminder {reminder_id}: '{note}' at {fire_date}")
        return replace(item)

    def mark_fired(self, reminder_id: str) -> bool:
        """Mark reminder as fired.

        Returns:
            True only when this call flipped fired from False to True
        """
        item = self._find(reminder_id)
        if item is None or item.fired:
            return False

        item.fired = True
        self.save()
        logger.debug(f"Marked reminder {reminder_id} as fired")
        return True

    def remove(self, reminder_id: str, archive_instead: bool) -> bool:
        """Archive (keep but hide) or permanently delete a reminder.

        Returns:
            True if the reminder existed
        """
        item = self._find(reminder_id)
        if item is None:
            logger.warning(f"Reminder {reminder_id} not found for removal")
            return False

        if archive_instead:
            item.archived = True
            logger.info(f"Archived reminder {reminder_id}")
        else:
            self._items = [r for r in self._items if r.id != reminder_id]
            logger.info(f"Deleted reminder {reminder_id}")
        self.save()
        return True

    # --- Queries ---

    def get(self, reminder_id: str) -> Optional[ReminderItem]:
        item = self._find(reminder_id)
        return replace(item) if item else None

    def _find(self, reminder_id: str) -> Optional[ReminderItem]:
        for item in self._items:
            if item.id == reminder_id:
                return item
        return None

    def all(self) -> list[ReminderItem]:
        """Full backing collection in storage order (fire date ascending)."""
        return [replace(r) for r in self._items]

    def pending_view(self) -> list[ReminderItem]:
        """Not fired, not archived - soonest first."""
        return sorted(
            (replace(r) for r in self._items if not r.fired and not r.archived),
            key=lambda r: r.fire_date
        )

    def fired_view(self) -> list[ReminderItem]:
        """Fired, not archived - most recent first."""
        return sorted(
            (replace(r) for r in self._items if r.fired and not r.archived),
            key=lambda r: r.fire_date,
            reverse=True
        )

    def due(self, now: datetime) -> list[ReminderItem]:
        """Pending reminders whose fire date is at or before now."""
        return [replace(r) for r in self._items if r.is_due(now)]
