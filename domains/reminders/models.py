"""Reminder record and its JSON representation."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from dateutil.parser import isoparse


@dataclass
class ReminderItem:
    """A single reminder.

    fire_date is a naive datetime in local wall-clock time. On disk it is
    written as UTC ISO-8601 ("2025-01-31T09:00:00Z").
    """
    id: str
    note: str
    fire_date: datetime
    fired: bool = False
    archived: bool = False

    @property
    def is_pending(self) -> bool:
        return not self.fired and not self.archived

    def is_due(self, now: datetime) -> bool:
        """Pending and fire_date at or before now."""
        return self.is_pending and self.fire_date <= now

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict (document field names)."""
        return {
            "id": self.id,
            "note": self.note,
            "fireDate": format_timestamp(self.fire_date),
            "fired": self.fired,
            "archived": self.archived,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReminderItem":
        """Create from a document record. Missing flags default to False."""
        reminder_id = data["id"]
        if not isinstance(reminder_id, str) or not reminder_id:
            raise ValueError(f"Invalid reminder id: {reminder_id!r}")
        return cls(
            id=reminder_id,
            note=str(data.get("note", "")),
            fire_date=parse_timestamp(data["fireDate"]),
            fired=bool(data.get("fired", False)),
            archived=bool(data.get("archived", False)),
        )


def new_reminder_id() -> str:
    """Fresh opaque id, never reused."""
    return str(uuid.uuid4()).upper()


def format_timestamp(value: datetime) -> str:
    """Local naive datetime -> UTC ISO-8601 with a Z suffix."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """ISO-8601 string -> local naive datetime.

    Offset-less timestamps are taken as local time already.
    """
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone().replace(tzinfo=None)
