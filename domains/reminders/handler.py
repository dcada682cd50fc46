"""Text command handler - the presentation surface over ReminderManager."""

from datetime import datetime
from typing import Optional

from .config import PARSE_ERROR_MESSAGE, SYSTEM_SOUNDS
from .manager import ReminderManager
from .models import ReminderItem

HELP_TEXT = """Commands:
  <text with a time>        schedule, e.g. "Buy milk tomorrow at 9am", "Call mom in 2h"
  list                      upcoming reminders
  fired                     reminders that already fired
  cancel <id>               delete (or archive) a reminder
  edit <id> <text>          change a reminder's text and time
  sound                     show the current sound
  sound silent|custom <path>|<name>
  preview                   play the current sound
  archive on|off            keep deleted reminders in the file
  auto-expire on|off        silently mark missed reminders as fired
  help"""

_ON_OFF = {"on": True, "off": False, "yes": True, "no": False, "true": True, "false": False}

NOT_FOUND_MESSAGE = "Reminder not found. Use `list` to see your reminders."


def handle_command(content: str, manager: ReminderManager) -> str:
    """Handle one line of user input.

    Args:
        content: The raw line
        manager: Reminder manager

    Returns:
        Response text to show the user
    """
    text = content.strip()
    if not text:
        return HELP_TEXT

    command, _, rest = text.partition(" ")
    command = command.lower()
    rest = rest.strip()

    if text.lower() in ("help", "?"):
        return HELP_TEXT

    if text.lower() in ("list", "reminders", "list reminders", "my reminders"):
        return _list_reminders(manager.pending_reminders, "Upcoming", "No upcoming reminders.")

    if text.lower() in ("fired", "history"):
        return _list_reminders(manager.fired_reminders, "Fired", "No fired reminders.")

    if command in ("cancel", "delete", "remove") and rest:
        response = _cancel_reminder(rest, manager)
        if response:
            return response
        return _schedule(text, manager) or NOT_FOUND_MESSAGE

    if command == "edit" and rest:
        response = _edit_reminder(rest, manager)
        if response:
            return response
        return _schedule(text, manager) or NOT_FOUND_MESSAGE

    if command == "sound":
        response = _sound_command(rest, manager)
        if response:
            return response
        return _schedule(text, manager) or _unknown_sound_message()

    if command == "preview" and not rest:
        manager.preview_sound()
        return f"Playing {manager.settings.sound_display_name}"

    if command == "archive" and rest.lower() in _ON_OFF:
        manager.archive_on_delete = _ON_OFF[rest.lower()]
        return f"Archive deleted reminders: {'on' if manager.archive_on_delete else 'off'}"

    if command == "auto-expire" and rest.lower() in _ON_OFF:
        manager.auto_mark_expired = _ON_OFF[rest.lower()]
        return f"Auto-mark expired reminders as fired: {'on' if manager.auto_mark_expired else 'off'}"

    return _schedule(text, manager) or PARSE_ERROR_MESSAGE


def _schedule(text: str, manager: ReminderManager) -> Optional[str]:
    """Schedule free text; None if no time could be parsed."""
    item = manager.schedule_from_text(text)
    if item is None:
        return None
    return f"Reminder set for {_format_date(item.fire_date)}\n> {item.note}"


def _format_date(value: datetime) -> str:
    return value.strftime("%a %d %b %Y %H:%M")


def _short_id(item: ReminderItem) -> str:
    return item.id[:8]


def _list_reminders(items: list[ReminderItem], heading: str, empty: str) -> str:
    if not items:
        return empty

    lines = [f"{heading}:"]
    for item in items:
        lines.append(f"- [{_short_id(item)}] {_format_date(item.fire_date)} - {item.note}")
    return "\n".join(lines)


def _cancel_reminder(id_prefix: str, manager: ReminderManager) -> Optional[str]:
    item = manager.find_reminder(id_prefix)
    if item is None:
        return None

    manager.remove_reminder(item)
    verb = "Archived" if manager.archive_on_delete else "Deleted"
    return f"{verb} reminder: {item.note}"


def _edit_reminder(rest: str, manager: ReminderManager) -> Optional[str]:
    id_prefix, _, new_text = rest.partition(" ")
    item = manager.find_reminder(id_prefix)
    if item is None:
        return None

    parsed = manager.preview(new_text)
    if parsed is None:
        return PARSE_ERROR_MESSAGE

    note = parsed.note or item.note
    updated = manager.update_reminder(item, note, parsed.date)
    if updated is None:
        return NOT_FOUND_MESSAGE
    return f"Reminder moved to {_format_date(updated.fire_date)}\n> {updated.note}"


def _sound_command(rest: str, manager: ReminderManager) -> Optional[str]:
    """Apply a sound command; None if rest is not a sound choice."""
    if not rest:
        return f"Sound: {manager.settings.sound_display_name}"

    choice, _, argument = rest.partition(" ")

    if rest.lower() == "silent":
        manager.select_silent()
        return "Sound: Silent"

    if choice.lower() == "custom":
        if manager.select_custom_sound(argument.strip() or None):
            return f"Sound: {manager.settings.sound_display_name}"
        return "No sound file selected."

    if manager.select_system_sound(rest):
        return f"Sound: {manager.settings.sound_display_name}"

    return None


def _unknown_sound_message() -> str:
    return f"Unknown sound. Choose one of: {', '.join(SYSTEM_SOUNDS)}, silent, custom <path>"
