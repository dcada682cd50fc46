"""Tests for the text command handler."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from domains.reminders.config import PARSE_ERROR_MESSAGE
from domains.reminders.handler import HELP_TEXT, handle_command


@pytest.fixture
def manager(make_manager):
    m = make_manager()
    m.start()
    return m


def test_schedule_free_text(manager, clock):
    response = handle_command("Call mom in 2h", manager)

    assert response.startswith("Reminder set for")
    assert "> Call mom" in response
    assert manager.pending_reminders[0].fire_date == clock() + timedelta(hours=2)


def test_parse_error(manager):
    assert handle_command("2 hours", manager) == PARSE_ERROR_MESSAGE
    assert manager.pending_reminders == []


def test_help(manager):
    assert handle_command("help", manager) == HELP_TEXT
    assert handle_command("", manager) == HELP_TEXT


def test_list(manager):
    assert handle_command("list", manager) == "No upcoming reminders."

    handle_command("Tea in 5m", manager)
    item = manager.pending_reminders[0]
    response = handle_command("list", manager)

    assert response.startswith("Upcoming:")
    assert f"[{item.id[:8]}]" in response
    assert "Tea" in response


def test_fired_list(manager, clock):
    assert handle_command("fired", manager) == "No fired reminders."

    manager.schedule_reminder("Old", clock() - timedelta(minutes=1))

    assert "Old" in handle_command("fired", manager)


def test_cancel(manager):
    handle_command("Tea in 5m", manager)
    item = manager.pending_reminders[0]

    response = handle_command(f"cancel {item.id[:8].lower()}", manager)

    assert response == "Archived reminder: Tea"
    assert manager.pending_reminders == []


def test_cancel_hard_delete(manager):
    handle_command("archive off", manager)
    handle_command("Tea in 5m", manager)
    item = manager.pending_reminders[0]

    assert handle_command(f"delete {item.id[:8]}", manager) == "Deleted reminder: Tea"


def test_cancel_unknown(manager):
    assert handle_command("cancel ZZZZ", manager).startswith("Reminder not found")


def test_edit(manager, clock):
    handle_command("Tea in 5m", manager)
    item = manager.pending_reminders[0]

    response = handle_command(f"edit {item.id[:8]} Coffee in 1h", manager)

    assert "> Coffee" in response
    updated = manager.pending_reminders[0]
    assert updated.id == item.id
    assert updated.note == "Coffee"
    assert updated.fire_date == clock() + timedelta(hours=1)


def test_edit_keeps_note_when_only_time_given(manager):
    handle_command("Tea in 5m", manager)
    item = manager.pending_reminders[0]

    handle_command(f"edit {item.id[:8]} in 20 minutes", manager)

    assert manager.pending_reminders[0].note == "Tea"


def test_edit_unparseable(manager):
    handle_command("Tea in 5m", manager)
    item = manager.pending_reminders[0]

    with patch("domains.reminders.parser.search_dates", return_value=None):
        response = handle_command(f"edit {item.id[:8]} whenever", manager)

    assert response == PARSE_ERROR_MESSAGE
    assert manager.pending_reminders[0].note == "Tea"


def test_sound_commands(manager, tmp_path):
    assert handle_command("sound", manager) == "Sound: Glass"
    assert handle_command("sound silent", manager) == "Sound: Silent"
    assert handle_command("sound hero", manager) == "Sound: Hero"
    assert handle_command("sound klaxon", manager).startswith("Unknown sound")

    chime = tmp_path / "chime.mp3"
    chime.write_bytes(b"ID3")
    assert handle_command(f"sound custom {chime}", manager) == "Sound: chime.mp3"
    assert handle_command("sound custom", manager) == "No sound file selected."


def test_preview(manager, alerts):
    assert handle_command("preview", manager) == "Playing Glass"
    assert alerts.sounds == ["Glass"]


def test_toggles(manager):
    assert handle_command("archive off", manager) == "Archive deleted reminders: off"
    assert manager.archive_on_delete is False
    assert handle_command("auto-expire on", manager) == "Auto-mark expired reminders as fired: on"
    assert manager.auto_mark_expired is True


@pytest.mark.parametrize("text,note", [
    ("Help mom with taxes in 2h", "Help mom with taxes"),
    ("Sound check in 2h", "Sound check"),
    ("sound silent in 2h", "sound silent"),
    ("edit essay in 2h", "edit essay"),
    ("cancel dentist in 1h", "cancel dentist"),
])
def test_command_words_in_reminder_text(manager, text, note):
    response = handle_command(text, manager)

    assert response.startswith("Reminder set for")
    assert [r.note for r in manager.pending_reminders] == [note]
    assert manager.settings.selected_sound == "Glass"


def test_unknown_sound_still_reported(manager):
    response = handle_command("sound klaxon", manager)

    assert response.startswith("Unknown sound")
    assert manager.pending_reminders == []
