"""Tests for desktop alerts and preference persistence."""

import json
from unittest.mock import patch

import pytest

from domains.reminders import executor
from domains.reminders.config import CUSTOM_SOUND_MARKER, SILENT_MARKER
from domains.reminders.executor import DesktopAlerts, escape_applescript, resolve_sound_file
from domains.reminders.settings import ReminderSettings, SettingsStore


class TestSoundResolution:

    def test_system_sound(self, monkeypatch, tmp_path):
        monkeypatch.setattr(executor.config, "SYSTEM_SOUND_DIR", tmp_path)
        path = resolve_sound_file(ReminderSettings(selected_sound="Ping"))
        assert path == tmp_path / "Ping.aiff"

    def test_silent(self):
        assert resolve_sound_file(ReminderSettings(selected_sound=SILENT_MARKER)) is None

    def test_custom(self):
        prefs = ReminderSettings(selected_sound=CUSTOM_SOUND_MARKER, custom_sound_path="/a/b.mp3")
        assert str(resolve_sound_file(prefs)) == "/a/b.mp3"

    def test_custom_without_path(self):
        assert resolve_sound_file(ReminderSettings(selected_sound=CUSTOM_SOUND_MARKER)) is None


class TestPlaySound:

    def test_plays_with_first_player(self, tmp_path):
        sound = tmp_path / "ding.mp3"
        sound.write_bytes(b"ID3")
        prefs = ReminderSettings(selected_sound=CUSTOM_SOUND_MARKER, custom_sound_path=str(sound))

        with patch.object(executor, "find_sound_player", return_value=["paplay"]), \
                patch.object(executor.subprocess, "Popen") as popen:
            DesktopAlerts().play_sound(prefs)

        assert popen.call_args[0][0] == ["paplay", str(sound)]

    def test_missing_file_skipped(self, tmp_path):
        prefs = ReminderSettings(
            selected_sound=CUSTOM_SOUND_MARKER,
            custom_sound_path=str(tmp_path / "gone.mp3")
        )
        with patch.object(executor.subprocess, "Popen") as popen:
            DesktopAlerts().play_sound(prefs)
        popen.assert_not_called()

    def test_no_player_skipped(self, tmp_path):
        sound = tmp_path / "ding.mp3"
        sound.write_bytes(b"ID3")
        prefs = ReminderSettings(selected_sound=CUSTOM_SOUND_MARKER, custom_sound_path=str(sound))

        with patch.object(executor, "find_sound_player", return_value=None), \
                patch.object(executor.subprocess, "Popen") as popen:
            DesktopAlerts().play_sound(prefs)
        popen.assert_not_called()

    def test_player_error_ignored(self, tmp_path):
        sound = tmp_path / "ding.mp3"
        sound.write_bytes(b"ID3")
        prefs = ReminderSettings(selected_sound=CUSTOM_SOUND_MARKER, custom_sound_path=str(sound))

        with patch.object(executor, "find_sound_player", return_value=["paplay"]), \
                patch.object(executor.subprocess, "Popen", side_effect=OSError("boom")):
            DesktopAlerts().play_sound(prefs)


class TestNotify:

    def test_escape(self):
        assert escape_applescript('say "hi" \\ bye') == 'say \\"hi\\" \\\\ bye'

    def test_plyer_on_linux(self):
        with patch.object(executor.sys, "platform", "linux"), \
                patch.object(executor.notification, "notify") as notify:
            DesktopAlerts().notify("Reminder", "Buy milk", "Glass")

        kwargs = notify.call_args.kwargs
        assert kwargs["title"] == "Reminder"
        assert kwargs["message"] == "Buy milk"

    def test_osascript_on_macos(self):
        with patch.object(executor.sys, "platform", "darwin"), \
                patch.object(executor.subprocess, "Popen") as popen:
            DesktopAlerts().notify("Reminder", 'Say "hi"', "Glass")

        argv = popen.call_args[0][0]
        assert argv[:2] == ["/usr/bin/osascript", "-e"]
        assert argv[2] == 'display notification "Say \\"hi\\"" with title "Reminder" sound name "Glass"'

    def test_osascript_without_sound(self):
        with patch.object(executor.sys, "platform", "darwin"), \
                patch.object(executor.subprocess, "Popen") as popen:
            DesktopAlerts().notify("Reminder", "x", None)

        assert "sound name" not in popen.call_args[0][0][2]

    def test_failure_ignored(self):
        with patch.object(executor.sys, "platform", "linux"), \
                patch.object(executor.notification, "notify", side_effect=NotImplementedError):
            DesktopAlerts().notify("Reminder", "x")


class TestSettingsStore:

    def test_defaults_when_missing(self, settings_store):
        prefs = settings_store.read()
        assert prefs == ReminderSettings()

    def test_round_trip(self, settings_store):
        prefs = ReminderSettings(
            selected_sound=CUSTOM_SOUND_MARKER,
            custom_sound_path="/x/y.mp3",
            archive_on_delete=False,
            auto_mark_expired=True
        )
        settings_store.write(prefs)
        assert settings_store.read() == prefs

    def test_keys_on_disk(self, settings_store):
        settings_store.write(ReminderSettings())
        data = json.loads(settings_store.path.read_text())
        assert set(data) == {
            "reminder_sound",
            "reminder_custom_sound_path",
            "reminder_archive_on_delete",
            "reminder_auto_mark_expired",
        }

    def test_malformed_file_uses_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("nope")
        assert SettingsStore(path).read() == ReminderSettings()

    def test_undecodable_file_uses_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_bytes(b'{"reminder_sound": "\xff"}')
        assert SettingsStore(path).read() == ReminderSettings()
        assert path.with_name("settings.json.bak").exists()

    def test_wrong_types_use_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"reminder_archive_on_delete": "yes", "reminder_sound": 3}')
        prefs = SettingsStore(path).read()
        assert prefs.archive_on_delete is True
        assert prefs.selected_sound == "Glass"

    @pytest.mark.parametrize("sound,display", [
        ("Glass", "Glass"),
        (SILENT_MARKER, "Silent"),
        (CUSTOM_SOUND_MARKER, "Custom"),
    ])
    def test_display_name(self, sound, display):
        assert ReminderSettings(selected_sound=sound).sound_display_name == display


class TestChildProcesses:

    def test_finished_children_reaped(self, tmp_path):
        sound = tmp_path / "ding.mp3"
        sound.write_bytes(b"ID3")
        prefs = ReminderSettings(selected_sound=CUSTOM_SOUND_MARKER, custom_sound_path=str(sound))
        alerts = DesktopAlerts()

        with patch.object(executor, "find_sound_player", return_value=["paplay"]), \
                patch.object(executor.subprocess, "Popen") as popen:
            popen.return_value.poll.return_value = None
            alerts.play_sound(prefs)
            alerts.play_sound(prefs)
            assert alerts.reap() == 2

            popen.return_value.poll.return_value = 0
            assert alerts.reap() == 0

        assert popen.call_args.kwargs["start_new_session"] is True
