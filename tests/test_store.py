"""Tests for PreferencesStore: defaults, write-through, fallback, CRUD."""

import json

import pytest

from menutimer.database.db import configure_engine, get_session, init_db
from menutimer.database.models import Preference
from menutimer.store import (
    PreferencesStore,
    ALERT_SETTINGS_KEY,
    SAVED_TIMERS_KEY,
    QUICK_TIMER_MINUTES_KEY,
    DEFAULT_QUICK_TIMER_MINUTES,
)
from menutimer.timer.models import AlertSettings, SavedTimer, TimerStage

from helpers import SignalCollector


def write_raw(key: str, text: str) -> None:
    with get_session() as db:
        db.merge(Preference(key=key, value=text))


def read_raw(key: str):
    with get_session() as db:
        row = db.get(Preference, key)
        return None if row is None else json.loads(row.value)


# ═══════════════════════════════════════════════════════════════════════════
#  DEFAULTS
# ═══════════════════════════════════════════════════════════════════════════


class TestDefaults:

    def test_alert_settings(self, store):
        assert store.alert_settings == AlertSettings()

    def test_saved_timers_seeded_with_pomodoro(self, store):
        timers = store.saved_timers
        assert [t.name for t in timers] == ["Pomodoro"]
        assert timers[0].repeat_count == 4

    def test_quick_minutes(self, store):
        assert store.quick_timer_minutes == list(DEFAULT_QUICK_TIMER_MINUTES)

    def test_loading_does_not_write(self, store):
        assert read_raw(SAVED_TIMERS_KEY) is None


# ═══════════════════════════════════════════════════════════════════════════
#  WRITE-THROUGH
# ═══════════════════════════════════════════════════════════════════════════


class TestPersistence:

    def test_alert_settings_written_immediately(self, store):
        store.alert_settings = AlertSettings(play_sound=False, sound_name="Hero")
        assert read_raw(ALERT_SETTINGS_KEY) == {
            "playSound": False, "showNotification": True, "soundName": "Hero",
        }

    def test_alert_settings_survive_reload(self, store, qapp):
        custom = AlertSettings(show_notification=False, sound_name="Ping")
        store.alert_settings = custom
        assert PreferencesStore().alert_settings == custom

    def test_saved_timers_survive_reload(self, store, qapp):
        tea = SavedTimer(name="Tea", stages=[TimerStage(180, "Steep")])
        store.add_saved_timer(tea)
        reloaded = PreferencesStore().saved_timers
        assert [t.name for t in reloaded] == ["Pomodoro", "Tea"]
        assert reloaded[1] == tea

    def test_quick_minutes_stored_as_plain_list(self, store):
        store.add_quick_minutes(20)
        assert read_raw(QUICK_TIMER_MINUTES_KEY) == [5, 10, 15, 20, 25, 30, 45, 60]

    def test_signals(self, store):
        alerts, timers, minutes = SignalCollector(), SignalCollector(), SignalCollector()
        store.alert_settings_changed.connect(alerts)
        store.saved_timers_changed.connect(timers)
        store.quick_timer_minutes_changed.connect(minutes)

        store.alert_settings = AlertSettings(play_sound=False)
        store.add_pomodoro()  # already present: no change
        store.add_quick_minutes(7)

        assert alerts.last == AlertSettings(play_sound=False)
        assert len(timers) == 0
        assert 7 in minutes.last


# ═══════════════════════════════════════════════════════════════════════════
#  DECODE FALLBACK
# ═══════════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestDecodeFallback:

    def test_invalid_json(self):
        write_raw(SAVED_TIMERS_KEY, "NOT JSON")
        store = PreferencesStore()
        assert [t.name for t in store.saved_timers] == ["Pomodoro"]

    def test_missing_alert_fields(self):
        write_raw(ALERT_SETTINGS_KEY, json.dumps({"playSound": False}))
        assert PreferencesStore().alert_settings == AlertSettings()

    def test_non_integer_minutes(self):
        write_raw(QUICK_TIMER_MINUTES_KEY, json.dumps([5, "ten"]))
        assert PreferencesStore().quick_timer_minutes == list(DEFAULT_QUICK_TIMER_MINUTES)

    def test_timer_without_stages(self):
        write_raw(SAVED_TIMERS_KEY, json.dumps([{"name": "Empty", "stages": []}]))
        assert [t.name for t in PreferencesStore().saved_timers] == ["Pomodoro"]

    def test_one_bad_key_leaves_others(self):
        write_raw(ALERT_SETTINGS_KEY, "{broken")
        write_raw(QUICK_TIMER_MINUTES_KEY, json.dumps([3, 6]))
        store = PreferencesStore()
        assert store.alert_settings == AlertSettings()
        assert store.quick_timer_minutes == [3, 6]

    def test_empty_timer_list_is_valid(self):
        write_raw(SAVED_TIMERS_KEY, "[]")
        assert PreferencesStore().saved_timers == []

    def test_stored_minutes_normalised(self):
        write_raw(QUICK_TIMER_MINUTES_KEY, json.dumps([15, 0, 5, 5, -2]))
        store = PreferencesStore()
        assert store.quick_timer_minutes == [5, 15]
        store.add_quick_minutes(10)
        assert store.quick_timer_minutes == [5, 10, 15]
        assert read_raw(QUICK_TIMER_MINUTES_KEY) == [5, 10, 15]

    def test_stored_minutes_all_non_positive(self):
        write_raw(QUICK_TIMER_MINUTES_KEY, json.dumps([0, -5]))
        assert PreferencesStore().quick_timer_minutes == []


# ═══════════════════════════════════════════════════════════════════════════
#  SAVED TIMERS
# ═══════════════════════════════════════════════════════════════════════════


class TestSavedTimers:

    def test_update_by_id(self, store):
        pomodoro = store.saved_timers[0]
        store.update_saved_timer(pomodoro.with_changes(name="Focus"))
        assert [t.name for t in store.saved_timers] == ["Focus"]
        assert store.saved_timers[0].id == pomodoro.id

    def test_update_unknown_id_is_noop(self, store):
        store.update_saved_timer(SavedTimer(name="Ghost", stages=[TimerStage(60)]))
        assert [t.name for t in store.saved_timers] == ["Pomodoro"]

    def test_delete(self, store):
        store.delete_saved_timer(store.saved_timers[0].id)
        assert store.saved_timers == []
        assert read_raw(SAVED_TIMERS_KEY) == []

    def test_get_saved_timer(self, store):
        pomodoro = store.saved_timers[0]
        assert store.get_saved_timer(pomodoro.id) == pomodoro
        assert store.get_saved_timer("missing") is None

    def test_duplicate_names_allowed(self, store):
        store.add_saved_timer(SavedTimer(name="Pomodoro", stages=[TimerStage(60)]))
        assert len(store.saved_timers) == 2

    def test_move(self, store):
        store.add_saved_timer(SavedTimer(name="A", stages=[TimerStage(60)]))
        store.add_saved_timer(SavedTimer(name="B", stages=[TimerStage(60)]))
        store.move_saved_timer(2, 0)
        assert [t.name for t in store.saved_timers] == ["B", "Pomodoro", "A"]

    def test_add_pomodoro_only_when_absent(self, store):
        assert store.has_pomodoro() is True
        assert store.add_pomodoro() is False
        store.delete_saved_timer(store.saved_timers[0].id)
        assert store.has_pomodoro() is False
        assert store.add_pomodoro() is True
        assert [t.name for t in store.saved_timers] == ["Pomodoro"]

    def test_returned_list_is_a_copy(self, store):
        store.saved_timers.clear()
        assert len(store.saved_timers) == 1


# ═══════════════════════════════════════════════════════════════════════════
#  QUICK PRESETS
# ═══════════════════════════════════════════════════════════════════════════


class TestQuickPresets:

    def test_add_new_value(self, store):
        store.quick_timer_minutes = [5, 10, 15]
        assert store.add_quick_minutes(25) is True
        assert store.quick_timer_minutes == [5, 10, 15, 25]

    def test_add_duplicate_is_noop(self, store):
        store.quick_timer_minutes = [5, 10, 15]
        assert store.add_quick_minutes(10) is False
        assert store.quick_timer_minutes == [5, 10, 15]

    def test_add_keeps_ascending_order(self, store):
        store.quick_timer_minutes = [5, 10, 15]
        store.add_quick_minutes(7)
        assert store.quick_timer_minutes == [5, 7, 10, 15]

    @pytest.mark.parametrize("bad", [0, -3])
    def test_add_non_positive_rejected(self, store, bad):
        with pytest.raises(ValueError):
            store.add_quick_minutes(bad)

    def test_remove(self, store):
        store.quick_timer_minutes = [5, 10, 15]
        assert store.remove_quick_minutes(10) is True
        assert store.remove_quick_minutes(99) is False
        assert store.quick_timer_minutes == [5, 15]

    def test_assignment_normalised(self, store):
        store.quick_timer_minutes = [30, 5, 30, 0]
        assert store.quick_timer_minutes == [5, 30]
        assert read_raw(QUICK_TIMER_MINUTES_KEY) == [5, 30]


# ═══════════════════════════════════════════════════════════════════════════
#  SESSIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestSessions:

    def test_error_rolls_back(self):
        with pytest.raises(RuntimeError):
            with get_session() as db:
                db.merge(Preference(key="scratch", value="1"))
                raise RuntimeError("boom")
        assert read_raw("scratch") is None

    def test_reconfigure_starts_empty(self):
        write_raw("scratch", "1")
        configure_engine("sqlite:///:memory:")
        init_db()
        assert read_raw("scratch") is None
