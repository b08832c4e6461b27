"""Tests for TimerCoordinator: single active timer, alert text, recency."""

import pytest

from menutimer.timer.coordinator import (
    TimerCoordinator, MAX_RECENT_TIMERS, stage_alert_text,
)
from menutimer.timer.engine import ActiveTimer, StageComplete
from menutimer.timer.models import AlertSettings, SavedTimer, TimerStage

from helpers import SignalCollector


DEFAULTS = AlertSettings()


def template(name, *durations, repeating=False, repeat_count=None, alert=None):
    return SavedTimer(
        name=name,
        stages=[TimerStage(d) for d in durations] or [TimerStage(60)],
        is_repeating=repeating,
        repeat_count=repeat_count,
        alert_settings=alert,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  STARTING & STOPPING
# ═══════════════════════════════════════════════════════════════════════════


class TestStarting:

    def test_idle_initially(self, coordinator):
        assert coordinator.active_timer is None
        assert coordinator.recent_timers == []

    def test_start_one_off_minutes(self, coordinator):
        timer = coordinator.start_one_off_minutes(5, DEFAULTS)
        assert coordinator.active_timer is timer
        assert timer.time_remaining == 300
        assert timer.is_running is True

    def test_start_one_off_duration(self, coordinator):
        timer = coordinator.start_one_off(90.5, DEFAULTS)
        assert timer.stages[0].duration == 90.5

    @pytest.mark.parametrize("duration", [0, -5])
    def test_non_positive_duration_rejected(self, coordinator, duration):
        with pytest.raises(ValueError):
            coordinator.start_one_off(duration, DEFAULTS)
        assert coordinator.active_timer is None

    def test_new_start_replaces_old(self, coordinator):
        first = coordinator.start_one_off_minutes(5, DEFAULTS)
        second = coordinator.start_saved_timer(SavedTimer.pomodoro(), DEFAULTS)
        assert coordinator.active_timer is second
        assert first.is_running is False
        assert first.is_finished is True

    def test_replaced_timer_events_are_ignored(self, coordinator, dispatcher):
        first = coordinator.start_one_off_minutes(5, DEFAULTS)
        coordinator.start_one_off_minutes(10, DEFAULTS)
        first.advance()  # finished already, emits nothing
        assert dispatcher.alerts == []

    def test_effective_alert_settings_default(self, coordinator):
        timer = coordinator.start_saved_timer(template("Plain", 60), DEFAULTS)
        assert timer.alert_settings == DEFAULTS

    def test_effective_alert_settings_override(self, coordinator):
        custom = AlertSettings(play_sound=False, sound_name="Tink")
        timer = coordinator.start_saved_timer(template("Custom", 60, alert=custom), DEFAULTS)
        assert timer.alert_settings == custom

    def test_active_timer_changed_signal(self, coordinator):
        c = SignalCollector()
        coordinator.active_timer_changed.connect(c)
        timer = coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.stop()
        assert c.items == [timer, None]

    def test_stop(self, coordinator):
        timer = coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.stop()
        assert coordinator.active_timer is None
        assert timer.is_running is False


class TestControls:

    def test_controls_noop_when_idle(self, coordinator):
        coordinator.pause()
        coordinator.resume()
        coordinator.toggle_pause()
        coordinator.skip_stage()
        coordinator.stop()
        assert coordinator.active_timer is None

    def test_pause_and_resume(self, coordinator):
        timer = coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.pause()
        assert timer.is_paused is True
        coordinator.resume()
        assert timer.is_paused is False
        assert timer.is_running is True

    def test_toggle_pause(self, coordinator):
        timer = coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.toggle_pause()
        assert timer.is_paused is True
        coordinator.toggle_pause()
        assert timer.is_paused is False

    def test_skip_stage(self, coordinator):
        timer = coordinator.start_saved_timer(SavedTimer.pomodoro(), DEFAULTS)
        coordinator.skip_stage()
        assert timer.current_stage_index == 1


# ═══════════════════════════════════════════════════════════════════════════
#  ALERT TEXT
# ═══════════════════════════════════════════════════════════════════════════


class TestAlerts:

    def test_stage_complete_multi_stage(self, coordinator, dispatcher):
        coordinator.start_saved_timer(SavedTimer.pomodoro(), DEFAULTS)
        coordinator.skip_stage()
        title, body, settings = dispatcher.last
        assert title == "Pomodoro: Work Complete"
        assert body == "Up next: Break (5m)"
        assert settings == DEFAULTS

    def test_cycle_wrap_names_first_stage(self, coordinator, dispatcher):
        coordinator.start_saved_timer(SavedTimer.pomodoro(), DEFAULTS)
        coordinator.skip_stage()
        coordinator.skip_stage()
        title, body, _ = dispatcher.last
        assert title == "Pomodoro: Break Complete"
        assert body == "Up next: Work (25m)"

    def test_single_stage_repeating_title(self, coordinator, dispatcher):
        coordinator.start_saved_timer(
            template("Stretch", 90, repeating=True, repeat_count=2), DEFAULTS,
        )
        coordinator.skip_stage()
        title, body, _ = dispatcher.last
        assert title == "Stage Complete"
        assert body == "Up next: Next stage (1m 30s)"

    def test_wrap_without_next_stage(self, qapp):
        timer = ActiveTimer.from_saved_timer(
            template("Loop", 60, 30, repeating=True), DEFAULTS,
        )
        event = StageComplete(timer.stages[1], None, is_last_stage=True)
        assert stage_alert_text(timer, event) == (
            "Loop: Stage Complete", "Starting next cycle...",
        )

    def test_no_next_stage_not_repeating(self, qapp):
        timer = ActiveTimer.one_off(60, DEFAULTS)
        event = StageComplete(timer.stages[0], None, is_last_stage=False)
        assert stage_alert_text(timer, event) == (
            "Stage Complete", "Timer finished",
        )

    def test_timer_complete_alert(self, coordinator, dispatcher):
        coordinator.start_one_off_minutes(5, DEFAULTS)
        coordinator.skip_stage()
        assert dispatcher.alerts == [
            ("Timer Complete", "All stages finished", DEFAULTS),
        ]

    def test_timer_complete_uses_template_name(self, coordinator, dispatcher):
        coordinator.start_saved_timer(template("Tea", 180), DEFAULTS)
        coordinator.skip_stage()
        assert dispatcher.last[:2] == ("Tea Complete", "All stages finished")

    def test_full_pomodoro_alert_sequence(self, coordinator, dispatcher):
        coordinator.start_saved_timer(SavedTimer.pomodoro(), DEFAULTS)
        for _ in range(8):
            coordinator.skip_stage()
        assert len(dispatcher.alerts) == 8
        assert dispatcher.last[0] == "Pomodoro Complete"
        assert all("Complete" in a[0] for a in dispatcher.alerts)

    def test_alert_sent_signal(self, coordinator):
        c = SignalCollector()
        coordinator.alert_sent.connect(c)
        coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.skip_stage()
        assert c.last == ("Timer Complete", "All stages finished")


# ═══════════════════════════════════════════════════════════════════════════
#  TEARDOWN AFTER COMPLETION
# ═══════════════════════════════════════════════════════════════════════════


class TestCompletionTeardown:

    def test_released_after_event_loop_turn(self, qapp, coordinator, dispatcher):
        timer = coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.skip_stage()
        # Alert first, teardown deferred
        assert len(dispatcher.alerts) == 1
        assert coordinator.active_timer is timer
        qapp.processEvents()
        assert coordinator.active_timer is None

    def test_newer_timer_survives_deferred_release(self, qapp, coordinator):
        coordinator.start_one_off_minutes(1, DEFAULTS)
        coordinator.skip_stage()
        newer = coordinator.start_one_off_minutes(2, DEFAULTS)
        qapp.processEvents()
        assert coordinator.active_timer is newer


# ═══════════════════════════════════════════════════════════════════════════
#  RECENT TIMERS
# ═══════════════════════════════════════════════════════════════════════════


class TestRecentTimers:

    def test_one_off_not_recorded(self, coordinator):
        coordinator.start_one_off_minutes(5, DEFAULTS)
        assert coordinator.recent_timers == []

    def test_most_recent_first(self, coordinator):
        a, b = template("A", 60), template("B", 60)
        coordinator.start_saved_timer(a, DEFAULTS)
        coordinator.start_saved_timer(b, DEFAULTS)
        assert [t.name for t in coordinator.recent_timers] == ["B", "A"]

    def test_capacity(self, coordinator):
        timers = [template(f"T{i}", 60) for i in range(7)]
        for t in timers:
            coordinator.start_saved_timer(t, DEFAULTS)
        recent = coordinator.recent_timers
        assert len(recent) == MAX_RECENT_TIMERS
        assert [t.name for t in recent] == ["T6", "T5", "T4", "T3", "T2"]

    def test_restart_moves_to_front_without_duplicate(self, coordinator):
        a, b, c = template("A", 60), template("B", 60), template("C", 60)
        for t in (a, b, c):
            coordinator.start_saved_timer(t, DEFAULTS)
        coordinator.start_saved_timer(a, DEFAULTS)
        assert [t.name for t in coordinator.recent_timers] == ["A", "C", "B"]

    def test_identity_is_id_not_name(self, coordinator):
        coordinator.start_saved_timer(template("Same", 60), DEFAULTS)
        coordinator.start_saved_timer(template("Same", 60), DEFAULTS)
        assert len(coordinator.recent_timers) == 2

    def test_custom_capacity(self, qapp, dispatcher):
        coord = TimerCoordinator(dispatcher, max_recent=2)
        for i in range(4):
            coord.start_saved_timer(template(f"T{i}", 60), DEFAULTS)
        assert len(coord.recent_timers) == 2
        coord.stop()

    def test_forget_recent(self, coordinator):
        a = template("A", 60)
        coordinator.start_saved_timer(a, DEFAULTS)
        coordinator.forget_recent(a.id)
        assert coordinator.recent_timers == []

    def test_refresh_recent_keeps_position(self, coordinator):
        a, b = template("A", 60), template("B", 60)
        coordinator.start_saved_timer(a, DEFAULTS)
        coordinator.start_saved_timer(b, DEFAULTS)
        coordinator.refresh_recent(a.with_changes(name="A2"))
        assert [t.name for t in coordinator.recent_timers] == ["B", "A2"]

    def test_recent_changed_signal(self, coordinator):
        c = SignalCollector()
        coordinator.recent_timers_changed.connect(c)
        coordinator.start_saved_timer(template("A", 60), DEFAULTS)
        assert [t.name for t in c.last] == ["A"]
