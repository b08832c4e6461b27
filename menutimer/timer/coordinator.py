"""Owns the one live ``ActiveTimer`` and turns its events into alerts.

Starting any timer first stops and discards the current one, so two
timers never tick at once.  There is no queue.

The coordinator also keeps a short most-recently-used list of started
templates for the menu.
"""

from __future__ import annotations

import logging
from typing import Protocol

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .engine import ActiveTimer, StageComplete, TimerComplete, TICK_INTERVAL_MS
from .models import AlertSettings, SavedTimer


logger = logging.getLogger(__name__)

MAX_RECENT_TIMERS = 5


class AlertSink(Protocol):
    def emit(self, title: str, body: str, settings: AlertSettings) -> None: ...


# ── alert text ────────────────────────────────────────────────────────────


def stage_alert_text(timer: ActiveTimer, event: StageComplete) -> tuple[str, str]:
    """Title and body for a finished stage."""
    name = timer.display_name
    completed_label = event.completed_stage.label or "Stage"

    if event.next_stage is not None:
        next_label = event.next_stage.label or "Next stage"
        body = f"Up next: {next_label} ({event.next_stage.formatted_duration})"
    elif event.is_last_stage and timer.is_repeating:
        body = "Starting next cycle..."
    else:
        body = f"{name} finished"

    if timer.is_multi_stage:
        title = f"{name}: {completed_label} Complete"
    else:
        title = f"{completed_label} Complete"
    return title, body


def timer_alert_text(timer: ActiveTimer) -> tuple[str, str]:
    return f"{timer.display_name} Complete", "All stages finished"


# ── coordinator ───────────────────────────────────────────────────────────


class TimerCoordinator(QObject):
    """Starts, controls, and tears down the active timer.

    Signals
    -------
    active_timer_changed(timer: ActiveTimer | None)
    recent_timers_changed(timers: list[SavedTimer])
    alert_sent(title: str, body: str)
    """

    active_timer_changed = pyqtSignal(object)
    recent_timers_changed = pyqtSignal(object)
    alert_sent = pyqtSignal(str, str)

    def __init__(
        self,
        dispatcher: AlertSink,
        parent: QObject | None = None,
        *,
        tick_interval_ms: int = TICK_INTERVAL_MS,
        max_recent: int = MAX_RECENT_TIMERS,
    ) -> None:
        super().__init__(parent)
        self._dispatcher = dispatcher
        self._tick_interval_ms = tick_interval_ms
        self._max_recent = max_recent
        self._active: ActiveTimer | None = None
        self._recent: list[SavedTimer] = []

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def active_timer(self) -> ActiveTimer | None:
        return self._active

    @property
    def recent_timers(self) -> list[SavedTimer]:
        return list(self._recent)

    @property
    def max_recent(self) -> int:
        return self._max_recent

    # ══════════════════════════════════════════════════════════════════
    #  STARTING
    # ══════════════════════════════════════════════════════════════════

    def start_one_off_minutes(
        self, minutes: int, alert_settings: AlertSettings,
    ) -> ActiveTimer:
        return self.start_one_off(minutes * 60, alert_settings)

    def start_one_off(
        self, duration: float, alert_settings: AlertSettings,
    ) -> ActiveTimer:
        """Start a single-stage timer of *duration* seconds."""
        if duration <= 0:
            raise ValueError(f"timer duration must be positive, got {duration}")
        self.stop()
        timer = ActiveTimer.one_off(
            duration, alert_settings, tick_interval_ms=self._tick_interval_ms,
        )
        logger.info("Starting one-off timer: %ss", duration)
        return self._activate(timer)

    def start_saved_timer(
        self, saved_timer: SavedTimer, default_alert_settings: AlertSettings,
    ) -> ActiveTimer:
        """Start a template, using its own alert settings if it has any."""
        self.stop()
        effective = saved_timer.effective_alert_settings(default_alert_settings)
        timer = ActiveTimer.from_saved_timer(
            saved_timer, effective, tick_interval_ms=self._tick_interval_ms,
        )
        logger.info("Starting saved timer %r", saved_timer.name)
        self._activate(timer)
        self._remember(saved_timer)
        return timer

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS (no-ops when idle)
    # ══════════════════════════════════════════════════════════════════

    def pause(self) -> None:
        if self._active is not None:
            logger.debug("Pausing %s", self._active.display_name)
            self._active.pause()

    def resume(self) -> None:
        if self._active is not None:
            logger.debug("Resuming %s", self._active.display_name)
            self._active.resume()

    def toggle_pause(self) -> None:
        if self._active is None:
            return
        if self._active.is_paused:
            self.resume()
        else:
            self.pause()

    def skip_stage(self) -> None:
        if self._active is not None:
            logger.info("Skipping stage of %s", self._active.display_name)
            self._active.skip_stage()

    def stop(self) -> None:
        """Stop and discard the active timer, if any."""
        if self._active is None:
            return
        timer = self._active
        logger.info("Stopping %s", timer.display_name)
        timer.stop()
        timer.event_emitted.disconnect(self._on_timer_event)
        self._active = None
        self.active_timer_changed.emit(None)

    # ══════════════════════════════════════════════════════════════════
    #  RECENT TIMERS
    # ══════════════════════════════════════════════════════════════════

    def forget_recent(self, timer_id: str) -> None:
        remaining = [t for t in self._recent if t.id != timer_id]
        if len(remaining) != len(self._recent):
            self._recent = remaining
            self.recent_timers_changed.emit(self.recent_timers)

    def refresh_recent(self, saved_timer: SavedTimer) -> None:
        """Swap in an edited template without changing its position."""
        for index, existing in enumerate(self._recent):
            if existing.id == saved_timer.id:
                self._recent[index] = saved_timer
                self.recent_timers_changed.emit(self.recent_timers)
                return

    def _remember(self, saved_timer: SavedTimer) -> None:
        self._recent = [t for t in self._recent if t.id != saved_timer.id]
        self._recent.insert(0, saved_timer)
        del self._recent[self._max_recent:]
        self.recent_timers_changed.emit(self.recent_timers)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — event routing
    # ══════════════════════════════════════════════════════════════════

    def _activate(self, timer: ActiveTimer) -> ActiveTimer:
        timer.event_emitted.connect(self._on_timer_event)
        self._active = timer
        timer.start()
        self.active_timer_changed.emit(timer)
        return timer

    def _on_timer_event(self, event: object) -> None:
        timer = self._active
        if timer is None:
            return
        if isinstance(event, StageComplete):
            title, body = stage_alert_text(timer, event)
            self._send(title, body, timer.alert_settings)
        elif isinstance(event, TimerComplete):
            title, body = timer_alert_text(timer)
            logger.info("%s finished", timer.display_name)
            self._send(title, body, timer.alert_settings)
            # Let the alert go out before the engine is dropped.
            QTimer.singleShot(0, lambda: self._release(timer))

    def _release(self, timer: ActiveTimer) -> None:
        """Drop a finished timer unless something newer replaced it."""
        if self._active is not timer:
            return
        timer.event_emitted.disconnect(self._on_timer_event)
        self._active = None
        self.active_timer_changed.emit(None)

    def _send(self, title: str, body: str, settings: AlertSettings) -> None:
        self._dispatcher.emit(title, body, settings)
        self.alert_sent.emit(title, body)
