"""Active timer state machine for MenuTimer.

An ``ActiveTimer`` drives one running timer through its stages and
repetitions.  At most one is alive at a time; the coordinator owns it.

States
------
READY       Constructed, not yet ticking.
RUNNING     QTimer firing every ``tick_interval_ms``.
PAUSED      Tick source cancelled, ``is_paused`` set.
FINISHED    Terminal.  Reached on timer-complete or ``stop()``.

Advancement
-----------
Runs when the remaining time reaches zero or on ``skip_stage()``; both
paths are the same transition and produce exactly one event:

- not on the last stage            → ``StageComplete(is_last_stage=False)``
- last stage, repeating, reps left → ``StageComplete(is_last_stage=True)``,
                                      back to stage 0, repetition + 1
- otherwise                        → ``TimerComplete`` (ticking stops)

Resuming restarts the tick from the current remaining time; there is no
drift correction across a pause.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .models import AlertSettings, SavedTimer, TimerStage, format_clock


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 100
DEFAULT_TIMER_NAME = "Timer"


# ── events ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StageComplete:
    """A stage ended and another one is now current.

    ``is_last_stage`` is True when the completed stage closed a cycle and
    the timer wrapped back to stage 0 for the next repetition.
    """

    completed_stage: TimerStage
    next_stage: TimerStage | None
    is_last_stage: bool


@dataclass(frozen=True)
class TimerComplete:
    """The final stage of the final repetition ended.  Terminal."""

    completed_stage: TimerStage


TimerEvent = StageComplete | TimerComplete


# ── engine ────────────────────────────────────────────────────────────────


class ActiveTimer(QObject):
    """A running countdown over an ordered list of stages.

    Signals
    -------
    tick(time_remaining: float)
        Emitted on every tick while running.
    event_emitted(event: StageComplete | TimerComplete)
        Emitted once per advancement, natural or skipped.
    paused_changed(is_paused: bool)
        Emitted when the paused flag flips.
    """

    tick = pyqtSignal(float)
    event_emitted = pyqtSignal(object)
    paused_changed = pyqtSignal(bool)

    def __init__(
        self,
        stages: list[TimerStage] | tuple[TimerStage, ...],
        *,
        alert_settings: AlertSettings,
        is_repeating: bool = False,
        repeat_count: int | None = None,
        saved_timer: SavedTimer | None = None,
        tick_interval_ms: int = TICK_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        if not stages:
            raise ValueError("an active timer needs at least one stage")

        # ── definition (fixed for the life of the engine) ─────────────
        self._stages: tuple[TimerStage, ...] = tuple(stages)
        self._is_repeating: bool = is_repeating
        self._repeat_count: int | None = repeat_count if is_repeating else None
        self._alert_settings: AlertSettings = alert_settings
        self._saved_timer: SavedTimer | None = saved_timer

        # ── runtime state ─────────────────────────────────────────────
        self._time_remaining: float = self._stages[0].duration
        self._is_paused: bool = False
        self._current_stage_index: int = 0
        self._current_repetition: int = 1
        self._finished: bool = False

        # ── Qt timer ──────────────────────────────────────────────────
        self._interval: float = tick_interval_ms / 1000.0
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(tick_interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ── constructors ──────────────────────────────────────────────────

    @classmethod
    def one_off(
        cls,
        duration: float,
        alert_settings: AlertSettings,
        **kwargs,
    ) -> ActiveTimer:
        """A single unlabeled stage, no repetition."""
        return cls([TimerStage(duration)], alert_settings=alert_settings, **kwargs)

    @classmethod
    def from_saved_timer(
        cls,
        saved_timer: SavedTimer,
        alert_settings: AlertSettings,
        **kwargs,
    ) -> ActiveTimer:
        """Copy a template's stages and repeat policy.

        *alert_settings* must already be the effective settings.
        """
        return cls(
            saved_timer.stages,
            alert_settings=alert_settings,
            is_repeating=saved_timer.is_repeating,
            repeat_count=saved_timer.repeat_count,
            saved_timer=saved_timer,
            **kwargs,
        )

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def stages(self) -> tuple[TimerStage, ...]:
        return self._stages

    @property
    def is_repeating(self) -> bool:
        return self._is_repeating

    @property
    def repeat_count(self) -> int | None:
        return self._repeat_count

    @property
    def alert_settings(self) -> AlertSettings:
        return self._alert_settings

    @property
    def saved_timer(self) -> SavedTimer | None:
        """The template this timer was started from, if any.  Read only."""
        return self._saved_timer

    @property
    def time_remaining(self) -> float:
        return self._time_remaining

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def current_stage_index(self) -> int:
        return self._current_stage_index

    @property
    def current_repetition(self) -> int:
        return self._current_repetition

    @property
    def current_stage(self) -> TimerStage:
        return self._stages[self._current_stage_index]

    @property
    def is_running(self) -> bool:
        """True while the tick source is armed."""
        return self._qt_timer.isActive()

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def is_multi_stage(self) -> bool:
        return len(self._stages) > 1

    @property
    def display_name(self) -> str:
        if self._saved_timer is not None:
            return self._saved_timer.name
        return DEFAULT_TIMER_NAME

    @property
    def progress(self) -> float:
        """0.0 → 1.0 progress through the current stage."""
        duration = self.current_stage.duration
        if duration <= 0:
            return 0.0
        return max(0.0, min(1.0, 1.0 - self._time_remaining / duration))

    @property
    def formatted_time_remaining(self) -> str:
        return format_clock(self._time_remaining)

    @property
    def status_text(self) -> str:
        """e.g. ``Pomodoro • Work • Stage 1/2 • Rep 2/4``."""
        parts: list[str] = []
        if self._saved_timer is not None:
            parts.append(self._saved_timer.name)
        if self.current_stage.label:
            parts.append(self.current_stage.label)
        if self.is_multi_stage:
            parts.append(
                f"Stage {self._current_stage_index + 1}/{len(self._stages)}"
            )
        if self._is_repeating:
            if self._repeat_count is not None:
                parts.append(f"Rep {self._current_repetition}/{self._repeat_count}")
            else:
                parts.append(f"Rep {self._current_repetition}")
        return " • ".join(parts)

    def menu_bar_title(self, *, show_label: bool = True) -> str:
        """Short text for the menu bar: ``Work · 24:59`` or ``4:59``."""
        label = self.current_stage.label
        if show_label and label:
            return f"{label} · {self.formatted_time_remaining}"
        return self.formatted_time_remaining

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Clear the paused flag and (re-)arm the tick source."""
        if self._finished:
            return
        self._set_paused(False)
        self._qt_timer.start()

    def pause(self) -> None:
        """Cancel the tick source.  Pausing twice is the same as once."""
        if self._finished:
            return
        self._qt_timer.stop()
        self._set_paused(True)

    def resume(self) -> None:
        self.start()

    def stop(self) -> None:
        """Cancel immediately.  The engine cannot be restarted."""
        self._qt_timer.stop()
        self._finished = True

    def skip_stage(self) -> TimerEvent | None:
        """Advance now, exactly as if the current stage had expired."""
        return self.advance()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if self._is_paused or self._finished:
            return
        # Rounded so repeated 0.1 s steps land exactly on zero.
        self._time_remaining = max(0.0, round(self._time_remaining - self._interval, 6))
        self.tick.emit(self._time_remaining)
        if self._time_remaining <= 0:
            self.advance()

    def advance(self) -> TimerEvent | None:
        """Move to the next stage, the next repetition, or completion.

        Returns the event that was emitted, or ``None`` when the engine
        has already finished.
        """
        if self._finished:
            return None

        completed = self.current_stage
        event: TimerEvent

        if self._current_stage_index < len(self._stages) - 1:
            self._current_stage_index += 1
            next_stage = self.current_stage
            self._time_remaining = next_stage.duration
            event = StageComplete(completed, next_stage, is_last_stage=False)
        elif self._is_repeating and self._should_repeat():
            self._current_repetition += 1
            self._current_stage_index = 0
            next_stage = self.current_stage
            self._time_remaining = next_stage.duration
            event = StageComplete(completed, next_stage, is_last_stage=True)
        else:
            self._qt_timer.stop()
            self._finished = True
            self._time_remaining = 0.0
            event = TimerComplete(completed)

        logger.debug(
            "%s: %s (stage %d, rep %d)",
            self.display_name,
            type(event).__name__,
            self._current_stage_index,
            self._current_repetition,
        )
        self.event_emitted.emit(event)
        return event

    def _should_repeat(self) -> bool:
        if self._repeat_count is None:
            return True
        return self._current_repetition < self._repeat_count

    def _set_paused(self, paused: bool) -> None:
        if self._is_paused == paused:
            return
        self._is_paused = paused
        self.paused_changed.emit(paused)
