"""Persistent user preferences: alert defaults, saved timers, quick presets.

Each tracked value lives under its own stable key in the ``preferences``
table as JSON text.  Every assignment re-serialises that one value and
writes it straight through; nothing is batched and no write spans two
keys.

A value that cannot be decoded falls back to its hardcoded default and
the problem is logged.  It is never fatal.

Usage::

    store = PreferencesStore()
    store.add_quick_minutes(20)
    store.add_saved_timer(SavedTimer.pomodoro())
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable

from PyQt6.QtCore import QObject, pyqtSignal

from .database.db import get_session
from .database.models import Preference
from .timer.models import AlertSettings, SavedTimer, POMODORO_NAME


logger = logging.getLogger(__name__)

# ── keys & defaults ───────────────────────────────────────────────────────

ALERT_SETTINGS_KEY = "alertSettings"
SAVED_TIMERS_KEY = "savedTimers"
QUICK_TIMER_MINUTES_KEY = "quickTimerMinutes"

DEFAULT_QUICK_TIMER_MINUTES = (5, 10, 15, 25, 30, 45, 60)


# ── decoders ──────────────────────────────────────────────────────────────


def _decode_saved_timers(raw: Any) -> list[SavedTimer]:
    if not isinstance(raw, list):
        raise TypeError("expected a list of timers")
    return [SavedTimer.from_dict(item) for item in raw]


def _normalize_minutes(values: Iterable[int]) -> list[int]:
    """Unique positive presets in ascending order."""
    return sorted({m for m in values if m > 0})


def _decode_quick_minutes(raw: Any) -> list[int]:
    if not isinstance(raw, list):
        raise TypeError("expected a list of minutes")
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"not an integer: {value!r}")
    minutes = _normalize_minutes(raw)
    if minutes != raw:
        logger.info("Normalised stored quick presets %r to %r", raw, minutes)
    return minutes


class PreferencesStore(QObject):
    """Write-through store for everything the user configures.

    Signals
    -------
    alert_settings_changed(AlertSettings)
    saved_timers_changed(list[SavedTimer])
    quick_timer_minutes_changed(list[int])
    """

    alert_settings_changed = pyqtSignal(object)
    saved_timers_changed = pyqtSignal(object)
    quick_timer_minutes_changed = pyqtSignal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._alert_settings: AlertSettings = self._load(
            ALERT_SETTINGS_KEY, AlertSettings.from_dict, AlertSettings,
        )
        self._saved_timers: list[SavedTimer] = self._load(
            SAVED_TIMERS_KEY, _decode_saved_timers, lambda: [SavedTimer.pomodoro()],
        )
        self._quick_timer_minutes: list[int] = self._load(
            QUICK_TIMER_MINUTES_KEY, _decode_quick_minutes,
            lambda: list(DEFAULT_QUICK_TIMER_MINUTES),
        )

    # ══════════════════════════════════════════════════════════════════
    #  TRACKED VALUES
    # ══════════════════════════════════════════════════════════════════

    @property
    def alert_settings(self) -> AlertSettings:
        return self._alert_settings

    @alert_settings.setter
    def alert_settings(self, value: AlertSettings) -> None:
        self._alert_settings = value
        self._write(ALERT_SETTINGS_KEY, value.to_dict())
        self.alert_settings_changed.emit(value)

    @property
    def saved_timers(self) -> list[SavedTimer]:
        """A copy; assign a new list to change it."""
        return list(self._saved_timers)

    @saved_timers.setter
    def saved_timers(self, value: list[SavedTimer]) -> None:
        self._saved_timers = list(value)
        self._write(SAVED_TIMERS_KEY, [t.to_dict() for t in self._saved_timers])
        self.saved_timers_changed.emit(self.saved_timers)

    @property
    def quick_timer_minutes(self) -> list[int]:
        return list(self._quick_timer_minutes)

    @quick_timer_minutes.setter
    def quick_timer_minutes(self, value: list[int]) -> None:
        self._quick_timer_minutes = _normalize_minutes(value)
        self._write(QUICK_TIMER_MINUTES_KEY, self._quick_timer_minutes)
        self.quick_timer_minutes_changed.emit(self.quick_timer_minutes)

    # ══════════════════════════════════════════════════════════════════
    #  SAVED TIMERS
    # ══════════════════════════════════════════════════════════════════

    def get_saved_timer(self, timer_id: str) -> SavedTimer | None:
        for timer in self._saved_timers:
            if timer.id == timer_id:
                return timer
        return None

    def add_saved_timer(self, timer: SavedTimer) -> None:
        self.saved_timers = [*self._saved_timers, timer]

    def update_saved_timer(self, timer: SavedTimer) -> None:
        """Replace the template with the same id.  Unknown ids are ignored."""
        timers = self.saved_timers
        for index, existing in enumerate(timers):
            if existing.id == timer.id:
                timers[index] = timer
                self.saved_timers = timers
                return
        logger.debug("update_saved_timer: no timer with id %s", timer.id)

    def delete_saved_timer(self, timer_id: str) -> None:
        remaining = [t for t in self._saved_timers if t.id != timer_id]
        if len(remaining) != len(self._saved_timers):
            self.saved_timers = remaining

    def move_saved_timer(self, from_index: int, to_index: int) -> None:
        timers = self.saved_timers
        if not (0 <= from_index < len(timers)):
            raise IndexError(f"no saved timer at index {from_index}")
        timer = timers.pop(from_index)
        to_index = max(0, min(to_index, len(timers)))
        timers.insert(to_index, timer)
        self.saved_timers = timers

    def has_pomodoro(self) -> bool:
        return any(t.name == POMODORO_NAME for t in self._saved_timers)

    def add_pomodoro(self) -> bool:
        """Add the default Pomodoro template unless one is already there."""
        if self.has_pomodoro():
            return False
        self.add_saved_timer(SavedTimer.pomodoro())
        return True

    # ══════════════════════════════════════════════════════════════════
    #  QUICK PRESETS
    # ══════════════════════════════════════════════════════════════════

    def add_quick_minutes(self, minutes: int) -> bool:
        """Add a preset, keeping the list unique and ascending."""
        if minutes <= 0:
            raise ValueError(f"quick timer minutes must be positive, got {minutes}")
        if minutes in self._quick_timer_minutes:
            return False
        self.quick_timer_minutes = [*self._quick_timer_minutes, minutes]
        return True

    def remove_quick_minutes(self, minutes: int) -> bool:
        if minutes not in self._quick_timer_minutes:
            return False
        self.quick_timer_minutes = [m for m in self._quick_timer_minutes if m != minutes]
        return True

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — key-value persistence
    # ══════════════════════════════════════════════════════════════════

    def _load(
        self,
        key: str,
        decode: Callable[[Any], Any],
        default: Callable[[], Any],
    ) -> Any:
        with get_session() as db:
            row = db.get(Preference, key)
            raw = row.value if row is not None else None
        if raw is None:
            return default()
        try:
            return decode(json.loads(raw))
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning("Could not decode %r, using default: %s", key, exc)
            return default()

    @staticmethod
    def _write(key: str, value: Any) -> None:
        text = json.dumps(value)
        with get_session() as db:
            db.merge(Preference(key=key, value=text))
