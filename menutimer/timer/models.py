"""Value types for MenuTimer: alert settings, stages, and saved timers.

A ``SavedTimer`` is a named, reusable template.  It never runs by itself;
the engine copies its stages when a timer is started from it.

Encoding
--------
Every type round-trips through ``to_dict()`` / ``from_dict()`` using
plain JSON-compatible values so the preference store can persist them
as JSON text.  ``from_dict`` ignores unknown keys and raises
``KeyError`` / ``TypeError`` / ``ValueError`` on malformed input, which
the store turns into a fallback to defaults.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_SOUND = "Glass"

AVAILABLE_SOUNDS = (
    "Basso", "Blow", "Bottle", "Frog", "Funk", "Glass", "Hero",
    "Morse", "Ping", "Pop", "Purr", "Sosumi", "Submarine", "Tink",
)

POMODORO_NAME = "Pomodoro"

DEFAULT_REPEAT_COUNT = 4
REPEAT_COUNT_RANGE = (1, 100)
NEW_STAGE_SECONDS = 5 * 60


def _new_id() -> str:
    return uuid.uuid4().hex


# ── formatting ────────────────────────────────────────────────────────────


def format_clock(seconds: float) -> str:
    """``M:SS`` below an hour, ``H:MM:SS`` above."""
    total = int(max(0.0, seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_stage_duration(seconds: float) -> str:
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    if secs == 0:
        return f"{minutes}m"
    return f"{minutes}m {secs}s"


# ══════════════════════════════════════════════════════════════════════════
#  ALERT SETTINGS
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AlertSettings:
    """How a finished stage or timer gets announced."""

    play_sound: bool = True
    show_notification: bool = True
    sound_name: str = DEFAULT_SOUND

    def to_dict(self) -> dict[str, Any]:
        return {
            "playSound": self.play_sound,
            "showNotification": self.show_notification,
            "soundName": self.sound_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AlertSettings:
        if not isinstance(data, dict):
            raise TypeError(f"expected object, got {type(data).__name__}")
        play_sound = data["playSound"]
        show_notification = data["showNotification"]
        sound_name = data["soundName"]
        if not isinstance(play_sound, bool) or not isinstance(show_notification, bool):
            raise TypeError("playSound/showNotification must be booleans")
        if not isinstance(sound_name, str):
            raise TypeError("soundName must be a string")
        return cls(play_sound, show_notification, sound_name)


# ══════════════════════════════════════════════════════════════════════════
#  TIMER STAGE
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TimerStage:
    """One timed interval.  ``duration`` is in seconds and may be fractional."""

    duration: float
    label: str | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError(f"stage duration must be >= 0, got {self.duration}")

    @property
    def formatted_duration(self) -> str:
        return format_stage_duration(self.duration)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "duration": self.duration}
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimerStage:
        if not isinstance(data, dict):
            raise TypeError(f"expected object, got {type(data).__name__}")
        duration = data["duration"]
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise TypeError("duration must be a number")
        label = data.get("label")
        if label is not None and not isinstance(label, str):
            raise TypeError("label must be a string")
        return cls(
            duration=float(duration),
            label=label,
            id=str(data.get("id") or _new_id()),
        )


# ══════════════════════════════════════════════════════════════════════════
#  SAVED TIMER (template)
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SavedTimer:
    """A named, persisted timer definition.

    ``repeat_count`` of ``None`` on a repeating timer means "forever".
    On a non-repeating timer the count is meaningless and is dropped.
    """

    name: str
    stages: tuple[TimerStage, ...]
    is_repeating: bool = False
    repeat_count: int | None = None
    alert_settings: AlertSettings | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        # Accept any sequence; store an immutable tuple.
        object.__setattr__(self, "stages", tuple(self.stages))
        if not self.is_repeating:
            object.__setattr__(self, "repeat_count", None)
        elif self.repeat_count is not None and self.repeat_count < 1:
            raise ValueError(
                f"repeat_count must be positive, got {self.repeat_count}"
            )

    # ── derived ───────────────────────────────────────────────────────

    def effective_alert_settings(self, default: AlertSettings) -> AlertSettings:
        return self.alert_settings if self.alert_settings is not None else default

    @property
    def total_duration(self) -> float:
        return sum(stage.duration for stage in self.stages)

    @property
    def formatted_total_duration(self) -> str:
        total = int(self.total_duration)
        hours, rest = divmod(total, 3600)
        minutes = rest // 60
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    @property
    def summary(self) -> str:
        """One-line description for menus, e.g. ``2 stages · 30m · x4``."""
        count = len(self.stages)
        parts = [
            f"{count} stage" if count == 1 else f"{count} stages",
            self.formatted_total_duration,
        ]
        if self.is_repeating:
            if self.repeat_count is None:
                parts.append("repeats forever")
            else:
                parts.append(f"x{self.repeat_count}")
        return " · ".join(parts)

    def with_changes(self, **changes: Any) -> SavedTimer:
        return replace(self, **changes)

    # ── factories ─────────────────────────────────────────────────────

    @classmethod
    def pomodoro(cls) -> SavedTimer:
        return cls(
            name=POMODORO_NAME,
            stages=(
                TimerStage(25 * 60, "Work"),
                TimerStage(5 * 60, "Break"),
            ),
            is_repeating=True,
            repeat_count=DEFAULT_REPEAT_COUNT,
        )

    # ── encoding ──────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "stages": [stage.to_dict() for stage in self.stages],
            "isRepeating": self.is_repeating,
        }
        if self.repeat_count is not None:
            data["repeatCount"] = self.repeat_count
        if self.alert_settings is not None:
            data["alertSettings"] = self.alert_settings.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SavedTimer:
        if not isinstance(data, dict):
            raise TypeError(f"expected object, got {type(data).__name__}")
        name = data["name"]
        if not isinstance(name, str):
            raise TypeError("name must be a string")
        raw_stages = data["stages"]
        if not isinstance(raw_stages, list):
            raise TypeError("stages must be a list")
        if not raw_stages:
            raise ValueError(f"timer {name!r} has no stages")
        repeat_count = data.get("repeatCount")
        if repeat_count is not None and (
            isinstance(repeat_count, bool) or not isinstance(repeat_count, int)
        ):
            raise TypeError("repeatCount must be an integer")
        alert = data.get("alertSettings")
        return cls(
            name=name,
            stages=tuple(TimerStage.from_dict(s) for s in raw_stages),
            is_repeating=bool(data.get("isRepeating", False)),
            repeat_count=repeat_count,
            alert_settings=AlertSettings.from_dict(alert) if alert is not None else None,
            id=str(data.get("id") or _new_id()),
        )


# ══════════════════════════════════════════════════════════════════════════
#  EDITOR RULES
# ══════════════════════════════════════════════════════════════════════════


def can_save_timer(name: str, stages: list[TimerStage] | tuple[TimerStage, ...]) -> bool:
    """Whether the editor may save: a name and at least one non-zero stage."""
    if not name.strip():
        return False
    if not stages:
        return False
    return any(stage.duration > 0 for stage in stages)


def build_saved_timer(
    name: str,
    stages: list[TimerStage] | tuple[TimerStage, ...],
    *,
    is_repeating: bool = False,
    repeat_forever: bool = False,
    repeat_count: int = DEFAULT_REPEAT_COUNT,
    alert_settings: AlertSettings | None = None,
    existing: SavedTimer | None = None,
) -> SavedTimer:
    """Turn editor fields into a ``SavedTimer``.

    Editing keeps the existing template's id so the store can update it
    in place.  Blank stage labels are stored as ``None``.
    """
    if not can_save_timer(name, stages):
        raise ValueError("a timer needs a name and at least one non-zero stage")

    cleaned = tuple(
        replace(stage, label=(stage.label or "").strip() or None)
        for stage in stages
    )
    lo, hi = REPEAT_COUNT_RANGE
    count = None
    if is_repeating and not repeat_forever:
        count = max(lo, min(hi, repeat_count))

    kwargs: dict[str, Any] = {}
    if existing is not None:
        kwargs["id"] = existing.id
    return SavedTimer(
        name=name.strip(),
        stages=cleaned,
        is_repeating=is_repeating,
        repeat_count=count,
        alert_settings=alert_settings,
        **kwargs,
    )
