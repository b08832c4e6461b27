"""Timer package."""

from .models import (
    AlertSettings,
    TimerStage,
    SavedTimer,
    AVAILABLE_SOUNDS,
    can_save_timer,
    build_saved_timer,
    format_clock,
)
from .engine import (
    ActiveTimer,
    StageComplete,
    TimerComplete,
    TICK_INTERVAL_MS,
)
from .coordinator import TimerCoordinator, MAX_RECENT_TIMERS

__all__ = [
    "AlertSettings",
    "TimerStage",
    "SavedTimer",
    "AVAILABLE_SOUNDS",
    "can_save_timer",
    "build_saved_timer",
    "format_clock",
    "ActiveTimer",
    "StageComplete",
    "TimerComplete",
    "TICK_INTERVAL_MS",
    "TimerCoordinator",
    "MAX_RECENT_TIMERS",
]
