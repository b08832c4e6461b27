"""UI package."""

from .edit_timer_dialog import EditTimerDialog, StageRow
from .preferences_dialog import PreferencesDialog

__all__ = [
    "EditTimerDialog",
    "StageRow",
    "PreferencesDialog",
]
