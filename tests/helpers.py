"""Shared test helpers for MenuTimer."""

from menutimer.timer.engine import ActiveTimer


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class RecordingDispatcher:
    """Stands in for AlertDispatcher; records (title, body, settings)."""

    def __init__(self):
        self.alerts: list = []

    def emit(self, title, body, settings):
        self.alerts.append((title, body, settings))

    @property
    def last(self):
        return self.alerts[-1] if self.alerts else None


def expire_stage(timer: ActiveTimer) -> None:
    """Fast-forward the current stage by jumping to its last tick."""
    timer._time_remaining = timer._interval
    timer._on_tick()
