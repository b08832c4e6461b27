"""Alert delivery: a sound and/or a desktop notification.

Fire and forget.  Whatever goes wrong here (missing sound, notifications
unavailable) is logged and dropped; the timer has finished either way.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..timer.models import AlertSettings
from .sounds import SoundManager


logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class AlertDispatcher:
    """Routes an alert to the sound player and the notifier.

    *notifier* is any ``(title, body)`` callable; the app passes the tray
    icon's ``showMessage``.
    """

    def __init__(
        self,
        sound_manager: SoundManager | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._sounds = sound_manager
        self._notifier = notifier

    def set_notifier(self, notifier: Notifier | None) -> None:
        self._notifier = notifier

    def emit(self, title: str, body: str, settings: AlertSettings) -> None:
        logger.info("Alert: %s | %s", title, body)
        if settings.play_sound:
            self._play(settings.sound_name)
        if settings.show_notification:
            self._notify(title, body)

    def preview(self, sound_name: str) -> None:
        """Play a sound on its own, e.g. from the preferences picker."""
        self._play(sound_name)

    # ── channels ──────────────────────────────────────────────────────

    def _play(self, sound_name: str) -> None:
        if self._sounds is None:
            return
        try:
            self._sounds.play(sound_name)
        except Exception:
            logger.warning("Could not play sound %r", sound_name, exc_info=True)

    def _notify(self, title: str, body: str) -> None:
        if self._notifier is None:
            logger.debug("No notifier configured; dropping %r", title)
            return
        try:
            self._notifier(title, body)
        except Exception:
            logger.warning("Could not show notification %r", title, exc_info=True)
