"""Menu-bar application object for MenuTimer.

There is no main window: everything lives in the tray icon's menu, plus
the editor and preferences dialogs it opens.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt, QObject, QRectF
from PyQt6.QtGui import QIcon, QImage, QPainter, QColor, QPen, QPixmap
from PyQt6.QtWidgets import QApplication, QInputDialog, QMenu, QSystemTrayIcon

from .alerts.dispatcher import AlertDispatcher
from .alerts.sounds import SoundManager
from .settings import Settings, load_settings
from .store import PreferencesStore
from .timer.coordinator import TimerCoordinator
from .timer.engine import ActiveTimer
from .timer.models import SavedTimer
from .ui.edit_timer_dialog import EditTimerDialog
from .ui.preferences_dialog import PreferencesDialog


logger = logging.getLogger(__name__)

APP_NAME = "MenuTimer"


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(timer: ActiveTimer | None) -> QIcon:
    """Generate a monochrome template icon for the macOS menu bar.

    - idle:    thin circle outline
    - running: outline with a pie filled to the stage progress
    - paused:  two vertical pause bars
    """
    size = 64  # draw at 2× for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)  # template image: macOS tints automatically

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if timer is not None and timer.is_paused:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        bar_w, bar_h = 8, 28
        gap = 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        if timer is not None:
            # Remaining time as a pie, starting at 12 o'clock
            remaining = 1.0 - timer.progress
            inner = r - 6
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(colour)
            p.drawPie(
                QRectF(cx - inner, cy - inner, inner * 2, inner * 2),
                90 * 16,
                int(-remaining * 360 * 16),
            )

    p.end()

    img.setDevicePixelRatio(2.0)
    icon = QIcon(QPixmap.fromImage(img))
    icon.setIsMask(True)
    return icon


class MenuTimerApp(QObject):
    """Wires the store, coordinator, and alerts to a tray-icon menu."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or load_settings()

        # ── core objects ──────────────────────────────────────────────
        self._store = PreferencesStore(self)
        self._sound_manager = SoundManager(parent=self)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)
        self._dispatcher = AlertDispatcher(self._sound_manager)
        self._coordinator = TimerCoordinator(
            self._dispatcher,
            self,
            tick_interval_ms=self._settings.tick_interval_ms,
            max_recent=self._settings.max_recent_timers,
        )

        # ── tray icon ─────────────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(_make_tray_icon(None))
        self._tray_icon.setToolTip(APP_NAME)
        self._dispatcher.set_notifier(self._tray_icon.showMessage)

        self._menu = QMenu()
        self._menu.aboutToShow.connect(self._rebuild_menu)
        self._tray_icon.setContextMenu(self._menu)
        self._rebuild_menu()

        # ── wire signals ──────────────────────────────────────────────
        self._coordinator.active_timer_changed.connect(self._on_active_timer_changed)

    def show(self) -> None:
        self._tray_icon.show()

    @property
    def coordinator(self) -> TimerCoordinator:
        return self._coordinator

    @property
    def store(self) -> PreferencesStore:
        return self._store

    # ══════════════════════════════════════════════════════════════════
    #  MENU
    # ══════════════════════════════════════════════════════════════════

    def _rebuild_menu(self) -> None:
        menu = self._menu
        menu.clear()

        timer = self._coordinator.active_timer
        if timer is not None:
            self._add_active_section(menu, timer)
            menu.addSeparator()

        menu.addSection("Quick Timer")
        for minutes in self._store.quick_timer_minutes:
            action = menu.addAction(f"{minutes}m")
            action.triggered.connect(
                lambda _checked=False, m=minutes: self._start_quick(m)
            )
        menu.addAction("Custom…").triggered.connect(self._start_custom)

        menu.addSection("Saved Timers")
        saved = self._store.saved_timers
        if not saved:
            menu.addAction("No saved timers").setEnabled(False)
        for saved_timer in saved:
            self._add_saved_action(menu, saved_timer)

        recent = self._coordinator.recent_timers
        if recent:
            recent_menu = menu.addMenu("Recent")
            for saved_timer in recent:
                self._add_saved_action(recent_menu, saved_timer)

        menu.addSeparator()
        menu.addAction("New Timer…").triggered.connect(self._open_new_timer)
        menu.addAction("Preferences…").triggered.connect(self._open_preferences)
        menu.addSeparator()
        menu.addAction("Quit").triggered.connect(self._quit_app)

    def _add_active_section(self, menu: QMenu, timer: ActiveTimer) -> None:
        status = menu.addAction(
            f"{timer.formatted_time_remaining}  {timer.status_text}".rstrip()
        )
        status.setEnabled(False)

        toggle = menu.addAction("Resume" if timer.is_paused else "Pause")
        toggle.triggered.connect(self._coordinator.toggle_pause)
        if timer.is_multi_stage or timer.is_repeating:
            menu.addAction("Skip Stage").triggered.connect(self._coordinator.skip_stage)
        menu.addAction("Stop").triggered.connect(self._coordinator.stop)

    def _add_saved_action(self, menu: QMenu, saved_timer: SavedTimer) -> None:
        action = menu.addAction(f"{saved_timer.name}  ({saved_timer.summary})")
        action.triggered.connect(
            lambda _checked=False, t=saved_timer: self._start_saved(t)
        )

    # ══════════════════════════════════════════════════════════════════
    #  ACTIONS
    # ══════════════════════════════════════════════════════════════════

    def _start_quick(self, minutes: int) -> None:
        self._coordinator.start_one_off_minutes(minutes, self._store.alert_settings)

    def _start_custom(self) -> None:
        minutes, ok = QInputDialog.getInt(
            None, "Custom Timer", "Minutes:", 25, 1, 999,
        )
        if ok:
            self._start_quick(minutes)

    def _start_saved(self, saved_timer: SavedTimer) -> None:
        # Prefer the stored version in case it was edited since the menu was built.
        current = self._store.get_saved_timer(saved_timer.id) or saved_timer
        self._coordinator.start_saved_timer(current, self._store.alert_settings)

    def _open_new_timer(self) -> None:
        dialog = EditTimerDialog()
        if dialog.exec() and dialog.saved_timer is not None:
            self._store.add_saved_timer(dialog.saved_timer)

    def _open_preferences(self) -> None:
        dialog = PreferencesDialog(
            self._store, sound_preview_callback=self._dispatcher.preview,
        )
        dialog.timer_updated.connect(self._coordinator.refresh_recent)
        dialog.timer_deleted.connect(self._coordinator.forget_recent)
        dialog.exec()

    def _quit_app(self) -> None:
        self._coordinator.stop()
        self._tray_icon.hide()
        QApplication.instance().quit()

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_active_timer_changed(self, timer: ActiveTimer | None) -> None:
        if timer is None:
            self._tray_icon.setIcon(_make_tray_icon(None))
            self._tray_icon.setToolTip(APP_NAME)
            return
        timer.tick.connect(self._on_tick)
        timer.paused_changed.connect(lambda _paused: self._refresh_tray())
        self._refresh_tray()

    def _on_tick(self, _remaining: float) -> None:
        self._refresh_tray()

    def _refresh_tray(self) -> None:
        timer = self._coordinator.active_timer
        if timer is None:
            return
        self._tray_icon.setIcon(_make_tray_icon(timer))
        self._tray_icon.setToolTip(
            timer.menu_bar_title(show_label=self._settings.show_label_in_menu_bar)
        )
