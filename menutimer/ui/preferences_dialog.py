"""Preferences dialog for MenuTimer.

A dialog for quick-timer presets, the default alert settings, and the
saved-timer list.  Every change goes straight to the preference store,
which persists it immediately.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QCheckBox, QPushButton, QComboBox,
    QFrame, QListWidget, QListWidgetItem, QWidget,
)

from ..store import PreferencesStore
from ..timer.models import AVAILABLE_SOUNDS, AlertSettings, SavedTimer
from .edit_timer_dialog import EditTimerDialog


class PreferencesDialog(QDialog):
    """Dialog for all user preferences.

    Signals
    -------
    timer_updated(SavedTimer)
        A saved timer was edited.
    timer_deleted(str)
        A saved timer was deleted; carries its id.
    """

    timer_updated = pyqtSignal(object)
    timer_deleted = pyqtSignal(str)

    def __init__(
        self,
        store: PreferencesStore,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.setMinimumWidth(450)

        self._store = store
        self._sound_preview = sound_preview_callback
        self._populating = True

        self._build_ui()
        self._populate()

        store.quick_timer_minutes_changed.connect(self._populate_presets)
        store.saved_timers_changed.connect(self._populate_timers)

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(14)

        # ── Quick presets ────────────────────────────────────────────
        root.addWidget(self._section_label("Quick Timer Presets"))
        self._preset_list = QListWidget()
        self._preset_list.setFlow(QListWidget.Flow.LeftToRight)
        self._preset_list.setWrapping(True)
        self._preset_list.setMaximumHeight(64)
        root.addWidget(self._preset_list)

        preset_row = QHBoxLayout()
        self._preset_spin = QSpinBox()
        self._preset_spin.setRange(1, 999)
        self._preset_spin.setSuffix(" min")
        preset_row.addWidget(self._preset_spin)
        add_preset_btn = QPushButton("Add")
        add_preset_btn.clicked.connect(self._on_add_preset)
        preset_row.addWidget(add_preset_btn)
        remove_preset_btn = QPushButton("Remove")
        remove_preset_btn.clicked.connect(self._on_remove_preset)
        preset_row.addWidget(remove_preset_btn)
        preset_row.addStretch()
        root.addLayout(preset_row)

        root.addWidget(self._separator())

        # ── Default alerts ───────────────────────────────────────────
        root.addWidget(self._section_label("Default Alert Settings"))
        alert_form = QFormLayout()
        alert_form.setHorizontalSpacing(20)
        alert_form.setVerticalSpacing(10)

        self._sound_cb = QCheckBox("Play sound")
        self._sound_cb.toggled.connect(self._on_alert_changed)
        alert_form.addRow("", self._sound_cb)

        sound_row = QHBoxLayout()
        self._sound_combo = QComboBox()
        self._sound_combo.addItems(AVAILABLE_SOUNDS)
        self._sound_combo.currentTextChanged.connect(self._on_alert_changed)
        sound_row.addWidget(self._sound_combo)
        preview_btn = QPushButton("Preview")
        preview_btn.clicked.connect(self._on_preview)
        sound_row.addWidget(preview_btn)
        sound_wrapper = QWidget()
        sound_wrapper.setLayout(sound_row)
        alert_form.addRow("Sound:", sound_wrapper)

        self._notif_cb = QCheckBox("Show notification")
        self._notif_cb.toggled.connect(self._on_alert_changed)
        alert_form.addRow("", self._notif_cb)
        root.addLayout(alert_form)

        root.addWidget(self._separator())

        # ── Saved timers ─────────────────────────────────────────────
        root.addWidget(self._section_label("Saved Timers"))
        self._timer_list = QListWidget()
        self._timer_list.itemDoubleClicked.connect(lambda _item: self._on_edit_timer())
        root.addWidget(self._timer_list)

        timer_row = QHBoxLayout()
        self._edit_btn = QPushButton("Edit")
        self._edit_btn.clicked.connect(self._on_edit_timer)
        timer_row.addWidget(self._edit_btn)
        self._delete_btn = QPushButton("Delete")
        self._delete_btn.clicked.connect(self._on_delete_timer)
        timer_row.addWidget(self._delete_btn)
        timer_row.addStretch()
        self._pomodoro_btn = QPushButton("Add Pomodoro")
        self._pomodoro_btn.clicked.connect(self._on_add_pomodoro)
        timer_row.addWidget(self._pomodoro_btn)
        root.addLayout(timer_row)
        self._timer_list.currentRowChanged.connect(self._update_timer_buttons)

        # ── close button ─────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM STORE
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        self._populating = True
        alert = self._store.alert_settings
        self._sound_cb.setChecked(alert.play_sound)
        self._sound_combo.setCurrentText(alert.sound_name)
        self._notif_cb.setChecked(alert.show_notification)
        self._populating = False

        self._populate_presets()
        self._populate_timers()

    def _populate_presets(self, *_args) -> None:
        self._preset_list.clear()
        for minutes in self._store.quick_timer_minutes:
            item = QListWidgetItem(f"{minutes}m")
            item.setData(Qt.ItemDataRole.UserRole, minutes)
            self._preset_list.addItem(item)

    def _populate_timers(self, *_args) -> None:
        self._timer_list.clear()
        for timer in self._store.saved_timers:
            item = QListWidgetItem(f"{timer.name}  —  {timer.summary}")
            item.setData(Qt.ItemDataRole.UserRole, timer.id)
            self._timer_list.addItem(item)
        self._pomodoro_btn.setEnabled(not self._store.has_pomodoro())
        self._update_timer_buttons()

    def _update_timer_buttons(self, *_args) -> None:
        selected = self._selected_timer() is not None
        self._edit_btn.setEnabled(selected)
        self._delete_btn.setEnabled(selected)

    def _selected_timer(self) -> SavedTimer | None:
        item = self._timer_list.currentItem()
        if item is None:
            return None
        return self._store.get_saved_timer(item.data(Qt.ItemDataRole.UserRole))

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS — saved immediately by the store
    # ══════════════════════════════════════════════════════════════════

    def _on_add_preset(self) -> None:
        self._store.add_quick_minutes(self._preset_spin.value())

    def _on_remove_preset(self) -> None:
        item = self._preset_list.currentItem()
        if item is not None:
            self._store.remove_quick_minutes(item.data(Qt.ItemDataRole.UserRole))

    def _on_alert_changed(self, *_args) -> None:
        if self._populating:
            return
        self._store.alert_settings = AlertSettings(
            play_sound=self._sound_cb.isChecked(),
            show_notification=self._notif_cb.isChecked(),
            sound_name=self._sound_combo.currentText(),
        )

    def _on_preview(self) -> None:
        if self._sound_preview:
            self._sound_preview(self._sound_combo.currentText())

    def _on_edit_timer(self) -> None:
        timer = self._selected_timer()
        if timer is None:
            return
        dialog = EditTimerDialog(timer, self)
        if dialog.exec() and dialog.saved_timer is not None:
            self._store.update_saved_timer(dialog.saved_timer)
            self.timer_updated.emit(dialog.saved_timer)

    def _on_delete_timer(self) -> None:
        timer = self._selected_timer()
        if timer is None:
            return
        self._store.delete_saved_timer(timer.id)
        self.timer_deleted.emit(timer.id)

    def _on_add_pomodoro(self) -> None:
        self._store.add_pomodoro()
