"""Editor dialog for creating and editing saved timers.

Save stays disabled until the form describes a valid timer: a name and
at least one stage with a non-zero duration.  On accept the finished
``SavedTimer`` is available as ``dialog.saved_timer`` and is also sent
through ``timer_saved``.
"""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QCheckBox, QPushButton, QLineEdit,
    QComboBox, QFrame, QWidget,
)

from ..timer.models import (
    AVAILABLE_SOUNDS,
    DEFAULT_REPEAT_COUNT,
    NEW_STAGE_SECONDS,
    REPEAT_COUNT_RANGE,
    AlertSettings,
    SavedTimer,
    TimerStage,
    build_saved_timer,
    can_save_timer,
)


class StageRow(QWidget):
    """Label + minutes + seconds for one stage, with a remove button."""

    changed = pyqtSignal()
    remove_requested = pyqtSignal(object)

    def __init__(self, stage: TimerStage, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._stage = stage

        row = QHBoxLayout(self)
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(8)

        self._label_edit = QLineEdit(stage.label or "")
        self._label_edit.setPlaceholderText("Label (optional)")
        self._label_edit.textChanged.connect(self.changed)
        row.addWidget(self._label_edit, 1)

        total = int(stage.duration)
        self._min_spin = QSpinBox()
        self._min_spin.setRange(0, 999)
        self._min_spin.setSuffix(" m")
        self._min_spin.setValue(total // 60)
        self._min_spin.valueChanged.connect(self.changed)
        row.addWidget(self._min_spin)

        self._sec_spin = QSpinBox()
        self._sec_spin.setRange(0, 59)
        self._sec_spin.setSuffix(" s")
        self._sec_spin.setValue(total % 60)
        self._sec_spin.valueChanged.connect(self.changed)
        row.addWidget(self._sec_spin)

        self._remove_btn = QPushButton("−")
        self._remove_btn.setFixedWidth(28)
        self._remove_btn.setToolTip("Remove stage")
        self._remove_btn.clicked.connect(lambda: self.remove_requested.emit(self))
        row.addWidget(self._remove_btn)

    def set_removable(self, removable: bool) -> None:
        self._remove_btn.setEnabled(removable)

    def stage(self) -> TimerStage:
        duration = self._min_spin.value() * 60 + self._sec_spin.value()
        # Spin boxes hold whole seconds; an untouched duration keeps its fraction.
        if duration == int(self._stage.duration):
            duration = self._stage.duration
        return TimerStage(
            duration=duration,
            label=self._label_edit.text() or None,
            id=self._stage.id,
        )


class EditTimerDialog(QDialog):
    """Modal dialog for one saved timer.  Pass *timer* to edit it."""

    timer_saved = pyqtSignal(object)

    def __init__(
        self,
        timer: SavedTimer | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._existing = timer
        self._rows: list[StageRow] = []
        self._saved: SavedTimer | None = None

        self.setWindowTitle("Edit Timer" if timer is not None else "New Timer")
        self.setMinimumWidth(440)
        self.setModal(True)

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(14)

        self._name_edit = QLineEdit()
        self._name_edit.setPlaceholderText("Timer Name")
        self._name_edit.textChanged.connect(self._update_save_enabled)
        root.addWidget(self._name_edit)

        # ── stages ───────────────────────────────────────────────────
        root.addWidget(self._section_label("Stages"))
        self._stages_box = QVBoxLayout()
        self._stages_box.setSpacing(6)
        root.addLayout(self._stages_box)

        add_btn = QPushButton("Add Stage")
        add_btn.clicked.connect(lambda: self._add_row(TimerStage(NEW_STAGE_SECONDS)))
        root.addWidget(add_btn)

        root.addWidget(self._separator())

        # ── repeat ───────────────────────────────────────────────────
        repeat_form = QFormLayout()
        self._repeat_cb = QCheckBox("Repeat Timer")
        self._repeat_cb.toggled.connect(self._update_repeat_enabled)
        repeat_form.addRow("", self._repeat_cb)

        self._forever_cb = QCheckBox("Repeat forever")
        self._forever_cb.toggled.connect(self._update_repeat_enabled)
        repeat_form.addRow("", self._forever_cb)

        self._count_spin = QSpinBox()
        self._count_spin.setRange(*REPEAT_COUNT_RANGE)
        self._count_spin.setSuffix(" times")
        repeat_form.addRow("Repeat:", self._count_spin)
        root.addLayout(repeat_form)

        root.addWidget(self._separator())

        # ── alerts ───────────────────────────────────────────────────
        alert_form = QFormLayout()
        self._custom_alert_cb = QCheckBox("Use custom alert settings")
        self._custom_alert_cb.toggled.connect(self._update_alert_enabled)
        alert_form.addRow("", self._custom_alert_cb)

        self._sound_cb = QCheckBox("Play sound")
        alert_form.addRow("", self._sound_cb)

        self._sound_combo = QComboBox()
        self._sound_combo.addItems(AVAILABLE_SOUNDS)
        alert_form.addRow("Sound:", self._sound_combo)

        self._notif_cb = QCheckBox("Show notification")
        alert_form.addRow("", self._notif_cb)
        root.addLayout(alert_form)

        # ── buttons ──────────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(cancel_btn)
        self._save_btn = QPushButton("Save")
        self._save_btn.setDefault(True)
        self._save_btn.clicked.connect(self._on_save)
        btn_row.addWidget(self._save_btn)
        root.addLayout(btn_row)

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-weight: 700;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        timer = self._existing
        alert = AlertSettings()
        if timer is None:
            self._add_row(TimerStage(NEW_STAGE_SECONDS))
            self._count_spin.setValue(DEFAULT_REPEAT_COUNT)
        else:
            self._name_edit.setText(timer.name)
            for stage in timer.stages:
                self._add_row(stage)
            self._repeat_cb.setChecked(timer.is_repeating)
            self._forever_cb.setChecked(timer.is_repeating and timer.repeat_count is None)
            self._count_spin.setValue(timer.repeat_count or DEFAULT_REPEAT_COUNT)
            self._custom_alert_cb.setChecked(timer.alert_settings is not None)
            alert = timer.alert_settings or alert

        self._sound_cb.setChecked(alert.play_sound)
        self._sound_combo.setCurrentText(alert.sound_name)
        self._notif_cb.setChecked(alert.show_notification)

        self._update_repeat_enabled()
        self._update_alert_enabled()
        self._update_save_enabled()

    # ══════════════════════════════════════════════════════════════════
    #  STAGE ROWS
    # ══════════════════════════════════════════════════════════════════

    def _add_row(self, stage: TimerStage) -> None:
        row = StageRow(stage, self)
        row.changed.connect(self._update_save_enabled)
        row.remove_requested.connect(self._remove_row)
        self._rows.append(row)
        self._stages_box.addWidget(row)
        self._refresh_rows()

    def _remove_row(self, row: StageRow) -> None:
        if len(self._rows) <= 1:
            return
        self._rows.remove(row)
        self._stages_box.removeWidget(row)
        row.deleteLater()
        self._refresh_rows()

    def _refresh_rows(self) -> None:
        removable = len(self._rows) > 1
        for row in self._rows:
            row.set_removable(removable)
        self._update_save_enabled()

    # ══════════════════════════════════════════════════════════════════
    #  STATE
    # ══════════════════════════════════════════════════════════════════

    def stages(self) -> list[TimerStage]:
        return [row.stage() for row in self._rows]

    def can_save(self) -> bool:
        return can_save_timer(self._name_edit.text(), self.stages())

    def _update_save_enabled(self, *_args) -> None:
        if hasattr(self, "_save_btn"):
            self._save_btn.setEnabled(self.can_save())

    def _update_repeat_enabled(self, *_args) -> None:
        repeating = self._repeat_cb.isChecked()
        self._forever_cb.setEnabled(repeating)
        self._count_spin.setEnabled(repeating and not self._forever_cb.isChecked())

    def _update_alert_enabled(self, *_args) -> None:
        custom = self._custom_alert_cb.isChecked()
        for widget in (self._sound_cb, self._sound_combo, self._notif_cb):
            widget.setEnabled(custom)

    def build_timer(self) -> SavedTimer:
        alert = None
        if self._custom_alert_cb.isChecked():
            alert = AlertSettings(
                play_sound=self._sound_cb.isChecked(),
                show_notification=self._notif_cb.isChecked(),
                sound_name=self._sound_combo.currentText(),
            )
        return build_saved_timer(
            self._name_edit.text(),
            self.stages(),
            is_repeating=self._repeat_cb.isChecked(),
            repeat_forever=self._forever_cb.isChecked(),
            repeat_count=self._count_spin.value(),
            alert_settings=alert,
            existing=self._existing,
        )

    def _on_save(self) -> None:
        if not self.can_save():
            return
        self._saved = self.build_timer()
        self.timer_saved.emit(self._saved)
        self.accept()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def saved_timer(self) -> SavedTimer | None:
        return self._saved

    @property
    def is_editing(self) -> bool:
        return self._existing is not None
