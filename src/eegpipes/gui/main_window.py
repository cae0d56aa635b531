"""Main window: one tab per module with charts, settings and capture buttons."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PySide6.QtCore import QTimer, Qt, Slot
from PySide6.QtWidgets import (
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..core.capture import CaptureResult
from ..core.models import SAMPLES_PER_READING
from ..core.source import ReadingSource, SyntheticHeadset
from ..core.subscription import PipelineManager, PipelineRegistry
from .spectrum_view import SpectrumView

logger = logging.getLogger(__name__)


class ModuleTab(QWidget):
    """Chart, settings form and record buttons for one :class:`PipelineManager`."""

    def __init__(self, manager: PipelineManager, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._manager = manager
        self.view = SpectrumView(manager.chart, self)

        settings_group = QGroupBox("Pipeline settings")
        form = QFormLayout(settings_group)
        s = manager.settings

        self.low_spin = self._double_spin(s.cut_off_low, 0.1, 128.0)
        self.high_spin = self._double_spin(s.cut_off_high, 0.1, 128.0)
        self.slice_low_spin = self._double_spin(s.slice_low, 0.0, 128.0)
        self.slice_high_spin = self._double_spin(s.slice_high, 0.0, 128.0)
        self.interval_spin = QSpinBox()
        self.interval_spin.setRange(1, 4096)
        self.interval_spin.setValue(s.epoch_interval)
        self.seconds_spin = self._double_spin(s.capture_seconds, 1.0, 600.0)

        form.addRow("Cut-off low (Hz):", self.low_spin)
        form.addRow("Cut-off high (Hz):", self.high_spin)
        form.addRow("Slice low (Hz):", self.slice_low_spin)
        form.addRow("Slice high (Hz):", self.slice_high_spin)
        form.addRow("Epoch interval (samples):", self.interval_spin)
        form.addRow("Capture length (s):", self.seconds_spin)

        self.apply_button = QPushButton("Apply")
        self.apply_button.clicked.connect(self._on_apply_clicked)
        form.addRow(self.apply_button)

        button_row = QHBoxLayout()
        self._record_buttons: List[QPushButton] = []
        for condition in manager.profile.conditions or ("Baseline",):
            button = QPushButton(f"Record {condition}")
            button.clicked.connect(lambda _checked=False, c=condition: self._on_record_clicked(c))
            button_row.addWidget(button)
            self._record_buttons.append(button)
        button_row.addStretch()

        self.status_label = QLabel("Idle")
        self.status_label.setTextInteractionFlags(Qt.TextSelectableByMouse)

        side = QVBoxLayout()
        side.addWidget(settings_group)
        side.addStretch()

        body = QHBoxLayout()
        body.addWidget(self.view, stretch=1)
        body.addLayout(side)

        layout = QVBoxLayout(self)
        layout.addLayout(body, stretch=1)
        layout.addLayout(button_row)
        layout.addWidget(self.status_label)

    @staticmethod
    def _double_spin(value: float, low: float, high: float) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setDecimals(1)
        spin.setRange(low, high)
        spin.setValue(float(value))
        return spin

    @property
    def manager(self) -> PipelineManager:
        return self._manager

    def start(self) -> None:
        self._manager.start()
        self.view.start()

    def stop(self) -> None:
        self.view.stop()
        self._manager.stop()

    @Slot()
    def _on_apply_clicked(self) -> None:
        changes = dict(
            cut_off_low=self.low_spin.value(),
            cut_off_high=self.high_spin.value(),
            slice_low=self.slice_low_spin.value(),
            slice_high=self.slice_high_spin.value(),
            epoch_interval=self.interval_spin.value(),
            capture_seconds=self.seconds_spin.value(),
        )
        problems = self._manager.settings.with_changes(**changes).violations()
        if problems:
            self.status_label.setText("; ".join(problems))
            return
        self._manager.apply_settings(**changes)
        self.status_label.setText("Settings applied")

    def _on_record_clicked(self, condition: str) -> None:
        try:
            self._manager.start_capture(condition, on_finished=self._on_capture_finished)
        except RuntimeError as exc:
            self.status_label.setText(str(exc))
            return
        self._set_recording(True)
        self.status_label.setText(f"Recording {condition}...")

    def _on_capture_finished(self, result: CaptureResult) -> None:
        self._set_recording(False)
        if result.reason == "export_failed":
            self.status_label.setText(f"Could not save {result.filename}, see log")
            return
        self.status_label.setText(f"Saved {result.location or result.filename} ({result.row_count} rows)")

    def _set_recording(self, active: bool) -> None:
        for button in self._record_buttons:
            button.setEnabled(not active)
        self.apply_button.setEnabled(not active)


class MainWindow(QMainWindow):
    """
    Top-level window feeding a synthetic headset into every module.

    Readings are pushed from a QTimer on the GUI thread, one packet per
    electrode each tick, so pipelines, captures and charts all run on
    the same thread.
    """

    def __init__(
        self,
        registry: PipelineRegistry,
        headset: SyntheticHeadset,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("eegpipes")
        self._registry = registry
        self._source: ReadingSource = registry.source
        self._headset = headset

        self._tabs = QTabWidget(self)
        self._module_tabs: Dict[str, ModuleTab] = {}
        for name in registry.profiles:
            manager = registry.get(name)
            tab = ModuleTab(manager, self)
            self._tabs.addTab(tab, manager.name)
            self._module_tabs[manager.name] = tab
        self.setCentralWidget(self._tabs)

        packet_ms = 1000.0 * SAMPLES_PER_READING / headset.sample_rate
        self._feed_timer = QTimer(self)
        self._feed_timer.setTimerType(Qt.PreciseTimer)
        self._feed_timer.setInterval(max(1, int(round(packet_ms))))
        self._feed_timer.timeout.connect(self._on_feed_tick)

    @property
    def registry(self) -> PipelineRegistry:
        return self._registry

    @property
    def module_tabs(self) -> Dict[str, ModuleTab]:
        return dict(self._module_tabs)

    def start(self, modules: Optional[List[str]] = None) -> None:
        names = modules or list(self._module_tabs)
        for name in names:
            self._module_tabs[name].start()
            logger.info("Started module %s", name)
        self._feed_timer.start()

    @Slot()
    def _on_feed_tick(self) -> None:
        period = SAMPLES_PER_READING / self._headset.sample_rate
        self._source.push_many(self._headset.readings(period))

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._feed_timer.stop()
        for tab in self._module_tabs.values():
            tab.view.stop()
        self._registry.stop_all()
        super().closeEvent(event)


__all__ = ["ModuleTab", "MainWindow"]
