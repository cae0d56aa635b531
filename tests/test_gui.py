from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")
pytest.importorskip("pyqtgraph")

from eegpipes.core.scheduler import ManualScheduler  # noqa: E402
from eegpipes.core.subscription import PipelineRegistry  # noqa: E402
from eegpipes.dataio.export import MemoryExporter  # noqa: E402
from eegpipes.gui.main_window import ModuleTab  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture
def tab(qapp, source):
    registry = PipelineRegistry(source, exporter=MemoryExporter(), scheduler=ManualScheduler())
    widget = ModuleTab(registry.get("Predict"))
    widget.start()
    yield widget
    widget.stop()
    widget.deleteLater()


def test_apply_goes_through_manager(tab, source, monkeypatch) -> None:
    manager = tab.manager
    calls = []
    original = manager.apply_settings

    def recording_apply(**changes):
        calls.append(changes)
        return original(**changes)

    monkeypatch.setattr(manager, "apply_settings", recording_apply)
    first_hub = manager.hub
    tab.high_spin.setValue(25.0)
    tab._on_apply_clicked()

    assert len(calls) == 1
    assert calls[0]["cut_off_high"] == 25.0
    assert manager.settings.cut_off_high == 25.0
    assert first_hub.closed
    assert manager.running
    assert source.observer_count == 1


def test_invalid_apply_keeps_chain(tab) -> None:
    manager = tab.manager
    hub = manager.hub
    tab.low_spin.setValue(30.0)
    tab.high_spin.setValue(25.0)
    tab._on_apply_clicked()

    assert manager.hub is hub
    assert manager.settings.cut_off_low == 2.0
    assert "cut-offs" in tab.status_label.text()
