"""Capture deadlines on the Qt event loop."""

from __future__ import annotations

import time
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Qt

from ..core.scheduler import Deadline


class QtScheduler:
    """
    Scheduler whose callbacks run on the GUI thread.

    The headset feed is driven by a QTimer as well, so deadlines and
    snapshots never race each other.
    """

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Deadline:
        deadline = Deadline(delay_s, callback)
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.PreciseTimer)
        timer.timeout.connect(deadline.fire)
        timer.timeout.connect(timer.deleteLater)

        def _stop() -> None:
            timer.stop()
            timer.deleteLater()

        deadline._on_cancel = _stop
        timer.start(max(0, int(round(float(delay_s) * 1000.0))))
        return deadline

    def time(self) -> float:
        return time.time()


__all__ = ["QtScheduler"]
