"""Live spectrum charts drawn from a :class:`ChartBuffer`."""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import QTimer, Slot
from PySide6.QtWidgets import QVBoxLayout, QWidget

from ..core.consumer import ChartBuffer

DEFAULT_REFRESH_MS = 100

logger = logging.getLogger(__name__)


class SpectrumView(QWidget):
    """
    One pyqtgraph plot per chart slot of a :class:`ChartBuffer`.

    The view polls the buffer on its own timer and only redraws when the
    buffer's update counter moved, so the pipeline never touches Qt
    objects directly.
    """

    def __init__(
        self,
        buffer: ChartBuffer,
        parent: Optional[QWidget] = None,
        refresh_ms: int = DEFAULT_REFRESH_MS,
    ) -> None:
        super().__init__(parent)
        self._buffer = buffer
        self._last_update = -1

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._glw = pg.GraphicsLayoutWidget(self)
        layout.addWidget(self._glw)

        self._line_pen = pg.mkPen(width=1.5)
        self._plots: List[pg.PlotItem] = []
        self._lines: List[pg.PlotDataItem] = []
        self._build_plots()

        self._timer = QTimer(self)
        self._timer.setInterval(max(10, int(refresh_ms)))
        self._timer.timeout.connect(self.refresh)

    def _build_plots(self) -> None:
        self._glw.clear()
        self._plots.clear()
        self._lines.clear()
        count = self._buffer.visible_channels
        for idx in range(count):
            plot = self._glw.addPlot(row=idx, col=0)
            plot.setMenuEnabled(False)
            plot.hideButtons()
            plot.showGrid(x=True, y=True, alpha=0.3)
            plot.enableAutoRange(x=True, y=True)
            plot.setLabel("left", f"ch{idx}")
            if idx == count - 1:
                plot.setLabel("bottom", "Frequency", units="Hz")
            line = plot.plot([], [], pen=self._line_pen)
            self._plots.append(plot)
            self._lines.append(line)

    @property
    def buffer(self) -> ChartBuffer:
        return self._buffer

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    @Slot()
    def refresh(self) -> None:
        """Redraw every slot if the buffer changed since the last call."""
        updates = self._buffer.updates
        if updates == self._last_update:
            return
        self._last_update = updates
        for idx, line in enumerate(self._lines):
            data = self._buffer.read(idx)
            if not data.series:
                line.setData([], [])
                continue
            line.setData(np.asarray(data.labels, dtype=float), np.asarray(data.series, dtype=float))


__all__ = ["SpectrumView"]
