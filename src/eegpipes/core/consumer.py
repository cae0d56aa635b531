"""Chart buffer updated from each frequency snapshot."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import List, Optional

from .models import FrequencySnapshot


@dataclass
class ChannelSeries:
    series: tuple[float, ...] = ()
    labels: tuple[float, ...] = ()


@dataclass
class ChartBuffer:
    """
    Per-channel chart data owned by the render surface.

    The surface re-reads ``channels`` on its own refresh timer; nothing is
    pushed to it. ``visible_channels`` fixes how many chart slots exist.
    """

    visible_channels: int = 4
    channels: List[ChannelSeries] = field(init=False)
    updates: int = field(init=False, default=0)
    last_timestamp: Optional[float] = field(init=False, default=None)
    lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        if self.visible_channels <= 0:
            raise ValueError("visible_channels must be positive")
        self.channels = [ChannelSeries() for _ in range(self.visible_channels)]

    def read(self, index: int) -> ChannelSeries:
        """Return a consistent copy of one channel's series and labels."""
        with self.lock:
            slot = self.channels[index]
            return ChannelSeries(series=slot.series, labels=slot.labels)


class SnapshotConsumer:
    """
    Copy each snapshot into a :class:`ChartBuffer`.

    Only channels present both in the snapshot and in the buffer are
    written; a pipeline producing more channels than the chart shows (or
    fewer) is fine.
    """

    def __init__(self, buffer: ChartBuffer) -> None:
        self.buffer = buffer

    def __call__(self, snapshot: FrequencySnapshot) -> None:
        on_snapshot(self.buffer, snapshot)


def on_snapshot(buffer: ChartBuffer, snapshot: FrequencySnapshot) -> None:
    with buffer.lock:
        for index, slot in enumerate(buffer.channels):
            power = snapshot.power.get(index)
            if power is None:
                continue
            slot.series = power
            slot.labels = snapshot.freqs
        buffer.updates += 1
        buffer.last_timestamp = snapshot.timestamp


__all__ = ["ChannelSeries", "ChartBuffer", "SnapshotConsumer", "on_snapshot"]
