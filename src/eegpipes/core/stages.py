"""Individual steps of the spectrum chain.

Every stage exposes ``process(item) -> list`` returning zero or more
outputs for the next stage. Stages keep whatever state they need (filter
memory, the epoch window) and are created fresh on every rebuild, so two
pipelines never share one.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Protocol

import numpy as np

from ..analysis.fft import compute_psd, slice_spectrum
from ..analysis.filters import StreamingBandpass
from .models import EEGReading, Epoch, FrequencySnapshot, Sample, Spectrum
from .ringbuffer import WindowBuffer

logger = logging.getLogger(__name__)


class StageError(RuntimeError):
    """A pipeline stage failed; the chain that raised it is finished."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"[{stage}] {message}")
        self.stage = stage


class Stage(Protocol):
    name: str

    def process(self, item: Any) -> List[Any]:  # pragma: no cover - protocol
        ...


class ChannelAligner:
    """
    Zip per-electrode packets into multi-channel samples.

    Packets sharing a timestamp form one group; the group is released when a
    packet with a new timestamp shows up. Electrodes missing from a group
    are filled with NaN, electrodes beyond ``channel_count`` are dropped.
    """

    name = "align"

    def __init__(self, channel_count: int, sample_rate: float) -> None:
        self._channel_count = int(channel_count)
        self._sample_period_ms = 1000.0 / float(sample_rate)
        self._pending: List[EEGReading] = []
        self._last_timestamp: Optional[float] = None

    def process(self, reading: EEGReading) -> List[Sample]:
        if not reading.samples:
            raise StageError(self.name, f"reading {reading.index} carries no samples")
        released: List[Sample] = []
        if self._last_timestamp is not None and reading.timestamp != self._last_timestamp:
            released = self.flush()
        self._last_timestamp = reading.timestamp
        if 0 <= reading.electrode < self._channel_count:
            self._pending.append(reading)
        else:
            logger.debug("Dropping electrode %s outside %d channels", reading.electrode, self._channel_count)
        return released

    def flush(self) -> List[Sample]:
        """Release the group currently being collected."""
        group, self._pending = self._pending, []
        if not group:
            return []
        width = len(group[0].samples)
        if any(len(r.samples) != width for r in group):
            raise StageError(
                self.name,
                f"packets at {group[0].timestamp} ms disagree on sample count",
            )
        first = group[0]
        samples = []
        for k in range(width):
            data = [math.nan] * self._channel_count
            for reading in group:
                data[reading.electrode] = float(reading.samples[k])
            samples.append(
                Sample(
                    index=first.index,
                    timestamp=first.timestamp + k * self._sample_period_ms,
                    data=tuple(data),
                )
            )
        return samples


class BandpassStage:
    name = "bandpass"

    def __init__(
        self,
        low_hz: float,
        high_hz: float,
        sample_rate: float,
        channel_count: int,
        order: int = 4,
    ) -> None:
        self._filter = StreamingBandpass(low_hz, high_hz, sample_rate, channel_count, order)

    def process(self, sample: Sample) -> List[Sample]:
        values = np.asarray(sample.data, dtype=float)
        if not np.all(np.isfinite(values)):
            # NaN would poison the filter state for every later sample.
            raise StageError(self.name, f"non-finite value in sample at {sample.timestamp} ms")
        filtered = self._filter.process(values)
        return [Sample(sample.index, sample.timestamp, tuple(float(v) for v in filtered))]


class EpochStage:
    """
    Sliding window of ``duration`` samples emitted every ``interval`` samples.

    The first epoch appears once ``duration`` samples have been seen.
    """

    name = "epoch"

    def __init__(self, duration: int, interval: int, sample_rate: float, channel_count: int) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._duration = int(duration)
        self._interval = int(interval)
        self._sample_rate = float(sample_rate)
        self._window = WindowBuffer(channel_count, self._duration)
        self._seen = 0

    def process(self, sample: Sample) -> List[Epoch]:
        self._window.append(sample.timestamp, sample.data)
        self._seen += 1
        if self._seen < self._duration or (self._seen - self._duration) % self._interval:
            return []
        return [
            Epoch(
                data=self._window.snapshot(),
                sampling_rate=self._sample_rate,
                start_time=self._window.oldest_timestamp(),
            )
        ]


class FFTStage:
    name = "fft"

    def __init__(self, bin_count: int) -> None:
        self._bin_count = int(bin_count)

    def process(self, epoch: Epoch) -> List[Spectrum]:
        freqs, psd = compute_psd(epoch.data, self._bin_count, epoch.sampling_rate)
        return [Spectrum(timestamp=epoch.start_time, freqs=freqs, psd=psd)]


class SliceStage:
    name = "slice"

    def __init__(self, low_hz: float, high_hz: float) -> None:
        self._low = float(low_hz)
        self._high = float(high_hz)

    def process(self, spectrum: Spectrum) -> List[FrequencySnapshot]:
        freqs, psd = slice_spectrum(spectrum.freqs, spectrum.psd, self._low, self._high)
        return [FrequencySnapshot.from_arrays(spectrum.timestamp, freqs, psd)]


__all__ = [
    "StageError",
    "Stage",
    "ChannelAligner",
    "BandpassStage",
    "EpochStage",
    "FFTStage",
    "SliceStage",
]
