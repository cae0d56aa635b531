"""Reading sources: the push point, synthetic data and offline replay."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional

import numpy as np

from .models import SAMPLES_PER_READING, EEGReading

logger = logging.getLogger(__name__)

ReadingCallback = Callable[[EEGReading], None]


class ReadingSource:
    """
    Push-style stream of :class:`EEGReading` packets.

    The headset driver (or a replay loop) calls :meth:`push`; every current
    subscriber receives the packet synchronously, in subscription order.
    """

    def __init__(self, name: str = "eeg") -> None:
        self.name = name
        self._observers: Dict[int, ReadingCallback] = {}
        self._next_id = 0
        self._lock = threading.RLock()

    def subscribe(self, callback: ReadingCallback) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it again."""
        with self._lock:
            token = self._next_id
            self._next_id += 1
            self._observers[token] = callback

        def _unsubscribe() -> None:
            with self._lock:
                self._observers.pop(token, None)

        return _unsubscribe

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def push(self, reading: EEGReading) -> None:
        with self._lock:
            observers = list(self._observers.values())
        for callback in observers:
            callback(reading)

    def push_many(self, readings: Iterable[EEGReading]) -> int:
        count = 0
        for reading in readings:
            self.push(reading)
            count += 1
        return count


def readings_from_array(
    data: np.ndarray,
    sample_rate: float,
    *,
    timestamps: Optional[np.ndarray] = None,
    start_ms: float = 0.0,
    packet_size: int = SAMPLES_PER_READING,
    first_index: int = 0,
) -> Iterator[EEGReading]:
    """
    Cut a ``(channels, n_samples)`` array into per-electrode packets.

    Packet timestamps come from ``timestamps`` (ms, one per sample) when
    given, otherwise from ``start_ms`` and the sample rate. A trailing
    partial packet is dropped.
    """
    arr = np.atleast_2d(np.asarray(data, dtype=float))
    n_channels, n_samples = arr.shape
    period_ms = 1000.0 / float(sample_rate)
    for packet, start in enumerate(range(0, n_samples - packet_size + 1, packet_size)):
        if timestamps is not None:
            ts = float(timestamps[start])
        else:
            ts = start_ms + start * period_ms
        for electrode in range(n_channels):
            yield EEGReading(
                index=first_index + packet,
                electrode=electrode,
                timestamp=ts,
                samples=tuple(float(v) for v in arr[electrode, start : start + packet_size]),
            )


class SyntheticHeadset:
    """
    Sinusoids plus Gaussian noise shaped like a headset stream.

    ``tones`` maps channel index to a frequency in Hz; channels without a
    tone carry noise only.
    """

    def __init__(
        self,
        channel_count: int = 4,
        sample_rate: float = 256.0,
        *,
        tones: Mapping[int, float] | None = None,
        amplitude: float = 10.0,
        noise: float = 1.0,
        seed: int | None = None,
    ) -> None:
        self.channel_count = int(channel_count)
        self.sample_rate = float(sample_rate)
        self.tones = dict(tones) if tones is not None else {ch: 10.0 for ch in range(self.channel_count)}
        self.amplitude = float(amplitude)
        self.noise = float(noise)
        self._rng = np.random.default_rng(seed)
        self._sample_pos = 0
        self._packet = 0

    def generate(self, n_samples: int) -> np.ndarray:
        """Return the next ``(channels, n_samples)`` block of signal."""
        t = (self._sample_pos + np.arange(n_samples)) / self.sample_rate
        block = self.noise * self._rng.standard_normal((self.channel_count, n_samples))
        for ch, freq in self.tones.items():
            if 0 <= ch < self.channel_count:
                block[ch] += self.amplitude * np.sin(2.0 * np.pi * freq * t)
        self._sample_pos += n_samples
        return block

    def readings(self, seconds: float, *, start_ms: float = 0.0) -> Iterator[EEGReading]:
        """Yield packets covering ``seconds`` of signal, continuing where the last call stopped."""
        n_packets = int(seconds * self.sample_rate) // SAMPLES_PER_READING
        for _ in range(n_packets):
            offset_ms = start_ms + self._sample_pos * 1000.0 / self.sample_rate
            block = self.generate(SAMPLES_PER_READING)
            yield from readings_from_array(
                block,
                self.sample_rate,
                start_ms=offset_ms,
                first_index=self._packet,
            )
            self._packet += 1


def replay(readings: Iterable[EEGReading], source: ReadingSource, scheduler=None) -> int:
    """
    Push ``readings`` into ``source`` as fast as possible.

    When a :class:`~eegpipes.core.scheduler.ManualScheduler` is given its
    clock follows the reading timestamps, so deadlines fire at the same
    stream time they would have live.
    """
    count = 0
    for reading in readings:
        if scheduler is not None:
            scheduler.advance_to(reading.timestamp / 1000.0)
        source.push(reading)
        count += 1
    logger.debug("Replayed %d readings into %s", count, source.name)
    return count


__all__ = [
    "ReadingSource",
    "ReadingCallback",
    "SyntheticHeadset",
    "readings_from_array",
    "replay",
]
