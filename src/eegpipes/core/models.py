"""Shared dataclasses for readings, samples, epochs and spectra."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

import numpy as np

# Samples carried by one electrode packet of a Muse headset.
SAMPLES_PER_READING = 12


@dataclass(frozen=True)
class EEGReading:
    """One electrode packet as delivered by the headset driver."""

    index: int
    electrode: int
    timestamp: float  # ms, time of the first sample in the packet
    samples: tuple[float, ...]


@dataclass(frozen=True)
class Sample:
    """All channels at one instant, after channel alignment."""

    index: int
    timestamp: float  # ms
    data: tuple[float, ...]


@dataclass(frozen=True)
class Epoch:
    data: np.ndarray  # (channels, epoch_duration)
    sampling_rate: float
    start_time: float  # ms, timestamp of the first sample in the window


@dataclass(frozen=True)
class Spectrum:
    """Full (unsliced) spectrum of one epoch, internal to the chain."""

    timestamp: float  # ms
    freqs: np.ndarray
    psd: np.ndarray  # (channels, len(freqs))


@dataclass(frozen=True)
class FrequencySnapshot:
    """
    Sliced spectrum of one epoch.

    ``power`` maps channel index to one value per entry of ``freqs``. A
    snapshot is shared read-only by every consumer of an emission.
    """

    timestamp: float  # ms
    freqs: tuple[float, ...]
    power: Mapping[int, tuple[float, ...]]

    @classmethod
    def from_arrays(
        cls,
        timestamp: float,
        freqs: Sequence[float] | np.ndarray,
        psd: np.ndarray,
    ) -> FrequencySnapshot:
        freqs_t = tuple(float(f) for f in np.asarray(freqs).reshape(-1))
        power = {
            idx: tuple(float(v) for v in row)
            for idx, row in enumerate(np.atleast_2d(np.asarray(psd, dtype=float)))
        }
        return cls(timestamp=float(timestamp), freqs=freqs_t, power=MappingProxyType(power))

    @property
    def channels(self) -> list[int]:
        return sorted(self.power)
