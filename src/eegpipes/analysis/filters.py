"""Filtering helpers."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike
from scipy import signal


def design_bandpass(
    low_hz: float,
    high_hz: float,
    sample_rate_hz: float,
    order: int = 4,
) -> np.ndarray:
    """
    Design a Butterworth band-pass filter in second-order sections.

    Parameters
    ----------
    low_hz, high_hz:
        Pass band edges in Hz (0 < low_hz < high_hz < sample_rate_hz / 2).
    sample_rate_hz:
        Sampling rate in Hz. Must be > 0.
    order:
        Filter order (default: 4).

    Returns
    -------
    np.ndarray
        SOS coefficients suitable for :func:`scipy.signal.sosfilt`.
    """
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
    nyquist = 0.5 * float(sample_rate_hz)
    if not 0 < low_hz < high_hz < nyquist:
        raise ValueError(
            f"band edges must satisfy 0 < low < high < Nyquist ({nyquist:.3f} Hz), "
            f"got low={low_hz} high={high_hz}"
        )
    return signal.butter(
        order,
        [low_hz / nyquist, high_hz / nyquist],
        btype="bandpass",
        output="sos",
    )


class StreamingBandpass:
    """
    Causal band-pass filter applied one multi-channel sample at a time.

    Filter state is kept per channel between calls, so feeding a signal in
    pieces gives the same output as filtering it in one go.
    """

    def __init__(
        self,
        low_hz: float,
        high_hz: float,
        sample_rate_hz: float,
        channel_count: int,
        order: int = 4,
    ) -> None:
        if channel_count <= 0:
            raise ValueError(f"channel_count must be > 0, got {channel_count}")
        self._sos = design_bandpass(low_hz, high_hz, sample_rate_hz, order)
        self._channel_count = int(channel_count)
        # sosfilt state layout: (n_sections, channels, 2) when filtering along axis 1
        self._zi = np.zeros((self._sos.shape[0], self._channel_count, 2))

    @property
    def channel_count(self) -> int:
        return self._channel_count

    def process(self, block: ArrayLike) -> np.ndarray:
        """
        Filter a ``(channels, n_samples)`` block and return the filtered block.

        A 1-D input is treated as a single multi-channel sample.
        """
        data = np.asarray(block, dtype=float)
        single = data.ndim == 1
        if single:
            data = data.reshape(-1, 1)
        if data.shape[0] != self._channel_count:
            raise ValueError(
                f"expected {self._channel_count} channels, got {data.shape[0]}"
            )
        filtered, self._zi = signal.sosfilt(self._sos, data, axis=1, zi=self._zi)
        return filtered[:, 0] if single else filtered
