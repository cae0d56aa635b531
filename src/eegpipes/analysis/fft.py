"""FFT helpers."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike


def frequency_bins(bin_count: int, sample_rate_hz: float) -> np.ndarray:
    """
    Return the frequency label of every bin produced by :func:`compute_psd`.

    Bins are spaced ``sample_rate_hz / bin_count`` apart and cover
    ``[0, sample_rate_hz / 2)``.
    """
    if bin_count < 2:
        raise ValueError(f"bin_count must be >= 2, got {bin_count}")
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
    return np.arange(bin_count // 2, dtype=float) * (float(sample_rate_hz) / bin_count)


def compute_psd(
    epoch: ArrayLike,
    bin_count: int,
    sample_rate_hz: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the one-sided magnitude spectrum of every channel in ``epoch``.

    Parameters
    ----------
    epoch:
        ``(channels, n_samples)`` array. The most recent ``bin_count``
        samples of each channel are transformed; shorter epochs are
        zero-padded.
    bin_count:
        FFT size.
    sample_rate_hz:
        Sampling rate in Hz. Must be > 0.

    Returns
    -------
    freqs : np.ndarray
        ``bin_count // 2`` frequency labels in Hz.
    psd : np.ndarray
        ``(channels, bin_count // 2)`` magnitudes scaled by ``2 / bin_count``.
    """
    freqs = frequency_bins(bin_count, sample_rate_hz)
    arr = np.asarray(epoch, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.size == 0:
        raise ValueError("epoch must contain at least one sample")

    if arr.shape[1] > bin_count:
        arr = arr[:, -bin_count:]
    spectrum = np.fft.rfft(arr, n=bin_count, axis=1)
    magnitude = np.abs(spectrum[:, : freqs.size]) * (2.0 / bin_count)
    return freqs, magnitude


def slice_spectrum(
    freqs: ArrayLike,
    psd: ArrayLike,
    low_hz: float,
    high_hz: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Keep only the bins whose label lies in ``[low_hz, high_hz]`` (inclusive)."""
    freqs_arr = np.asarray(freqs, dtype=float)
    psd_arr = np.asarray(psd, dtype=float)
    mask = (freqs_arr >= low_hz) & (freqs_arr <= high_hz)
    return freqs_arr[mask], psd_arr[..., mask]


def expected_frequencies(
    bin_count: int,
    sample_rate_hz: float,
    low_hz: float,
    high_hz: float,
) -> np.ndarray:
    """Frequency labels a sliced spectrum will carry, without computing one."""
    freqs = frequency_bins(bin_count, sample_rate_hz)
    return freqs[(freqs >= low_hz) & (freqs <= high_hz)]
