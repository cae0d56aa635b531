from __future__ import annotations

import numpy as np


class WindowBuffer:
    """
    Fixed-size multi-channel ring buffer backing the epoch window.

    Stores one column per sample plus its timestamp and overwrites the
    oldest column when full.
    """

    def __init__(self, channels: int, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if channels <= 0:
            raise ValueError("channels must be positive")
        self._capacity = capacity
        self._data = np.zeros((channels, capacity), dtype=float)
        self._times = np.zeros(capacity, dtype=float)
        self._start = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def channels(self) -> int:
        return self._data.shape[0]

    def append(self, timestamp: float, values) -> None:
        idx = (self._start + self._size) % self._capacity
        self._data[:, idx] = values
        self._times[idx] = timestamp
        if self._size < self._capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self._capacity

    def is_full(self) -> bool:
        return self._size == self._capacity

    def __len__(self) -> int:  # pragma: no cover - trivial
        return self._size

    def oldest_timestamp(self) -> float:
        if self._size == 0:
            raise IndexError("WindowBuffer is empty")
        return float(self._times[self._start])

    def snapshot(self) -> np.ndarray:
        """Return a ``(channels, len)`` copy in chronological order."""
        order = (self._start + np.arange(self._size)) % self._capacity
        return self._data[:, order]
