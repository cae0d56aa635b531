"""Utilities for loading raw EEG sample logs for replay."""

from pathlib import Path
from typing import Tuple
import io

import numpy as np


def _looks_numeric_csv_line(line: str) -> bool:
    """Heuristically decide if a CSV line is numeric-only (no header)."""
    stripped = line.strip()
    if not stripped:
        return False
    tokens = [t for t in stripped.split(",") if t]
    if not tokens:
        return False
    try:
        for t in tokens:
            float(t)
        return True
    except ValueError:
        return False


def load_csv(path: Path) -> np.ndarray:
    """
    Load a CSV file containing numeric data as a 2-D array.

    The file may optionally include a single header row, which will be
    skipped automatically.
    """
    with path.open("r", encoding="utf-8") as f:
        first_line = f.readline()
        rest = f.read()

    if _looks_numeric_csv_line(first_line):
        buffer = io.StringIO(first_line + rest)
    else:
        buffer = io.StringIO(rest)

    return np.atleast_2d(np.loadtxt(buffer, delimiter=",", ndmin=2))


def load_raw_samples(path: Path, channel_count: int | None = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load a raw sample log laid out as ``timestamp_ms, ch0, ch1, ...``.

    Returns
    -------
    timestamps : np.ndarray
        One timestamp (ms) per sample.
    data : np.ndarray
        ``(channels, n_samples)`` array, truncated to ``channel_count``
        columns when given.
    """
    table = load_csv(Path(path))
    if table.shape[1] < 2:
        raise ValueError(f"{path} needs a timestamp column and at least one channel")
    timestamps = table[:, 0]
    data = table[:, 1:].T
    if channel_count is not None:
        if channel_count > data.shape[0]:
            raise ValueError(
                f"{path} has {data.shape[0]} channels, {channel_count} requested"
            )
        data = data[:channel_count]
    return timestamps, data
