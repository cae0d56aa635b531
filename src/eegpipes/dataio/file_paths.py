"""Helpers for constructing capture file names."""

import re

# Path separators and control characters cannot appear in a file name.
_UNSAFE_RE = re.compile(r"[\\/\x00-\x1f]+")


def recording_filename(module_name: str, condition: str, timestamp_ms: int) -> str:
    """
    Name of an exported capture.

    Example: ``"Ssvep_Slow Frequency_Recording_1700000000000.csv"``
    """
    return f"{module_name}_{condition}_Recording_{int(timestamp_ms)}.csv"


def safe_filename(name: str) -> str:
    """Replace characters that would escape the export directory with ``_``."""
    cleaned = _UNSAFE_RE.sub("_", name).strip()
    if cleaned in {"", ".", ".."}:
        return "recording.csv"
    return cleaned
