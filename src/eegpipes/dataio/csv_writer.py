"""CSV layout of spectrum captures."""

from __future__ import annotations

import csv
import io
import re
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from ..core.models import FrequencySnapshot

TIMESTAMP_COLUMN = "Timestamp (ms)"
_COLUMN_RE = re.compile(r"^ch(?P<channel>\d+)_(?P<freq>.+)Hz$")


def format_number(value: float) -> str:
    """Integral values print without a fraction (``1.0`` → ``"1"``), others round-trip."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def format_line(values: Iterable[Any]) -> str:
    """Render one CSV record terminated by ``\\n``."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(values)
    return buffer.getvalue()


def header_columns(channels: Sequence[int], freqs: Sequence[float]) -> List[str]:
    """``Timestamp (ms)`` followed by ``ch{i}_{freq}Hz`` for each channel and frequency."""
    columns = [TIMESTAMP_COLUMN]
    labels = [format_number(f) for f in freqs]
    for channel in channels:
        columns.extend(f"ch{channel}_{label}Hz" for label in labels)
    return columns


def snapshot_header(snapshot: FrequencySnapshot) -> List[str]:
    return header_columns(snapshot.channels, snapshot.freqs)


def snapshot_row(snapshot: FrequencySnapshot) -> List[str]:
    """Epoch timestamp then every channel's power values, channel by channel."""
    row = [format_number(snapshot.timestamp)]
    for channel in snapshot.channels:
        row.extend(format_number(v) for v in snapshot.power[channel])
    return row


def render_capture(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Join a header and data rows into the text of one capture file."""
    parts = [format_line(header)]
    parts.extend(format_line(row) for row in rows)
    return "".join(parts)


def parse_capture(text: str) -> Tuple[List[str], List[List[str]]]:
    """Split capture text back into its header and data rows."""
    reader = csv.reader(io.StringIO(text))
    records = [record for record in reader if record]
    if not records:
        raise ValueError("capture is empty")
    return records[0], records[1:]


def capture_columns(header: Sequence[str]) -> Dict[int, List[float]]:
    """Map each channel named in ``header`` to the frequencies it has columns for."""
    if not header or header[0] != TIMESTAMP_COLUMN:
        raise ValueError(f"first column must be {TIMESTAMP_COLUMN!r}")
    layout: Dict[int, List[float]] = {}
    for column in header[1:]:
        match = _COLUMN_RE.match(column)
        if match is None:
            raise ValueError(f"unrecognised capture column {column!r}")
        layout.setdefault(int(match["channel"]), []).append(float(match["freq"]))
    return layout
