"""Bounded-duration recording of spectrum snapshots into one CSV file.

A capture goes through four states::

    IDLE -> HEADER_PENDING -> RECORDING -> FINALIZED

``start_capture`` registers two consumers on the live hub: a one-shot
consumer that derives the header from the first snapshot and then removes
itself, and a row consumer that appends one line per snapshot. A deadline
of ``capture_seconds`` ends the capture; so does the hub closing (stage
failure or rebuild). Finalizing always exports a file, header-only when no
snapshot arrived in time.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..analysis.fft import expected_frequencies
from ..config.settings import PipelineSettings
from ..dataio.csv_writer import header_columns, render_capture, snapshot_header, snapshot_row
from ..dataio.export import CSV_MIME_TYPE, FileExporter
from ..dataio.file_paths import recording_filename
from .models import FrequencySnapshot
from .multicast import MulticastHub
from .scheduler import Deadline, Scheduler, ThreadScheduler

logger = logging.getLogger(__name__)


class CaptureState(enum.Enum):
    IDLE = "idle"
    HEADER_PENDING = "header_pending"
    RECORDING = "recording"
    FINALIZED = "finalized"


@dataclass
class CaptureSession:
    module_name: str
    condition: str
    settings: PipelineSettings
    start_time: float  # s, recorder clock
    deadline_time: float
    header: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    def to_text(self) -> str:
        return render_capture(self.header, self.rows)


@dataclass(frozen=True)
class CaptureResult:
    filename: str
    blob: bytes
    mime_type: str
    row_count: int
    reason: str  # "deadline", "error", "disconnected", "aborted" or "export_failed"
    location: object = None  # whatever the exporter returned

    @property
    def header_only(self) -> bool:
        return self.row_count == 0


def fallback_header(settings: PipelineSettings) -> List[str]:
    """Header predicted from settings, used when no snapshot arrived."""
    freqs = expected_frequencies(
        settings.bin_count, settings.sample_rate, settings.slice_low, settings.slice_high
    )
    return header_columns(range(settings.channel_count), freqs)


class CaptureRecorder:
    """
    Record the snapshots of one module's live hub for a fixed duration.

    Parameters
    ----------
    module_name:
        Used as the file name prefix.
    hub_provider:
        Returns the module's current hub (``None`` when nothing is running).
    exporter:
        Called once per finished capture with the CSV bytes, MIME type and
        suggested file name.
    scheduler:
        Arms the deadline; defaults to a wall-clock :class:`ThreadScheduler`.
    clock:
        Seconds since the epoch, used for session times and the file name.
    on_finished:
        Optional hook receiving each :class:`CaptureResult`.
    """

    def __init__(
        self,
        module_name: str,
        hub_provider: Callable[[], Optional[MulticastHub]],
        exporter: FileExporter,
        *,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
        on_finished: Callable[[CaptureResult], None] | None = None,
    ) -> None:
        self.module_name = module_name
        self._hub_provider = hub_provider
        self._exporter = exporter
        self._scheduler: Scheduler = scheduler or ThreadScheduler()
        self._clock = clock or time.time
        self._on_finished = on_finished

        self._lock = threading.RLock()
        self._state = CaptureState.IDLE
        self._session: Optional[CaptureSession] = None
        self._result: Optional[CaptureResult] = None
        self._hub: Optional[MulticastHub] = None
        self._header_id: Optional[int] = None
        self._row_id: Optional[int] = None
        self._deadline: Optional[Deadline] = None

    # ------------------------------------------------------------------ status
    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def in_progress(self) -> bool:
        return self._state in (CaptureState.HEADER_PENDING, CaptureState.RECORDING)

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    @property
    def result(self) -> Optional[CaptureResult]:
        return self._result

    # ------------------------------------------------------------------- start
    def start_capture(self, settings: PipelineSettings, condition: str) -> CaptureSession:
        """Begin a new capture session on the live hub."""
        with self._lock:
            if self.in_progress:
                raise RuntimeError(f"{self.module_name}: a capture is already running")
            hub = self._hub_provider()
            if hub is None or hub.closed:
                raise RuntimeError(f"{self.module_name}: no live pipeline to record from")

            now = self._clock()
            session = CaptureSession(
                module_name=self.module_name,
                condition=condition,
                settings=settings,
                start_time=now,
                deadline_time=now + settings.capture_seconds,
            )
            self._session = session
            self._result = None
            self._hub = hub
            self._state = CaptureState.HEADER_PENDING
            logger.info(
                "Recording %s / %s for %s s",
                self.module_name,
                condition,
                settings.capture_seconds,
            )

            self._header_id = hub.register(lambda snap: self._on_header(session, snap))
            self._deadline = self._scheduler.call_later(
                settings.capture_seconds, lambda: self._finalize(session, "deadline")
            )
            self._row_id = hub.register(
                lambda snap: self._on_row(session, snap),
                on_close=lambda err: self._finalize(session, "error" if err else "disconnected"),
            )
            return session

    # --------------------------------------------------------------- consumers
    def _on_header(self, session: CaptureSession, snapshot: FrequencySnapshot) -> None:
        with self._lock:
            if session is not self._session or self._state is not CaptureState.HEADER_PENDING:
                return
            session.header = snapshot_header(snapshot)
            self._state = CaptureState.RECORDING
            if self._hub is not None and self._header_id is not None:
                self._hub.unregister(self._header_id)
            self._header_id = None
        logger.debug("%s header: %d columns", self.module_name, len(session.header))

    def _on_row(self, session: CaptureSession, snapshot: FrequencySnapshot) -> None:
        with self._lock:
            if session is not self._session or self._state is not CaptureState.RECORDING:
                return
            session.rows.append(snapshot_row(snapshot))

    # ----------------------------------------------------------------- finish
    def _release(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
        if self._hub is not None:
            for reg_id in (self._header_id, self._row_id):
                if reg_id is not None:
                    self._hub.unregister(reg_id)
        self._deadline = None
        self._header_id = None
        self._row_id = None
        self._hub = None

    def _finalize(self, session: CaptureSession, reason: str) -> Optional[CaptureResult]:
        with self._lock:
            if session is not self._session or not self.in_progress:
                return None
            self._release()
            self._state = CaptureState.FINALIZED
            if not session.header:
                session.header = fallback_header(session.settings)
            blob = session.to_text().encode("utf-8")
            filename = recording_filename(
                session.module_name,
                session.condition,
                int(round(self._clock() * 1000.0)),
            )

        try:
            location = self._exporter(blob, CSV_MIME_TYPE, filename)
        except Exception:
            logger.exception("Exporting %s failed", filename)
            location = None
            reason = "export_failed"
        result = CaptureResult(
            filename=filename,
            blob=blob,
            mime_type=CSV_MIME_TYPE,
            row_count=len(session.rows),
            reason=reason,
            location=location,
        )
        self._result = result
        logger.info(
            "Finished %s (%s): %d rows x %d columns",
            filename,
            reason,
            len(session.rows),
            len(session.header),
        )
        if self._on_finished is not None:
            self._on_finished(result)
        return result

    def finalize_now(self) -> Optional[CaptureResult]:
        """End the running capture early and export what was recorded."""
        session = self._session
        if session is None:
            return None
        return self._finalize(session, "aborted")

    def abort(self) -> None:
        """Drop the running capture without exporting anything."""
        with self._lock:
            if not self.in_progress:
                return
            self._release()
            self._state = CaptureState.FINALIZED
            self._result = None
        logger.info("Aborted %s capture", self.module_name)


__all__ = [
    "CaptureState",
    "CaptureSession",
    "CaptureResult",
    "CaptureRecorder",
    "fallback_header",
]
