"""Fan-out of one computed spectrum chain to many consumers."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .models import EEGReading, FrequencySnapshot
from .stages import StageError

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from .pipeline import Pipeline
    from .source import ReadingSource

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[FrequencySnapshot], None]
CloseCallback = Callable[[Optional[BaseException]], None]


class HubState(enum.Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass
class _Registration:
    on_snapshot: SnapshotCallback
    on_close: Optional[CloseCallback] = None


class MulticastHub:
    """
    Run a :class:`Pipeline` once per reading and replay its output to every consumer.

    The hub is inert until :meth:`connect` subscribes it to the source.
    :meth:`disconnect` stops the whole chain: the source subscription is
    dropped and every registered consumer is closed together. A stage
    failure does the same, with the :class:`StageError` handed to each
    consumer's ``on_close``. A closed hub is never reopened; build a new
    one instead.
    """

    def __init__(self, source: ReadingSource, pipeline: Pipeline, *, name: str = "") -> None:
        self.name = name or source.name
        self._source = source
        self._pipeline = pipeline
        self._consumers: Dict[int, _Registration] = {}
        self._next_id = 1
        self._state = HubState.IDLE
        self._error: Optional[StageError] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._emitted = 0
        self._lock = threading.RLock()

    # ---------------------------------------------------------------- consumers
    def register(self, callback: SnapshotCallback, on_close: Optional[CloseCallback] = None) -> int:
        """
        Add a consumer and return its registration id.

        Registering on a hub that is already closed calls ``on_close``
        straight away.
        """
        with self._lock:
            reg_id = self._next_id
            self._next_id += 1
            finished = self._state in (HubState.CLOSED, HubState.FAILED)
            if not finished:
                self._consumers[reg_id] = _Registration(callback, on_close)
            error = self._error
        if finished and on_close is not None:
            on_close(error)
        return reg_id

    def unregister(self, registration_id: int) -> bool:
        """Remove a consumer; unknown ids are ignored. Returns True if one was removed."""
        with self._lock:
            return self._consumers.pop(registration_id, None) is not None

    @property
    def consumer_count(self) -> int:
        with self._lock:
            return len(self._consumers)

    # ---------------------------------------------------------------- lifecycle
    @property
    def state(self) -> HubState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is HubState.CONNECTED

    @property
    def closed(self) -> bool:
        return self._state in (HubState.CLOSED, HubState.FAILED)

    @property
    def error(self) -> Optional[StageError]:
        return self._error

    @property
    def emitted_count(self) -> int:
        """Number of snapshots computed (and broadcast) so far."""
        return self._emitted

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    def connect(self) -> None:
        """Start pulling from the source. Later calls are no-ops."""
        with self._lock:
            if self._state is HubState.CONNECTED:
                return
            if self.closed:
                raise RuntimeError(f"Hub {self.name!r} is closed; build a new pipeline")
            self._state = HubState.CONNECTED
            self._unsubscribe = self._source.subscribe(self._on_reading)
        logger.info("Connected %s (%d consumers)", self.name, self.consumer_count)

    def disconnect(self) -> None:
        """Stop the chain for every consumer. Safe to call repeatedly."""
        self._close(HubState.CLOSED, None)

    # ----------------------------------------------------------------- delivery
    def _on_reading(self, reading: EEGReading) -> None:
        if self._state is not HubState.CONNECTED:
            return
        try:
            snapshots = self._pipeline.push(reading)
        except StageError as exc:
            logger.exception("Pipeline %s stopped: %s", self.name, exc)
            self._close(HubState.FAILED, exc)
            return
        for snapshot in snapshots:
            self._broadcast(snapshot)

    def _broadcast(self, snapshot: FrequencySnapshot) -> None:
        with self._lock:
            if self._state is not HubState.CONNECTED:
                return
            self._emitted += 1
            targets = list(self._consumers.items())
        logger.debug("%s epoch at %.1f ms -> %d consumers", self.name, snapshot.timestamp, len(targets))
        for reg_id, registration in targets:
            # A consumer removed by an earlier one during this emission is skipped.
            with self._lock:
                if reg_id not in self._consumers:
                    continue
            try:
                registration.on_snapshot(snapshot)
            except Exception:
                logger.exception("Consumer %d of %s raised; continuing", reg_id, self.name)

    def _close(self, state: HubState, error: Optional[StageError]) -> None:
        with self._lock:
            if self.closed:
                return
            self._state = state
            self._error = error
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            closing: List[_Registration] = list(self._consumers.values())
            self._consumers.clear()
        if unsubscribe is not None:
            unsubscribe()
        for registration in closing:
            if registration.on_close is None:
                continue
            try:
                registration.on_close(error)
            except Exception:
                logger.exception("Close handler of %s raised", self.name)
        logger.info("Closed %s (%s)", self.name, state.value)


__all__ = ["MulticastHub", "HubState", "SnapshotCallback", "CloseCallback"]
