"""Cancellable deadlines for timed captures."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Deadline:
    """
    Handle for a callback scheduled to run once.

    :meth:`cancel` is idempotent and stops a pending callback from running;
    it has no effect once the callback has fired.
    """

    def __init__(self, delay_s: float, callback: Callable[[], None]) -> None:
        self.delay_s = float(delay_s)
        self._callback = callback
        self._lock = threading.Lock()
        self._cancelled = False
        self._fired = False
        self._on_cancel: Callable[[], None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        with self._lock:
            if not self.pending:
                return
            self._cancelled = True
            hook = self._on_cancel
        if hook is not None:
            hook()

    def fire(self) -> None:
        with self._lock:
            if not self.pending:
                return
            self._fired = True
        self._callback()


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Deadline:  # pragma: no cover
        ...

    def time(self) -> float:  # pragma: no cover - protocol
        ...


class ThreadScheduler:
    """Wall-clock scheduler backed by :class:`threading.Timer`."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Deadline:
        deadline = Deadline(delay_s, callback)
        timer = threading.Timer(max(0.0, float(delay_s)), deadline.fire)
        timer.daemon = True
        timer.name = "eegpipes-deadline"
        deadline._on_cancel = timer.cancel
        timer.start()
        return deadline

    def time(self) -> float:
        return time.time()


class ManualScheduler:
    """
    Virtual clock advanced explicitly by the caller.

    Used for replaying recorded data and in tests: callbacks run inside
    :meth:`advance_to` in due-time order.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: List[Tuple[float, int, Deadline]] = []
        self._counter = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Deadline:
        deadline = Deadline(delay_s, callback)
        heapq.heappush(self._queue, (self._now + max(0.0, float(delay_s)), next(self._counter), deadline))
        return deadline

    def advance_to(self, when: float) -> int:
        """Move the clock forward to ``when`` and run everything due; returns how many fired."""
        fired = 0
        while self._queue and self._queue[0][0] <= when:
            due, _, deadline = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if deadline.pending:
                deadline.fire()
                fired += 1
        self._now = max(self._now, float(when))
        return fired

    def advance(self, seconds: float) -> int:
        return self.advance_to(self._now + float(seconds))

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, d in self._queue if d.pending)


__all__ = ["Deadline", "Scheduler", "ThreadScheduler", "ManualScheduler"]
