from __future__ import annotations

"""Timer helpers built on a Tk-style scheduler.

:class:`Debouncer` is a single-slot trailing-edge timer: every trigger
cancels the pending call and re-arms it, so a burst of triggers inside the
quiescence window runs the wrapped function once.

:class:`VirtualScheduler` implements ``after``/``after_cancel`` on a manual
clock. Hosts without a Tk mainloop pump it from their own event loop; tests
use it to move time deterministically.
"""

import heapq
import itertools
import logging
from typing import Any, Callable, List, Optional, Tuple

from link_toolkit.core.interfaces import Scheduler

logger = logging.getLogger(__name__)

__all__ = ["Debouncer", "VirtualScheduler"]


class Debouncer:
    """Collapse rapid triggers into one call after ``delay_ms`` of quiet.

    Parameters
    ----------
    scheduler : Scheduler
        Object exposing ``after(ms, func)`` and ``after_cancel(handle)``.
    delay_ms : int
        Quiescence window. Negative values are coerced to 0.
    func : Callable[[], None]
        Function run when the window elapses.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: int, func: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._delay_ms: int = max(0, int(delay_ms))
        self._func = func
        self._handle: Optional[Any] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.after(self._delay_ms, self._fire)

    def cancel(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            self._scheduler.after_cancel(handle)
        except Exception:
            # Tk raises if the callback already ran; nothing left to cancel
            logger.debug("after_cancel failed for stale handle %r", handle, exc_info=True)

    def flush(self) -> None:
        """Run a pending call now instead of waiting for the window."""
        if not self.pending:
            return
        self.cancel()
        self._func()

    def _fire(self) -> None:
        self._handle = None
        self._func()


class VirtualScheduler:
    """Manual-clock scheduler with the Tk ``after`` API.

    Callbacks run only from :meth:`advance` (or :meth:`run_pending`), in due
    time order, ties broken by scheduling order.
    """

    def __init__(self) -> None:
        self.now: int = 0
        self._queue: List[Tuple[int, int, Callable[[], Any]]] = []
        self._cancelled: set[int] = set()
        self._ids = itertools.count(1)

    def after(self, ms: int, func: Callable[[], Any]) -> int:
        handle = next(self._ids)
        heapq.heappush(self._queue, (self.now + max(0, int(ms)), handle, func))
        return handle

    def after_cancel(self, handle: Any) -> None:
        self._cancelled.add(handle)

    def pending_count(self) -> int:
        return sum(1 for _, handle, _ in self._queue if handle not in self._cancelled)

    def advance(self, ms: int) -> int:
        """Move the clock forward and run every callback that became due.

        Callbacks scheduled while running are honoured if they fall inside
        the new time. Returns the number of callbacks run.
        """
        target = self.now + max(0, int(ms))
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, handle, func = heapq.heappop(self._queue)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            self.now = due
            func()
            ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run callbacks that are already due without moving the clock."""
        return self.advance(0)
