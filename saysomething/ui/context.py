"""The single serialized context that owns all UI state."""

import heapq
import itertools
import logging
import queue
import threading
import time
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ScheduledCall:
    """Handle for a timer installed with ``call_at``/``call_later``."""

    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class UiContext:
    """Serial callback loop with timers.

    ``post`` may be called from any thread; everything else, and every
    callback, runs on the thread that drives the loop (``run_forever`` or
    repeated ``process_pending`` calls).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._posted: "queue.Queue[Tuple[Callable[..., Any], Tuple[Any, ...]]]" = queue.Queue()
        self._timers: List[Tuple[float, int, ScheduledCall]] = []
        self._sequence = itertools.count()
        self._timer_lock = threading.Lock()
        self._stop_event = threading.Event()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback(*args)`` on the UI context. Thread-safe."""
        self._posted.put((callback, args))

    def call_at(self, when: float, callback: Callable[..., Any], *args: Any) -> ScheduledCall:
        handle = ScheduledCall(when, callback, args)
        with self._timer_lock:
            heapq.heappush(self._timers, (when, next(self._sequence), handle))
        return handle

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledCall:
        return self.call_at(self.clock() + delay, callback, *args)

    def process_pending(self) -> int:
        """Run posted callbacks, then every timer that is due.

        Returns:
            Number of callbacks run
        """
        count = 0
        for _ in range(self._posted.qsize()):
            try:
                callback, args = self._posted.get_nowait()
            except queue.Empty:
                break
            self._invoke(callback, args)
            count += 1

        now = self.clock()
        while True:
            handle = self._pop_due_timer(now)
            if handle is None:
                break
            self._invoke(handle.callback, handle.args)
            count += 1
        return count

    def _pop_due_timer(self, now: float) -> Optional[ScheduledCall]:
        with self._timer_lock:
            while self._timers:
                when, _, handle = self._timers[0]
                if handle.cancelled:
                    heapq.heappop(self._timers)
                    continue
                if when > now:
                    return None
                heapq.heappop(self._timers)
                return handle
        return None

    def _next_timer_delay(self) -> Optional[float]:
        with self._timer_lock:
            live = [when for when, _, handle in self._timers if not handle.cancelled]
        if not live:
            return None
        return max(0.0, min(live) - self.clock())

    def _invoke(self, callback: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Error in UI callback {getattr(callback, '__name__', callback)}: {e}",
                         exc_info=True)

    def run_forever(self, poll_interval: float = 0.05) -> None:
        """Drive the loop on the calling thread until ``stop()``."""
        self._stop_event.clear()
        logger.debug("UI context loop started")
        while not self._stop_event.is_set():
            self.process_pending()
            delay = self._next_timer_delay()
            timeout = poll_interval if delay is None else min(delay, poll_interval)
            try:
                callback, args = self._posted.get(timeout=timeout)
            except queue.Empty:
                continue
            self._invoke(callback, args)
        logger.debug("UI context loop stopped")

    def run_until(self, predicate: Callable[[], bool], timeout: float, poll_interval: float = 0.05) -> bool:
        """Drive the loop until ``predicate()`` holds or ``timeout`` elapses.

        Returns:
            Whether the predicate became true
        """
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() >= deadline:
                return False
            self.process_pending()
            if predicate():
                break
            try:
                callback, args = self._posted.get(timeout=poll_interval)
            except queue.Empty:
                continue
            self._invoke(callback, args)
        return True

    def stop(self) -> None:
        """Ask ``run_forever`` to return. Thread-safe."""
        self._stop_event.set()
        self.post(lambda: None)
