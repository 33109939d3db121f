"""Elapsed-time accumulator for the record button."""

import logging
from typing import Optional

from .context import ScheduledCall, UiContext
from ..models.observable import ObservableValue

logger = logging.getLogger(__name__)


class PressTimer:
    """Counts how long the record button has been held.

    Purely observational: nothing is gated on the elapsed value. Ticks are
    UiContext timers at ``start + n * interval``.
    """

    def __init__(self, context: UiContext, interval: float = 0.1):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive: {interval}")
        self.context = context
        self.interval = interval
        self.elapsed = ObservableValue("press_elapsed", 0.0)
        self.ticks = 0
        self._started_at = 0.0
        self._tick_handle: Optional[ScheduledCall] = None

    @property
    def is_running(self) -> bool:
        return self._tick_handle is not None

    def start(self) -> None:
        """Reset to zero and start ticking, replacing any running tick source."""
        self._cancel_tick()
        self.ticks = 0
        self.elapsed.set(0.0)
        self._started_at = self.context.clock()
        self._schedule_next_tick()

    def stop(self) -> float:
        """Stop ticking; the last elapsed value stays readable.

        Returns:
            The final elapsed duration in seconds
        """
        self._cancel_tick()
        logger.info(f"Final press duration: {self.elapsed.value:.1f} seconds")
        return self.elapsed.value

    def _schedule_next_tick(self) -> None:
        when = self._started_at + (self.ticks + 1) * self.interval
        self._tick_handle = self.context.call_at(when, self._tick)

    def _tick(self) -> None:
        self.ticks += 1
        self.elapsed.set(round(self.ticks * self.interval, 6))
        logger.debug(f"Press duration: {self.elapsed.value:.1f} seconds")
        self._schedule_next_tick()

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
