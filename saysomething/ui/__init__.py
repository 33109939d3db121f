"""UI layer: UI context, press timer, display surface and terminal screen."""

from .context import ScheduledCall, UiContext
from .press_timer import PressTimer

__all__ = [
    "ScheduledCall",
    "UiContext",
    "PressTimer",
]
