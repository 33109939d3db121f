"""Framework-neutral view model for the record screen."""

import logging
from typing import Optional

from .context import UiContext
from .press_timer import PressTimer
from ..models.observable import ObservableValue
from ..models.ui import PressState
from ..services.recording_controller import RecordingController

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_TEXT = "Recorded Text Will Appear Here"
DEFAULT_FAILURE_TEXT = "Recognition failed"


class DisplaySurface:
    """Press-and-hold record control, play control and transcript text.

    Renderers subscribe to ``text``, ``status`` and ``timer.elapsed`` and
    forward user input to ``press_changed`` and ``play_pressed`` on the UI
    context.
    """

    def __init__(self,
                 context: UiContext,
                 controller: RecordingController,
                 timer: Optional[PressTimer] = None,
                 min_press_duration: float = 0.1,
                 placeholder_text: str = DEFAULT_PLACEHOLDER_TEXT,
                 failure_text: str = DEFAULT_FAILURE_TEXT):
        self.context = context
        self.controller = controller
        self.timer = timer or PressTimer(context)
        self.min_press_duration = min_press_duration
        self.failure_text = failure_text

        self.press_state = PressState()
        self.text = ObservableValue("display_text", placeholder_text)
        self.status: ObservableValue[Optional[str]] = ObservableValue("display_status", None)
        self.long_presses = 0
        self.discarded_results = 0

        self.timer.elapsed.subscribe(self._on_elapsed)
        self.controller.error.subscribe(self._on_controller_error)

    def press_changed(self, pressing: bool) -> None:
        """Long-press gesture: ``True`` on press-begin, ``False`` on press-end."""
        if pressing == self.press_state.pressed:
            return
        if pressing:
            self._press_began()
        else:
            self._press_ended()

    def _press_began(self) -> None:
        self.press_state.pressed = True
        self.press_state.elapsed = 0.0
        self.timer.start()
        self.controller.start_recording()

    def _press_ended(self) -> None:
        self.press_state.pressed = False
        self.press_state.elapsed = self.timer.stop()
        session = self.controller.stop_recording()

        if session is None:
            logger.info("No recording for this press, skipping recognition")
        else:
            self.controller.recognize_speech(
                lambda text: self._on_transcription(session.session_id, text), session)

        if self.press_state.elapsed >= self.min_press_duration:
            self.long_presses += 1
            logger.info(f"Button long pressed for {self.press_state.elapsed:.1f} seconds")
        else:
            logger.info("Record button tapped")

    def play_pressed(self) -> None:
        self.controller.play_recording()

    def _on_transcription(self, session_id: Optional[int], text: Optional[str]) -> None:
        if not self.controller.is_current_session(session_id):
            self.discarded_results += 1
            logger.info(f"Discarding stale transcription for session {session_id}")
            return
        self.text.set(text if text is not None else self.failure_text)

    def _on_elapsed(self, value: float) -> None:
        if self.press_state.pressed:
            self.press_state.elapsed = value

    def _on_controller_error(self, value: Optional[str]) -> None:
        self.status.set(value)
