"""Recording controller: capture, playback and transcription of one file."""

import time
import logging
from datetime import datetime
from typing import Callable, Optional

from ..audio.capture import AudioRecorder, CaptureService
from ..audio.playback import PlaybackService
from ..errors import (
    ConfigurationError,
    PermissionDenied,
    RecognitionError,
    SaySomethingError,
)
from ..models.audio import AudioFormat, RecorderState
from ..models.observable import ObservableValue
from ..models.session import RecordingSession
from ..models.transcription import (
    RecognitionAuthorization,
    TranscriptionRequest,
    TranscriptionResult,
)
from ..storage.file_manager import RecordingStore
from ..transcription.base import AbstractRecognitionBackend
from ..ui.context import UiContext

logger = logging.getLogger(__name__)

TranscriptCallback = Callable[[Optional[str]], None]


def describe_authorization(status) -> str:
    """Human-readable outcome of a recognition authorization request.

    Raises:
        ConfigurationError: ``status`` is not a RecognitionAuthorization
    """
    if status is RecognitionAuthorization.AUTHORIZED:
        return "Speech recognition authorized"
    if status is RecognitionAuthorization.DENIED:
        return "Speech recognition denied"
    if status is RecognitionAuthorization.RESTRICTED:
        return "Speech recognition restricted"
    if status is RecognitionAuthorization.NOT_DETERMINED:
        return "Speech recognition not determined"
    raise ConfigurationError(f"Unknown recognition authorization status: {status!r}")


class RecordingController:
    """Owns the recording session and the reference to the recording file.

    All methods are called on the UI context. Failures are reported through
    the ``error`` observable and leave the controller in its previous state.
    """

    def __init__(self,
                 context: UiContext,
                 capture: CaptureService,
                 playback: PlaybackService,
                 recognizer: AbstractRecognitionBackend,
                 store: RecordingStore,
                 audio_format: Optional[AudioFormat] = None):
        self.context = context
        self.capture = capture
        self.playback = playback
        self.recognizer = recognizer
        self.store = store
        self.audio_format = audio_format or AudioFormat()

        self.state = ObservableValue("recorder_state", RecorderState.IDLE)
        self.error: ObservableValue[Optional[str]] = ObservableValue("recorder_error", None)

        self.permission_granted = False
        self.authorization = RecognitionAuthorization.NOT_DETERMINED

        self.current_session: Optional[RecordingSession] = None
        self.last_completed_session: Optional[RecordingSession] = None
        self.last_result: Optional[TranscriptionResult] = None
        self._recorder: Optional[AudioRecorder] = None
        self._session_counter = 0

    @property
    def is_recording(self) -> bool:
        return self.state.value is RecorderState.RECORDING

    @property
    def latest_session_id(self) -> Optional[int]:
        return self._session_counter or None

    def configure_session(self, category: str = "play_and_record", mode: str = "default") -> bool:
        """Set up audio capture and request both permissions.

        Returns:
            True if recording and recognition are both available
        """
        try:
            self.capture.configure(category, mode)
        except SaySomethingError as e:
            self._report(e, "Audio session setup failed")
            return False

        self.permission_granted = self.capture.request_permission()
        if not self.permission_granted:
            logger.warning("Permission not granted")

        self.request_recognition_authorization()
        return self.permission_granted and self.authorization is RecognitionAuthorization.AUTHORIZED

    def request_recognition_authorization(self) -> RecognitionAuthorization:
        status = self.recognizer.request_authorization()
        try:
            logger.info(describe_authorization(status))
        except ConfigurationError as e:
            self._report(e, "Speech recognition unavailable")
            status = RecognitionAuthorization.NOT_DETERMINED
        self.authorization = status
        return status

    def start_recording(self) -> Optional[RecordingSession]:
        """Begin capturing to the fixed file, stopping any active session first.

        Returns:
            The new session, or None if capture could not start
        """
        if self.is_recording:
            logger.info("Recording already active, stopping it before starting a new one")
            self.stop_recording()

        if not self.permission_granted:
            self._report(PermissionDenied("Recording permission not granted"),
                         "Failed to start recording")
            return None

        self.store.discard_partial()
        path = str(self.store.recording_path)
        try:
            recorder = self.capture.create_recorder(path, self.audio_format)
            self.capture.record(recorder)
        except SaySomethingError as e:
            self._report(e, "Failed to start recording")
            return None

        self._recorder = recorder
        self._session_counter += 1
        self.current_session = RecordingSession(
            session_id=self._session_counter,
            started_at=datetime.now(),
            audio_file=path,
        )
        self.error.set(None)
        self.state.set(RecorderState.RECORDING)
        logger.info(f"Recording started (session {self._session_counter})")
        return self.current_session

    def stop_recording(self) -> Optional[RecordingSession]:
        """End capture and finalize the file. No-op when nothing is recording.

        Returns:
            The finished session, or None if there was none
        """
        if not self.is_recording or self._recorder is None:
            logger.debug("stop_recording called while idle")
            return None

        recorder, session = self._recorder, self.current_session
        self._recorder = None
        saved = self.capture.stop(recorder)

        session.is_active = False
        session.stopped_at = datetime.now()
        session.total_chunks = recorder.total_chunks
        session.peak_level = recorder.peak_level
        self.state.set(RecorderState.IDLE)

        if saved is None:
            self._report(SaySomethingError("recording could not be saved"), "Recording failed")
        else:
            self.last_completed_session = session
            logger.debug(f"Saved {self.store.size_bytes()} bytes to {saved}")
        logger.info(f"Recording stopped (session {session.session_id}, "
                    f"{session.duration_seconds:.1f}s)")
        return session

    def play_recording(self) -> bool:
        """Play the fixed file without waiting for playback to finish.

        Returns:
            True if playback started
        """
        try:
            player = self.playback.create_player(str(self.store.recording_path))
            self.playback.play(player)
        except SaySomethingError as e:
            self._report(e, "Failed to play recording")
            return False
        logger.info("Playing recording")
        return True

    def recognize_speech(self,
                         callback: TranscriptCallback,
                         session: Optional[RecordingSession] = None) -> TranscriptionRequest:
        """Transcribe a completed recording without blocking.

        Args:
            callback: Receives the best transcription or None, exactly once,
                on the UI context
            session: Session whose audio to transcribe; defaults to the last
                completed one. A session that was not saved, or whose audio
                has since been overwritten, resolves to None without a
                service call.
        """
        session = session or self.last_completed_session
        request = TranscriptionRequest(
            session_id=session.session_id if session else None,
            audio_file=str(self.store.recording_path),
            language=self.recognizer.language,
        )
        started = time.time()

        def on_result(text: Optional[str], error: Optional[Exception]) -> None:
            self.context.post(self._deliver, request, started, text, error, callback)

        if self.is_recording:
            on_result(None, RecognitionError("Recording still in progress"))
        elif session is None or not self.store.exists():
            on_result(None, RecognitionError("No completed recording to transcribe"))
        elif session is not self.last_completed_session:
            on_result(None, RecognitionError(
                f"Recording for session {session.session_id} is not the saved file"))
        elif self.authorization is not RecognitionAuthorization.AUTHORIZED:
            on_result(None, PermissionDenied(
                f"Speech recognition not authorized ({self.authorization.value})"))
        else:
            logger.info(f"Submitting session {request.session_id} for recognition")
            self.recognizer.transcribe(request.audio_file, on_result)
        return request

    def _deliver(self,
                 request: TranscriptionRequest,
                 started: float,
                 text: Optional[str],
                 error: Optional[Exception],
                 callback: TranscriptCallback) -> None:
        if text is not None and not text.strip():
            text, error = None, RecognitionError("Empty transcription")
        self.last_result = TranscriptionResult(
            session_id=request.session_id,
            text=text,
            language=request.language,
            service=self.recognizer.service_name,
            processing_time=time.time() - started,
            error=str(error) if error else None,
        )
        if error is not None:
            logger.error(f"Recognition failed: {error}")
        callback(text)

    def is_current_session(self, session_id: Optional[int]) -> bool:
        """Whether ``session_id`` belongs to the most recently started session."""
        return session_id is not None and session_id == self.latest_session_id

    def shutdown(self) -> None:
        self.stop_recording()
        self.recognizer.shutdown()
        self.playback.terminate()
        self.capture.terminate()
        logger.info("RecordingController shut down")

    def _report(self, error: Exception, context: str) -> None:
        message = f"{context}: {error}"
        logger.error(message)
        self.error.set(message)
