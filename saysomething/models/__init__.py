"""Data models for the SaySomething application."""

from .audio import AudioFormat, RecorderState
from .session import RecordingSession
from .transcription import (
    RecognitionAuthorization,
    TranscriptionRequest,
    TranscriptionResult,
)
from .ui import PressState
from .observable import ObservableValue

__all__ = [
    "AudioFormat",
    "RecorderState",
    "RecordingSession",
    "RecognitionAuthorization",
    "TranscriptionRequest",
    "TranscriptionResult",
    "PressState",
    "ObservableValue",
]
