"""Speech recognition backends for SaySomething."""

from .base import AbstractRecognitionBackend, RecognitionCallback
from .google_backend import GoogleSpeechBackend

__all__ = [
    "AbstractRecognitionBackend",
    "RecognitionCallback",
    "GoogleSpeechBackend",
]
