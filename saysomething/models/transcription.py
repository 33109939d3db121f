"""Transcription-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class RecognitionAuthorization(Enum):
    """Closed set of outcomes of a recognition authorization request."""
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"
    NOT_DETERMINED = "not_determined"


@dataclass
class TranscriptionRequest:
    """A recognition request tagged with the session it was made for."""
    session_id: Optional[int]
    audio_file: str
    language: str
    submitted_at: datetime = field(default_factory=datetime.now)


@dataclass
class TranscriptionResult:
    """Result of a recognition request. ``text`` is None on failure."""
    session_id: Optional[int]
    text: Optional[str]
    language: str
    service: str
    processing_time: float = 0.0
    confidence: float = 0.0
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return self.text is not None
