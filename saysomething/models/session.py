"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class RecordingSession:
    """The (at most one) in-flight recording."""
    session_id: int
    started_at: datetime
    audio_file: str
    is_active: bool = True
    stopped_at: Optional[datetime] = None
    total_chunks: int = 0
    peak_level: float = 0.0

    @property
    def duration_seconds(self) -> float:
        end = self.stopped_at or datetime.now()
        return (end - self.started_at).total_seconds()
