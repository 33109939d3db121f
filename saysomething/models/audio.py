"""Audio-related data models."""

from dataclasses import dataclass
from enum import Enum


SUPPORTED_CODECS = ("LINEAR16",)
QUALITY_LEVELS = ("min", "low", "medium", "high", "max")


class RecorderState(Enum):
    """State of the recorder; transcription is not a recorder state."""
    IDLE = "idle"
    RECORDING = "recording"


@dataclass(frozen=True)
class AudioFormat:
    """Encoding parameters used when creating a recorder."""
    codec: str = "LINEAR16"  # PCM samples in a WAV container
    sample_rate: int = 44100
    channels: int = 2
    quality: str = "max"
    chunk_size: int = 1024  # Frames per stream read
    sample_width: int = 2  # Bytes per sample

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.channels * self.sample_width
