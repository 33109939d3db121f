"""Audio capture and playback module."""

from .capture import AudioRecorder, CaptureService
from .playback import AudioPlayer, PlaybackService

__all__ = [
    'AudioRecorder',
    'CaptureService',
    'AudioPlayer',
    'PlaybackService',
]
