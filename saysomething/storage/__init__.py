"""Storage of the recording file."""

from .file_manager import RecordingStore, DEFAULT_FILE_NAME, partial_path_for

__all__ = [
    "RecordingStore",
    "DEFAULT_FILE_NAME",
    "partial_path_for",
]
