"""Storage for the single fixed-path recording file."""

import logging
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "recording.wav"


def partial_path_for(path) -> Path:
    """Path a recorder writes to before publishing ``path``."""
    path = Path(path)
    return path.with_name(f"{path.name}.part")


class RecordingStore:
    """Owns the one well-known recording file.

    The recording is always ``<data_dir>/<file_name>``. Recorders write the
    next capture to ``partial_path`` and move it over the recording when
    they stop, so the fixed file only ever holds a complete recording.
    """

    def __init__(self, data_dir: str = "./data", file_name: str = DEFAULT_FILE_NAME):
        """Initialize the store.

        Args:
            data_dir: Writable directory holding the recording
            file_name: Constant name of the recording file
        """
        self.data_dir = Path(data_dir)
        self.file_name = file_name
        self.data_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"RecordingStore initialized: {self.recording_path}")

    @property
    def recording_path(self) -> Path:
        return self.data_dir / self.file_name

    @property
    def partial_path(self) -> Path:
        return partial_path_for(self.recording_path)

    def exists(self) -> bool:
        return self.recording_path.is_file()

    def size_bytes(self) -> Optional[int]:
        """Size of the recording, or None if there is none."""
        if not self.exists():
            return None
        return self.recording_path.stat().st_size

    def discard_partial(self) -> None:
        """Remove a partial file left behind by an interrupted capture."""
        if not self.partial_path.exists():
            return
        try:
            self.partial_path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove partial recording {self.partial_path}: {e}")
            return
        logger.info(f"Discarded stale partial recording: {self.partial_path}")
