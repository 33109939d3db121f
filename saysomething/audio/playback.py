"""Fire-and-forget playback of the recording file."""

import wave
import logging
from pathlib import Path
from threading import Thread, Event
from typing import Optional

import pyaudio

from ..errors import PlayerCreationError


logger = logging.getLogger(__name__)


class AudioPlayer:
    """Plays one WAV file on the default output device."""

    def __init__(self, pyaudio_instance: pyaudio.PyAudio, path: str, chunk_size: int = 1024):
        """Open and validate the file.

        Raises:
            PlayerCreationError: file missing or not a decodable WAV file
        """
        self.path = Path(path)
        if not self.path.is_file():
            raise PlayerCreationError(f"Recording not found: {self.path}")

        try:
            with wave.open(str(self.path), 'rb') as wf:
                self.channels = wf.getnchannels()
                self.sample_width = wf.getsampwidth()
                self.sample_rate = wf.getframerate()
                self.total_frames = wf.getnframes()
        except (wave.Error, EOFError, OSError) as e:
            raise PlayerCreationError(f"Cannot decode recording {self.path}: {e}") from e

        self.pyaudio_instance = pyaudio_instance
        self.chunk_size = chunk_size
        self.stop_event = Event()
        self.playback_thread: Optional[Thread] = None

    @property
    def duration_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.total_frames / self.sample_rate

    @property
    def is_playing(self) -> bool:
        return self.playback_thread is not None and self.playback_thread.is_alive()

    def play(self) -> None:
        """Start playback in a background thread and return immediately."""
        self.stop_event.clear()
        self.playback_thread = Thread(target=self._play_file, daemon=True)
        self.playback_thread.name = "AudioPlayerThread"
        self.playback_thread.start()
        logger.info(f"Playing recording ({self.duration_seconds:.1f}s)")

    def stop(self) -> None:
        self.stop_event.set()
        if self.playback_thread and self.playback_thread.is_alive():
            self.playback_thread.join(timeout=1.0)

    def _play_file(self) -> None:
        stream = None
        try:
            with wave.open(str(self.path), 'rb') as wf:
                stream = self.pyaudio_instance.open(
                    format=pyaudio.get_format_from_width(self.sample_width),
                    channels=self.channels,
                    rate=self.sample_rate,
                    output=True,
                )
                data = wf.readframes(self.chunk_size)
                while data and not self.stop_event.is_set():
                    stream.write(data)
                    data = wf.readframes(self.chunk_size)
        except (OSError, ValueError, wave.Error) as e:
            logger.error(f"Failed to play recording: {e}")
        finally:
            if stream is not None:
                stream.stop_stream()
                stream.close()


class PlaybackService:
    """Creates players and keeps at most one of them playing."""

    def __init__(self, chunk_size: int = 1024):
        self.chunk_size = chunk_size
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.current_player: Optional[AudioPlayer] = None

    def create_player(self, path: str) -> AudioPlayer:
        if self.pyaudio_instance is None:
            try:
                self.pyaudio_instance = pyaudio.PyAudio()
            except OSError as e:
                raise PlayerCreationError(f"Audio output unavailable: {e}") from e
        return AudioPlayer(self.pyaudio_instance, path, chunk_size=self.chunk_size)

    def play(self, handle: AudioPlayer) -> None:
        if self.current_player is not None and self.current_player is not handle:
            self.current_player.stop()
        self.current_player = handle
        handle.play()

    def terminate(self) -> None:
        if self.current_player is not None:
            self.current_player.stop()
            self.current_player = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
