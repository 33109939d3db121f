"""Audio capture: session configuration, permission and file recorders."""

import os
import wave
import logging
from pathlib import Path
from threading import Thread, Event
from typing import Optional

import numpy as np
import pyaudio

from ..errors import RecorderCreationError, SessionConfigurationError
from ..models.audio import AudioFormat, QUALITY_LEVELS, SUPPORTED_CODECS
from ..storage.file_manager import partial_path_for


logger = logging.getLogger(__name__)

SESSION_CATEGORIES = ("record", "play_and_record")
SESSION_MODES = ("default", "measurement", "voice_chat")


class AudioRecorder:
    """Records from the default input device into one WAV file.

    Frames are written to a ``.part`` file by a background thread; ``stop()``
    finalizes it and moves it over ``path``, overwriting the previous
    recording.
    """

    def __init__(self, pyaudio_instance: pyaudio.PyAudio, path: str, audio_format: AudioFormat):
        """Create the recorder and open its input stream.

        Raises:
            RecorderCreationError: unsupported format, unwritable directory
                or input stream that cannot be opened
        """
        if audio_format.codec not in SUPPORTED_CODECS:
            raise RecorderCreationError(f"Unsupported codec: {audio_format.codec}")
        if audio_format.quality not in QUALITY_LEVELS:
            raise RecorderCreationError(f"Unsupported quality: {audio_format.quality}")
        if audio_format.channels < 1 or audio_format.sample_rate <= 0:
            raise RecorderCreationError(
                f"Invalid format: {audio_format.sample_rate}Hz, {audio_format.channels} channels")

        self.path = Path(path)
        self.partial_path = partial_path_for(self.path)
        if not self.path.parent.is_dir() or not os.access(self.path.parent, os.W_OK):
            raise RecorderCreationError(f"Recording directory is not writable: {self.path.parent}")

        self.audio_format = audio_format
        self.pyaudio_instance = pyaudio_instance
        self.sample_format = pyaudio.get_format_from_width(audio_format.sample_width)

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self.wave_file: Optional[wave.Wave_write] = None

        # Statistics tracking
        self.total_chunks = 0
        self.peak_level = 0.0
        self.error: Optional[Exception] = None

        try:
            self.stream = self.pyaudio_instance.open(
                format=self.sample_format,
                channels=audio_format.channels,
                rate=audio_format.sample_rate,
                input=True,
                frames_per_buffer=audio_format.chunk_size,
                start=False,
            )
        except (OSError, ValueError) as e:
            raise RecorderCreationError(f"Failed to open input stream: {e}") from e

        logger.info(f"Recorder prepared: {self.path} ({audio_format.sample_rate}Hz, "
                    f"{audio_format.channels} channels, quality={audio_format.quality})")

    def record(self) -> None:
        """Start recording in a background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        try:
            self.wave_file = wave.open(str(self.partial_path), 'wb')
            self.wave_file.setnchannels(self.audio_format.channels)
            self.wave_file.setsampwidth(self.audio_format.sample_width)
            self.wave_file.setframerate(self.audio_format.sample_rate)
            self.stream.start_stream()
        except (OSError, wave.Error) as e:
            self._close_wave_file()
            self._discard_partial()
            raise RecorderCreationError(f"Failed to start recording: {e}") from e

        self.stop_event.clear()
        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioRecorderThread"
        self.recording_thread.start()
        self.is_recording = True
        logger.info("Recording started")

    def stop(self) -> Optional[str]:
        """Stop recording and publish the file.

        Returns:
            Path of the finalized recording, or None if nothing was recording
        """
        if not self.is_recording:
            return None

        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        self._close_stream()
        self._close_wave_file()

        if self.error is not None:
            logger.error(f"Recording failed, keeping previous file: {self.error}")
            self._discard_partial()
            return None

        try:
            os.replace(self.partial_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save recording {self.path}: {e}")
            return None
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}, "
                    f"peak level: {self.peak_level:.2f}")
        return str(self.path)

    def _record_continuously(self) -> None:
        """Internal method: read chunks into the WAV file until stopped."""
        try:
            while not self.stop_event.is_set():
                chunk = self.stream.read(self.audio_format.chunk_size, exception_on_overflow=False)
                self.wave_file.writeframes(chunk)
                self.total_chunks += 1
                self._update_peak_level(chunk)
        except (OSError, wave.Error) as e:
            logger.error(f"Error reading audio stream: {e}")
            self.error = e

    def _update_peak_level(self, chunk: bytes) -> None:
        if self.audio_format.sample_width != 2 or not chunk:
            return
        samples = np.frombuffer(chunk, dtype=np.int16)
        if samples.size:
            level = float(np.max(np.abs(samples.astype(np.int32)))) / 32768.0
            self.peak_level = max(self.peak_level, level)

    def _close_stream(self) -> None:
        try:
            self.stream.stop_stream()
            self.stream.close()
        except OSError as e:
            logger.warning(f"Error closing input stream: {e}")

    def _close_wave_file(self) -> None:
        if self.wave_file is None:
            return
        try:
            self.wave_file.close()
        except (OSError, wave.Error) as e:
            logger.error(f"Error finalizing recording file: {e}")
            if self.error is None:
                self.error = e
        finally:
            self.wave_file = None

    def _discard_partial(self) -> None:
        try:
            self.partial_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial recording {self.partial_path}: {e}")


class CaptureService:
    """Configures the audio backend and hands out recorders."""

    def __init__(self):
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.category: Optional[str] = None
        self.mode: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.pyaudio_instance is not None

    def configure(self, category: str = "play_and_record", mode: str = "default") -> None:
        """Initialize PortAudio for the given session category and mode.

        Raises:
            SessionConfigurationError: unknown category/mode or PortAudio failure
        """
        if category not in SESSION_CATEGORIES:
            raise SessionConfigurationError(f"Unknown session category: {category}")
        if mode not in SESSION_MODES:
            raise SessionConfigurationError(f"Unknown session mode: {mode}")

        if self.pyaudio_instance is None:
            try:
                self.pyaudio_instance = pyaudio.PyAudio()
            except OSError as e:
                raise SessionConfigurationError(f"Audio session setup failed: {e}") from e

        self.category = category
        self.mode = mode
        logger.info(f"Audio session configured: category={category}, mode={mode}")

    def request_permission(self) -> bool:
        """Whether recording is possible, i.e. a default input device exists."""
        if not self.is_configured:
            logger.warning("Recording permission requested before session configuration")
            return False
        try:
            info = self.pyaudio_instance.get_default_input_device_info()
        except OSError as e:
            logger.warning(f"Permission not granted: no input device ({e})")
            return False

        granted = info.get('maxInputChannels', 0) > 0
        if not granted:
            logger.warning("Permission not granted: input device has no channels")
        return granted

    def create_recorder(self, path: str, audio_format: AudioFormat) -> AudioRecorder:
        if not self.is_configured:
            raise RecorderCreationError("Audio session is not configured")
        return AudioRecorder(self.pyaudio_instance, path, audio_format)

    def record(self, handle: AudioRecorder) -> None:
        handle.record()

    def stop(self, handle: AudioRecorder) -> Optional[str]:
        return handle.stop()

    def terminate(self) -> None:
        """Release PortAudio."""
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            logger.info("Audio session terminated")
