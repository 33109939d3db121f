"""Pytest configuration and fixtures for SaySomething tests."""

import pytest
import tempfile
import threading
import time
import logging
import wave
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock, patch
import numpy as np

from saysomething.errors import RecognitionError
from saysomething.models.transcription import RecognitionAuthorization
from saysomething.transcription.base import AbstractRecognitionBackend
from saysomething.ui.context import UiContext


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware")
    config.addinivalue_line("markers", "integration: multi-component workflow tests")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRecognitionBackend(AbstractRecognitionBackend):
    """Recognition backend returning canned transcripts from the worker thread."""

    service_name = "fake"

    def __init__(self,
                 transcripts: Optional[List[str]] = None,
                 error: Optional[Exception] = None,
                 status=RecognitionAuthorization.AUTHORIZED,
                 gate: Optional[threading.Event] = None):
        super().__init__(language="tr-TR")
        self.transcripts = list(transcripts or ["merhaba dünya"])
        self.error = error
        self.status = status
        self.gate = gate
        self.recognized_files: List[bytes] = []

    def request_authorization(self):
        self.authorization = self.status
        return self.status

    def recognize_file(self, audio_file: str) -> str:
        self.recognized_files.append(Path(audio_file).read_bytes())
        if self.gate is not None:
            self.gate.wait(timeout=5.0)
        if self.error is not None:
            raise self.error
        if not self.transcripts:
            raise RecognitionError("No speech detected")
        return self.transcripts.pop(0)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """One 1024-frame chunk of 16-bit stereo audio (440 Hz sine)."""
    sample_rate = 44100
    t = np.arange(1024) / sample_rate
    mono = (np.sin(2 * np.pi * 440 * t) * 16384).astype(np.int16)
    return np.repeat(mono, 2).tobytes()


def make_stream_read(chunk: bytes, delay: float = 0.002):
    """Stream.read replacement that paces reads like a real device."""
    def read(num_frames, exception_on_overflow=True):
        time.sleep(delay)
        return chunk
    return read


@pytest.fixture
def mock_pyaudio(sample_audio_chunk):
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.side_effect = make_stream_read(sample_audio_chunk)
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'index': 0, 'name': 'Mock Microphone', 'maxInputChannels': 2,
        }

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def sample_audio_file(temp_data_dir, sample_audio_chunk):
    """Create a sample stereo 44.1 kHz WAV file."""
    file_path = Path(temp_data_dir) / "sample.wav"

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(2)
        wf.setsampwidth(2)
        wf.setframerate(44100)
        for _ in range(20):
            wf.writeframes(sample_audio_chunk)

    return str(file_path)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def ui_context(fake_clock):
    """UI context driven by a manually advanced clock."""
    return UiContext(clock=fake_clock)


@pytest.fixture
def fake_backend():
    backend = FakeRecognitionBackend()
    yield backend
    backend.shutdown(timeout=1.0)


def read_wav_frames(path) -> bytes:
    with wave.open(str(path), 'rb') as wf:
        return wf.readframes(wf.getnframes())


@pytest.fixture
def backend_factory():
    """Build FakeRecognitionBackends; all are shut down after the test."""
    backends = []

    def factory(**kwargs):
        backend = FakeRecognitionBackend(**kwargs)
        backends.append(backend)
        return backend

    yield factory
    for backend in backends:
        if backend.gate is not None:
            backend.gate.set()
        backend.shutdown(timeout=1.0)


@pytest.fixture
def wav_frames():
    return read_wav_frames


@pytest.fixture
def stream_reader():
    return make_stream_read
