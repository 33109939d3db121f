"""Unit tests for recognition backends."""

import threading
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as gax_exceptions

from saysomething.errors import RecognitionError
from saysomething.models.transcription import RecognitionAuthorization
from saysomething.transcription.google_backend import GoogleSpeechBackend


def collect_results(backend, path, count=1, timeout=2.0):
    """Submit ``path`` ``count`` times and wait for every callback."""
    results = []
    done = threading.Event()

    def callback(text, error):
        results.append((text, error, threading.current_thread().name))
        if len(results) == count:
            done.set()

    for _ in range(count):
        backend.transcribe(path, callback)
    assert done.wait(timeout), "callbacks were not delivered"
    return results


@pytest.mark.unit
class TestRecognitionWorker:
    """Test cases for the worker thread of AbstractRecognitionBackend."""

    def test_callback_receives_transcript_once(self, backend_factory, sample_audio_file):
        backend = backend_factory(transcripts=["merhaba"])

        results = collect_results(backend, sample_audio_file)

        assert len(results) == 1
        text, error, thread_name = results[0]
        assert text == "merhaba"
        assert error is None
        assert thread_name == "worker_fake"

    def test_requests_processed_in_order(self, backend_factory, sample_audio_file):
        backend = backend_factory(transcripts=["one", "two", "three"])

        results = collect_results(backend, sample_audio_file, count=3)

        assert [text for text, _, _ in results] == ["one", "two", "three"]

    def test_recognition_error_delivered_as_none(self, backend_factory, sample_audio_file):
        backend = backend_factory(error=RecognitionError("No speech detected"))

        text, error, _ = collect_results(backend, sample_audio_file)[0]

        assert text is None
        assert isinstance(error, RecognitionError)

    def test_unexpected_error_converted(self, backend_factory, sample_audio_file):
        backend = backend_factory(error=KeyError("boom"))

        text, error, _ = collect_results(backend, sample_audio_file)[0]

        assert text is None
        assert isinstance(error, RecognitionError)

    def test_transcribe_after_shutdown(self, backend_factory, sample_audio_file):
        backend = backend_factory()
        assert backend.shutdown(timeout=1.0) is True

        results = []
        backend.transcribe(sample_audio_file, lambda text, error: results.append((text, error)))

        assert results[0][0] is None
        assert isinstance(results[0][1], RecognitionError)

    def test_shutdown_finishes_pending_requests(self, backend_factory, sample_audio_file):
        backend = backend_factory(transcripts=["a", "b"])
        results = []
        backend.transcribe(sample_audio_file, lambda text, error: results.append(text))
        backend.transcribe(sample_audio_file, lambda text, error: results.append(text))

        assert backend.shutdown(timeout=2.0) is True
        assert results == ["a", "b"]


def make_response(*transcripts):
    results = [
        SimpleNamespace(alternatives=[SimpleNamespace(transcript=t, confidence=0.9)])
        for t in transcripts
    ]
    return SimpleNamespace(results=results)


@pytest.fixture
def credentials_file(temp_data_dir):
    path = Path(temp_data_dir) / "key.json"
    path.write_text("{}", encoding="utf-8")
    return str(path)


@pytest.fixture
def google_backend(credentials_file):
    with patch('saysomething.transcription.google_backend.service_account') as mock_account, \
            patch('saysomething.transcription.google_backend.speech.SpeechClient') as mock_client_class:
        mock_account.Credentials.from_service_account_file.return_value = MagicMock(project_id="test-project")
        backend = GoogleSpeechBackend(credentials_path=credentials_file, language="tr-TR")
        assert backend.request_authorization() is RecognitionAuthorization.AUTHORIZED
        yield backend, mock_client_class.return_value


@pytest.mark.unit
class TestGoogleSpeechBackend:
    """Test cases for GoogleSpeechBackend class."""

    def test_authorization_not_determined_without_path(self):
        backend = GoogleSpeechBackend(credentials_path=None)

        assert backend.request_authorization() is RecognitionAuthorization.NOT_DETERMINED

    def test_authorization_denied_when_file_missing(self, temp_data_dir):
        backend = GoogleSpeechBackend(credentials_path=str(Path(temp_data_dir) / "missing.json"))

        assert backend.request_authorization() is RecognitionAuthorization.DENIED

    def test_authorization_restricted_on_bad_credentials(self, credentials_file):
        with patch('saysomething.transcription.google_backend.service_account') as mock_account:
            mock_account.Credentials.from_service_account_file.side_effect = ValueError("missing fields")
            backend = GoogleSpeechBackend(credentials_path=credentials_file)

            assert backend.request_authorization() is RecognitionAuthorization.RESTRICTED
            assert backend.client is None

    def test_authorization_success(self, google_backend):
        backend, _ = google_backend

        assert backend.authorization is RecognitionAuthorization.AUTHORIZED
        assert backend.project_id == "test-project"

    def test_recognize_requires_authorization(self, sample_audio_file):
        backend = GoogleSpeechBackend(credentials_path=None)

        with pytest.raises(RecognitionError):
            backend.recognize_file(sample_audio_file)

    def test_recognize_joins_results(self, google_backend, sample_audio_file):
        backend, client = google_backend
        client.recognize.return_value = make_response("merhaba", " dünya ")

        assert backend.recognize_file(sample_audio_file) == "merhaba dünya"

        config = client.recognize.call_args.kwargs['config']
        assert config.sample_rate_hertz == 44100
        assert config.audio_channel_count == 2
        assert config.language_code == "tr-TR"

    def test_no_speech_detected(self, google_backend, sample_audio_file):
        backend, client = google_backend
        client.recognize.return_value = make_response()

        with pytest.raises(RecognitionError):
            backend.recognize_file(sample_audio_file)

    @pytest.mark.parametrize("exception", [
        gax_exceptions.DeadlineExceeded("slow"),
        gax_exceptions.ServiceUnavailable("down"),
        gax_exceptions.InvalidArgument("bad audio"),
    ])
    def test_api_errors_become_recognition_errors(self, google_backend, sample_audio_file, exception):
        backend, client = google_backend
        client.recognize.side_effect = exception

        with pytest.raises(RecognitionError):
            backend.recognize_file(sample_audio_file)

    def test_missing_recording(self, google_backend, temp_data_dir):
        backend, _ = google_backend

        with pytest.raises(RecognitionError):
            backend.recognize_file(str(Path(temp_data_dir) / "recording.wav"))

    def test_long_audio_uses_long_running_recognize(self, google_backend, sample_audio_file):
        backend, client = google_backend
        client.long_running_recognize.return_value.result.return_value = make_response("uzun")

        with patch('saysomething.transcription.google_backend.MAX_SYNC_AUDIO_SECONDS', 0.1):
            assert backend.recognize_file(sample_audio_file) == "uzun"
        client.recognize.assert_not_called()

    def test_oversized_recording_rejected_before_upload(self, google_backend, sample_audio_file):
        backend, client = google_backend

        with patch('saysomething.transcription.google_backend.MAX_INLINE_CONTENT_BYTES', 1000):
            with pytest.raises(RecognitionError, match="too large"):
                backend.recognize_file(sample_audio_file)
        client.recognize.assert_not_called()
        client.long_running_recognize.assert_not_called()
