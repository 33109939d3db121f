"""Google Speech-to-Text recognition backend."""

import time
import wave
import logging
from pathlib import Path
from typing import Optional

from .base import AbstractRecognitionBackend
from ..errors import RecognitionError
from ..models.transcription import RecognitionAuthorization

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Synchronous recognize() rejects audio longer than one minute
MAX_SYNC_AUDIO_SECONDS = 60.0

# Inline RecognitionAudio content is capped at 10 MB per request
MAX_INLINE_CONTENT_BYTES = 10 * 1024 * 1024


class GoogleSpeechBackend(AbstractRecognitionBackend):
    """Google Speech-to-Text API backend for whole-file recognition."""

    service_name = "Google Speech-to-Text"

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 language: str = "tr-TR",
                 enable_automatic_punctuation: bool = True,
                 timeout: float = 30.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            language: Language code (e.g., 'tr-TR', 'en-US')
            enable_automatic_punctuation: Enable automatic punctuation
            timeout: Per-request timeout in seconds
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.timeout = timeout
        self.client: Optional[speech.SpeechClient] = None
        self.project_id = None

    def request_authorization(self) -> RecognitionAuthorization:
        """Load service account credentials and create the client."""
        if not self.credentials_path:
            logger.warning("Google credentials path not configured")
            self.authorization = RecognitionAuthorization.NOT_DETERMINED
            return self.authorization

        if not Path(self.credentials_path).is_file():
            logger.warning(f"Google credentials file not found: {self.credentials_path}")
            self.authorization = RecognitionAuthorization.DENIED
            return self.authorization

        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        try:
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            self.client = speech.SpeechClient(credentials=credentials)
        except (ValueError, auth_exceptions.GoogleAuthError) as e:
            logger.warning(f"Google credentials rejected: {e}")
            self.authorization = RecognitionAuthorization.RESTRICTED
            return self.authorization

        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")
        self.authorization = RecognitionAuthorization.AUTHORIZED
        return self.authorization

    def recognize_file(self, audio_file: str) -> str:
        """Transcribe a WAV recording using Google Speech-to-Text."""
        if self.client is None:
            raise RecognitionError("Google Speech client is not authorized")

        start_time = time.time()
        try:
            with wave.open(audio_file, 'rb') as wf:
                sample_rate = wf.getframerate()
                channels = wf.getnchannels()
                duration = wf.getnframes() / float(sample_rate or 1)
            content = Path(audio_file).read_bytes()
        except (OSError, EOFError, wave.Error) as e:
            raise RecognitionError(f"Cannot read recording {audio_file}: {e}") from e

        logger.debug(f"Recognizing {audio_file}: {len(content)} bytes, {duration:.1f}s, "
                     f"{sample_rate}Hz, {channels} channels, language={self.language}")
        if len(content) > MAX_INLINE_CONTENT_BYTES:
            raise RecognitionError(
                f"Recording too large for recognition: {len(content)} bytes ({duration:.1f}s), "
                f"limit is {MAX_INLINE_CONTENT_BYTES} bytes; lower audio.sample_rate or audio.channels")

        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate,
            audio_channel_count=channels,
            language_code=self.language,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
        )
        audio = speech.RecognitionAudio(content=content)

        try:
            if duration > MAX_SYNC_AUDIO_SECONDS:
                operation = self.client.long_running_recognize(config=config, audio=audio)
                response = operation.result(timeout=self.timeout)
            else:
                response = self.client.recognize(config=config, audio=audio, timeout=self.timeout)
        except gax_exceptions.DeadlineExceeded as e:
            raise RecognitionError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            raise RecognitionError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            raise RecognitionError(f"Google Speech API error: {e}") from e

        processing_time = time.time() - start_time
        return self._best_transcription(response, processing_time)

    def _best_transcription(self, response, processing_time: float) -> str:
        # Each result covers a consecutive stretch of audio
        transcripts = [
            result.alternatives[0].transcript.strip()
            for result in response.results
            if result.alternatives
        ]
        text = " ".join(t for t in transcripts if t)
        if not text:
            logger.debug("--- NO SPEECH DETECTED ---")
            raise RecognitionError("No speech detected")

        logger.debug(f"TRANSCRIPTION SUCCESS: '{text}' (processing_time: {processing_time:.3f}s)")
        return text

    def cleanup(self) -> None:
        """Close the Google Speech client transport."""
        if self.client is not None:
            self.client.transport.close()
            self.client = None
