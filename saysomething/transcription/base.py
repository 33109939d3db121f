"""Abstract base class for speech recognition backends."""

import queue
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, NamedTuple, Optional

from ..errors import RecognitionError
from ..models.transcription import RecognitionAuthorization

logger = logging.getLogger(__name__)

RecognitionCallback = Callable[[Optional[str], Optional[Exception]], None]


class RecognitionTask(NamedTuple):
    """A file waiting to be transcribed by the worker thread."""
    audio_file: str
    callback: RecognitionCallback


class AbstractRecognitionBackend(ABC):
    """Base class for recognition backends.

    Subclasses implement the blocking ``recognize_file``; ``transcribe``
    runs it on a single worker thread so requests are handled one at a time
    in submission order and every callback fires exactly once.
    """

    service_name = "abstract"

    def __init__(self, language: str = "tr-TR"):
        """Initialize backend with its fixed recognition locale."""
        self.language = language
        self.authorization = RecognitionAuthorization.NOT_DETERMINED

        self.task_queue: "queue.Queue[Optional[RecognitionTask]]" = queue.Queue()
        self.worker_thread: Optional[threading.Thread] = None
        self.shutdown_event = threading.Event()
        self._worker_lock = threading.Lock()

    @abstractmethod
    def request_authorization(self) -> RecognitionAuthorization:
        """Ask for permission to use the service and remember the outcome."""
        pass

    @abstractmethod
    def recognize_file(self, audio_file: str) -> str:
        """Transcribe a recording and return the best transcription.

        Raises:
            RecognitionError: service failure or no speech in the recording
        """
        pass

    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass

    def transcribe(self, audio_file: str, callback: RecognitionCallback) -> None:
        """Queue ``audio_file`` for recognition without blocking.

        ``callback(text, None)`` or ``callback(None, error)`` is invoked once
        from the worker thread.
        """
        if self.shutdown_event.is_set():
            callback(None, RecognitionError("Recognition backend is shut down"))
            return
        self._ensure_worker()
        self.task_queue.put(RecognitionTask(audio_file=audio_file, callback=callback))
        logger.debug(f"Queued recognition of {audio_file} ({self.task_queue.qsize()} pending)")

    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self.worker_thread is not None and self.worker_thread.is_alive():
                return
            self.worker_thread = threading.Thread(target=self._worker_loop, daemon=True)
            self.worker_thread.name = f"worker_{self.service_name}"
            self.worker_thread.start()

    def _worker_loop(self) -> None:
        thread_name = threading.current_thread().name
        logger.debug(f"Worker thread {thread_name} starting")
        while True:
            task = self.task_queue.get()
            if task is None:
                logger.debug(f"Worker {thread_name} received sentinel, exiting.")
                self.task_queue.task_done()
                break
            try:
                self._run_task(task)
            finally:
                self.task_queue.task_done()

    def _run_task(self, task: RecognitionTask) -> None:
        try:
            text = self.recognize_file(task.audio_file)
        except RecognitionError as e:
            logger.error(f"Recognition failed: {e}")
            task.callback(None, e)
            return
        except Exception as e:
            logger.error(f"Unhandled exception during recognition: {e}", exc_info=True)
            task.callback(None, RecognitionError(str(e)))
            return
        logger.info(f"Transcription: {text}")
        task.callback(text, None)

    def shutdown(self, timeout: float = 5.0) -> bool:
        """Finish queued requests and stop the worker thread.

        Returns:
            True if the worker stopped within ``timeout``
        """
        self.shutdown_event.set()
        if self.worker_thread is None:
            self.cleanup()
            return True

        self.task_queue.put(None)
        self.worker_thread.join(timeout)
        stopped = not self.worker_thread.is_alive()
        if not stopped:
            logger.warning(f"Worker thread {self.worker_thread.name} did not terminate cleanly.")
        self.cleanup()
        logger.info(f"{self.service_name} backend shutdown complete.")
        return stopped
