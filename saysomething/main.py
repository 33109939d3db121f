"""Main application entry point for SaySomething."""

import sys
import time
import argparse
import logging
from pathlib import Path

from rich.console import Console

from saysomething.audio.capture import CaptureService
from saysomething.audio.playback import PlaybackService
from saysomething.services.recording_controller import RecordingController
from saysomething.storage.file_manager import RecordingStore
from saysomething.transcription.google_backend import GoogleSpeechBackend
from saysomething.ui.context import UiContext
from saysomething.ui.display_surface import DisplaySurface
from saysomething.ui.press_timer import PressTimer

from . import __version__
from .config import SaySomethingConfig

logger = logging.getLogger(__name__)


class App:
    """Wires the services, controller and display surface together."""

    def __init__(self, config_path: str, log_level: str = None):
        self.config = SaySomethingConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()

    def init(self) -> None:
        logger.info("Initializing services...")
        self.context = UiContext()

        self.store = RecordingStore(
            self.config.get_data_directory(),
            self.config.get('storage.file_name', 'recording.wav'),
        )
        audio_format = self.config.get_audio_format()
        logger.info(f"Audio settings: {audio_format.sample_rate}Hz, {audio_format.channels} channels, "
                    f"codec={audio_format.codec}, quality={audio_format.quality}")

        recognizer = GoogleSpeechBackend(
            credentials_path=self.config.get_credentials_path(),
            language=self.config.get('recognition.language', 'tr-TR'),
            enable_automatic_punctuation=self.config.get('recognition.enable_automatic_punctuation', True),
            timeout=float(self.config.get('recognition.timeout_seconds', 30.0)),
        )
        self.controller = RecordingController(
            context=self.context,
            capture=CaptureService(),
            playback=PlaybackService(chunk_size=audio_format.chunk_size),
            recognizer=recognizer,
            store=self.store,
            audio_format=audio_format,
        )
        self.surface = DisplaySurface(
            self.context,
            self.controller,
            timer=PressTimer(self.context, float(self.config.get('ui.tick_interval_seconds', 0.1))),
            min_press_duration=float(self.config.get('ui.min_press_duration_seconds', 0.1)),
            placeholder_text=self.config.get('ui.placeholder_text', "Recorded Text Will Appear Here"),
            failure_text=self.config.get('ui.failure_text', "Recognition failed"),
        )
        self.controller.configure_session(
            self.config.get('audio.session_category', 'play_and_record'),
            self.config.get('audio.session_mode', 'default'),
        )

    def run_interactive(self) -> None:
        from saysomething.ui.terminal_screen import TerminalScreen
        TerminalScreen(self.context, self.surface, console=self.console).run()

    def run_auto(self, duration: float, timeout: float) -> str:
        """Hold the record button for ``duration`` seconds and wait for the transcript."""
        self.surface.press_changed(True)
        hold_until = time.monotonic() + duration
        self.context.run_until(lambda: time.monotonic() >= hold_until, timeout=duration + 1.0)
        self.surface.press_changed(False)

        delivered = self.context.run_until(
            lambda: self.controller.last_result is not None, timeout=timeout)
        if not delivered:
            logger.warning(f"No transcription result within {timeout}s")
        self.context.process_pending()

        if self.surface.status.value:
            self.console.print(self.surface.status.value, style="bold red")
        return self.surface.text.value

    def cleanup(self) -> None:
        controller = getattr(self, 'controller', None)
        if controller is not None:
            controller.shutdown()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/saysomething.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("SaySomething application starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def main() -> None:
    """Main entry point for SaySomething application."""
    parser = argparse.ArgumentParser(
        description="SaySomething - hold to record, release to transcribe",
        epilog="Keys: SPACE=hold/release record button, p=play recording, q=quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        default="saysomething.yaml",
        help="Path to configuration YAML file (default: saysomething.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Hold the record button for --duration seconds, print the transcript and exit"
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Recording duration in seconds for auto mode (default: 5)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Seconds to wait for the transcript in auto mode (default: 30)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SaySomething v{__version__}"
    )

    args = parser.parse_args()

    try:
        app = App(args.config, args.log_level)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        app.init()
        if args.auto:
            app.console.print(app.run_auto(args.duration, args.timeout))
        else:
            app.run_interactive()
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        app.cleanup()


if __name__ == "__main__":
    main()
