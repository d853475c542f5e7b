"""Main application entry point for Rehearse."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from .analysis import ScoreAggregator
from .capture import CaptureController, CaptureError, SystemMediaDevice
from .config import RehearseConfig
from .models.session import SessionRecord
from .services import InterviewService, TranscriptionService
from .signals import RandomVisualSignalSource
from .storage import FileManager
from .ui import format_stats, render_analysis, render_record

logger = logging.getLogger(__name__)


class RehearseApp:
    """Wires configuration, capture and the interview service together."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = RehearseConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.controller: Optional[CaptureController] = None

    def init(self) -> None:
        logger.info("Initializing services...")
        self.file_manager = FileManager(self.config.get_data_directory())
        removed = self.file_manager.cleanup_old_sessions(self.config.get('storage.keep_days', 30))
        if removed:
            logger.info(f"Removed {removed} sessions older than the retention period")

        transcription = None
        if self.config.get('google_cloud.credentials_path'):
            transcription = TranscriptionService.from_config(self.config)
        else:
            logger.warning("Google credentials not configured; recordings will not be transcribed")

        self.interview_service = InterviewService(
            self.file_manager,
            transcription=transcription,
            visual_source=RandomVisualSignalSource(),
        )

    def record(self, duration: float) -> SessionRecord:
        """Record for ``duration`` seconds and process the result."""
        sample_rate = self.config.get('capture.sample_rate', 16000)
        chunk_size = self.config.get('capture.chunk_size', 1024)
        channels = self.config.get('capture.channels', 1)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, {channels} channels")

        device = SystemMediaDevice(
            sample_rate=sample_rate,
            chunk_size=chunk_size,
            channels=channels,
            camera_index=self.config.get('capture.camera_index', 0),
        )
        self.controller = CaptureController(
            device,
            constraints=self.config.get_device_constraints(),
            mime_candidates=self.config.get('capture.mime_candidates'),
            flush_interval=self.config.get('capture.flush_interval_seconds', 1.0),
            grace_period=self.config.get('capture.grace_period_seconds', 0.5),
        )

        session = self.controller.start()
        deadline = time.monotonic() + duration
        with self.console.status("Recording...") as status:
            while time.monotonic() < deadline:
                status.update(f"Recording  {format_stats(session.stats())}")
                time.sleep(0.25)
        artifact = self.controller.stop()
        self.console.print(f"Recorded {artifact.duration_estimate_seconds:.1f}s "
                           f"({artifact.size_bytes} bytes, {artifact.mime_type})")

        with self.console.status("Analyzing..."):
            return self.interview_service.process_artifact(artifact)

    def upload(self, file_path: str, duration: Optional[float] = None) -> SessionRecord:
        with self.console.status("Analyzing upload..."):
            return self.interview_service.process_upload(file_path, duration_seconds=duration)

    def analyze_transcript(self, file_path: str, duration: float) -> None:
        text = Path(file_path).read_text(encoding='utf-8')
        result = self.interview_service.analyze_text(text, duration_seconds=duration)
        score = ScoreAggregator().aggregate(result, self.interview_service.visual_source.sample())
        render_analysis(self.console, result, score)

    def cleanup(self) -> None:
        if self.controller is not None:
            self.controller.close()
            self.controller = None
        service = getattr(self, 'interview_service', None)
        if service is not None and service.transcription is not None:
            service.transcription.cleanup()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/rehearse.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

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
        console_handler = logging.StreamHandler(sys.stderr)
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
    logger.info("=" * 50)
    logger.info("Rehearse starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rehearse - record an interview answer and get it scored",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--auto",
        action="store_true",
        help="Record for --duration seconds, then transcribe, analyze and print the result"
    )
    mode.add_argument(
        "--upload",
        type=str,
        metavar="FILE",
        help="Analyze an existing audio or video file"
    )
    mode.add_argument(
        "--transcript",
        type=str,
        metavar="FILE",
        help="Analyze a plain-text transcript (no audio)"
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Recording length for --auto (default: 10) or answer length for --upload/--transcript"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="Rehearse v0.1.0"
    )
    return parser


def main(argv=None) -> None:
    """Main entry point for Rehearse."""
    args = build_parser().parse_args(argv)

    app = RehearseApp(args.config, args.log_level)
    try:
        app.init()
        if args.auto:
            record = app.record(args.duration or 10.0)
            render_record(app.console, record)
        elif args.upload:
            record = app.upload(args.upload, args.duration)
            render_record(app.console, record)
        else:
            app.analyze_transcript(args.transcript, args.duration or 0.0)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except CaptureError as e:
        logger.error(f"Capture failed: {e}")
        print(f"Error: {e.user_message}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        app.cleanup()


if __name__ == "__main__":
    main()
