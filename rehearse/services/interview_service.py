"""Interview service: turns a recording into a scored, persisted session record."""

import logging
from datetime import datetime
from typing import Optional

from ..analysis import ScoreAggregator, TranscriptAnalyzer, empty_result
from ..capture.upload import import_upload
from ..models.analysis import AnalysisResult, TranscriptInput
from ..models.capture import CaptureArtifact
from ..models.session import SessionRecord
from ..signals import StaticVisualSignalSource, VisualSignalSource
from ..storage.file_manager import FileManager
from .transcription_service import TranscriptionService

logger = logging.getLogger(__name__)


class InterviewService:
    """Stores, transcribes, analyzes and scores recorded answers."""

    def __init__(
        self,
        file_manager: FileManager,
        transcription: Optional[TranscriptionService] = None,
        visual_source: Optional[VisualSignalSource] = None,
        analyzer: Optional[TranscriptAnalyzer] = None,
        aggregator: Optional[ScoreAggregator] = None,
    ):
        """Initialize interview service.

        Args:
            file_manager: Where artifacts and records are stored
            transcription: Speech-to-text service; without one every
                recording is analyzed as having no transcript
            visual_source: Source of non-verbal signals for scoring
            analyzer: Transcript analyzer
            aggregator: Score aggregator
        """
        self.file_manager = file_manager
        self.transcription = transcription
        self.visual_source = visual_source or StaticVisualSignalSource()
        self.analyzer = analyzer or TranscriptAnalyzer()
        self.aggregator = aggregator or ScoreAggregator()

    def analyze_text(self, text: str, duration_seconds: float = 0.0, audio_size_bytes: int = 0) -> AnalysisResult:
        """Run the analysis engine alone on a transcript."""
        return self.analyzer.analyze(TranscriptInput(
            text=text,
            duration_seconds=duration_seconds,
            audio_size_bytes=audio_size_bytes,
        ))

    def process_artifact(self, artifact: CaptureArtifact, transcript: Optional[str] = None) -> SessionRecord:
        """Store an artifact, analyze it and persist the resulting record.

        Args:
            artifact: Recorded or uploaded media
            transcript: Known transcript; the transcription service is used
                when omitted

        Returns:
            The saved SessionRecord
        """
        session_id = self.file_manager.create_session_id()
        audio_file = self.file_manager.save_artifact(artifact, session_id)

        if transcript is None:
            transcript = self._transcribe(artifact)

        if transcript is None:
            logger.warning(f"Session {session_id}: no transcript available, using empty analysis")
            analysis = empty_result()
            transcript = ""
        else:
            analysis = self.analyze_text(
                transcript,
                duration_seconds=artifact.duration_estimate_seconds,
                audio_size_bytes=artifact.size_bytes,
            )

        score = self.aggregator.aggregate(analysis, self.visual_source.sample())
        record = SessionRecord(
            session_id=session_id,
            timestamp=datetime.now(),
            mime_type=artifact.mime_type,
            size_bytes=artifact.size_bytes,
            duration_seconds=artifact.duration_estimate_seconds,
            analysis=analysis,
            transcript=transcript,
            audio_file=audio_file,
            score=score,
        )
        self.file_manager.save_record(record)
        logger.info(f"Session {session_id}: {analysis.word_count} words, "
                    f"{analysis.speech_quality.value}, overall {score.overall:.0f}")
        return record

    def process_upload(self, file_path: str, duration_seconds: Optional[float] = None,
                       transcript: Optional[str] = None) -> SessionRecord:
        """Import an uploaded file and process it like a recording.

        Raises:
            UnsupportedFormatError: the file is not audio or video
        """
        artifact = import_upload(file_path, duration_seconds=duration_seconds)
        return self.process_artifact(artifact, transcript=transcript)

    def get_record(self, session_id: str) -> Optional[SessionRecord]:
        return self.file_manager.load_record(session_id)

    def _transcribe(self, artifact: CaptureArtifact) -> Optional[str]:
        if self.transcription is None:
            return None
        return self.transcription.transcribe(artifact)
