"""Transcript analysis: linguistic metrics and a quality verdict from text and timing."""

import logging
import re
from typing import List

import numpy as np

from ..models.analysis import (
    AnalysisResult,
    PacingMetrics,
    SentimentMetrics,
    SpeechQuality,
    StructureMetrics,
    TranscriptInput,
    VocabularyMetrics,
)
from . import lexicon

logger = logging.getLogger(__name__)

# Bytes per second assumed when only the audio payload size is known
AUDIO_BYTES_PER_SECOND = 16000

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PUNCTUATION = "\"'.,!?;:()[]{}-…“”‘’"


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _normalize(token: str) -> str:
    return token.strip(_PUNCTUATION).lower()


def empty_result() -> AnalysisResult:
    """Result used when no transcript could be obtained: all zero, poor, no speech."""
    return AnalysisResult(
        has_spoken_content=False,
        word_count=0,
        filler_word_count=0,
        content_density=0.0,
        confidence_score=0.0,
        speech_quality=SpeechQuality.POOR,
    )


def quality_for(confidence_score: float) -> SpeechQuality:
    if confidence_score >= 80:
        return SpeechQuality.EXCELLENT
    if confidence_score >= 60:
        return SpeechQuality.GOOD
    if confidence_score >= 30:
        return SpeechQuality.FAIR
    return SpeechQuality.POOR


class TranscriptAnalyzer:
    """Derives pacing, vocabulary, sentiment and structure metrics from a transcript.

    Analysis is a pure function of the input; the same TranscriptInput always
    yields an equal AnalysisResult. Text input never raises.
    """

    def analyze(self, transcript: TranscriptInput) -> AnalysisResult:
        """Analyze one transcript.

        Args:
            transcript: Text plus recording duration and audio payload size

        Returns:
            Immutable AnalysisResult with every score in [0, 100]
        """
        text = transcript.text or ""
        words = text.split()
        tokens = [_normalize(w) for w in words]
        word_count = len(words)

        filler_count = self._count_fillers(tokens)
        sentences = self._split_sentences(text)

        vocabulary = self._vocabulary(words, tokens)
        sentiment = self._sentiment(tokens)
        structure = self._structure(text, tokens)
        pacing = self._pacing(word_count, sentences, transcript.duration_seconds)

        density = word_count / max(self._density_duration(transcript), 1.0)
        has_spoken_content = word_count > 5 and density > 0.5

        filler_ratio = _ratio(filler_count, word_count)
        confidence = (
            min(30.0, word_count * 0.3)
            - min(30.0, filler_ratio * 100)
            + min(20.0, density * 10)
            + min(20.0, vocabulary.diversity * 100)
            + min(30.0, (structure.organization + structure.coherence) / 2 * 0.3)
        )
        confidence = _clamp(confidence)

        result = AnalysisResult(
            has_spoken_content=has_spoken_content,
            word_count=word_count,
            filler_word_count=filler_count,
            content_density=density,
            confidence_score=confidence,
            speech_quality=quality_for(confidence),
            pacing=pacing,
            vocabulary=vocabulary,
            sentiment=sentiment,
            structure=structure,
        )
        logger.debug(f"Analyzed {word_count} words ({filler_count} fillers): "
                     f"confidence {confidence:.1f}, {result.speech_quality.value}")
        return result

    @staticmethod
    def _count_fillers(tokens: List[str]) -> int:
        count = sum(1 for t in tokens if t in lexicon.FILLER_WORDS)
        count += sum(1 for pair in zip(tokens, tokens[1:]) if pair in lexicon.FILLER_PHRASES)
        return count

    @staticmethod
    def _split_sentences(text: str) -> List[str]:
        return [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]

    @staticmethod
    def _density_duration(transcript: TranscriptInput) -> float:
        if transcript.duration_seconds > 0:
            return transcript.duration_seconds
        if transcript.audio_size_bytes > 0:
            return transcript.audio_size_bytes / AUDIO_BYTES_PER_SECOND
        return 0.0

    def _vocabulary(self, words: List[str], tokens: List[str]) -> VocabularyMetrics:
        word_count = len(words)
        diversity = _ratio(len({w.lower() for w in words}), word_count)
        mean_length = float(np.mean([len(w) for w in words])) if words else 0.0
        complexity = min(10.0, mean_length) / 10
        domain = _ratio(sum(1 for t in tokens if t in lexicon.TECHNICAL_TERMS), word_count)
        score = float(np.mean([diversity * 100, complexity * 100, domain * 100]))
        return VocabularyMetrics(
            diversity=diversity,
            complexity=complexity,
            domain_specificity=domain,
            score=_clamp(score),
        )

    def _sentiment(self, tokens: List[str]) -> SentimentMetrics:
        word_count = len(tokens)

        def intensity(word_list) -> float:
            return _ratio(sum(1 for t in tokens if t in word_list), word_count) * 10

        positivity = intensity(lexicon.POSITIVE_WORDS)
        enthusiasm = intensity(lexicon.ENTHUSIASM_WORDS)
        confidence = intensity(lexicon.CONFIDENCE_WORDS)
        score = float(np.mean([positivity * 10, enthusiasm * 10, confidence * 10]))
        return SentimentMetrics(
            positivity=positivity,
            enthusiasm=enthusiasm,
            confidence=confidence,
            score=_clamp(score),
        )

    def _structure(self, text: str, tokens: List[str]) -> StructureMetrics:
        organization = (
            33 * bool(lexicon.INTRODUCTION_PATTERN.search(text))
            + 33 * bool(lexicon.TRANSITION_PATTERN.search(text))
            + 34 * bool(lexicon.CONCLUSION_PATTERN.search(text))
        )
        connectives = sum(1 for t in tokens if t in lexicon.CONNECTIVE_WORDS)
        coherence = min(100.0, connectives * 20.0)
        completeness = min(100.0, len(tokens) / 2)
        score = float(np.mean([organization, coherence, completeness]))
        return StructureMetrics(
            organization=float(organization),
            coherence=coherence,
            completeness=completeness,
            score=_clamp(score),
        )

    def _pacing(self, word_count: int, sentences: List[str], duration: float) -> PacingMetrics:
        wpm = word_count / (duration / 60) if duration > 0 else 0.0

        if len(sentences) < 2:
            consistency = 100.0
        else:
            variance = float(np.var([len(s.split()) for s in sentences]))
            consistency = max(0.0, 100 - variance * 5)

        if 0 < wpm < 180:
            pace_component = 100.0
        else:
            pace_component = max(0.0, 100 - abs(wpm - 150))

        return PacingMetrics(
            words_per_minute=wpm,
            pause_frequency=_ratio(len(sentences), word_count),
            pace_consistency=_clamp(consistency),
            score=_clamp((pace_component + consistency) / 2),
        )


_default_analyzer = TranscriptAnalyzer()


def analyze_transcript(transcript: TranscriptInput) -> AnalysisResult:
    """Analyze a transcript with the default analyzer."""
    return _default_analyzer.analyze(transcript)
