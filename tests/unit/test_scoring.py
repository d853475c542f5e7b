"""Unit tests for score aggregation and visual signal sources."""

import pytest

from rehearse.analysis import ScoreAggregator, analyze_transcript, empty_result
from rehearse.models.analysis import TranscriptInput, VisualSignals
from rehearse.signals import RandomVisualSignalSource, StaticVisualSignalSource
from rehearse.signals.visual import FACIAL_EXPRESSIONS, POSTURES

SPOKEN = TranscriptInput(
    text=("Let me start with the project. For example, I led the database migration "
          "and we improved performance. In conclusion, the team delivered on time."),
    duration_seconds=15,
)


@pytest.mark.unit
class TestScoreAggregator:
    """Test cases for ScoreAggregator."""

    def test_no_speech_zeroes_verbal_and_content(self):
        visual = VisualSignals(eye_contact_score=80, posture="good", facial_expression="neutral")
        score = ScoreAggregator().aggregate(empty_result(), visual)

        assert score.verbal == 0
        assert score.content == 0
        assert score.non_verbal == pytest.approx((80 + 85) / 2)
        assert score.engagement == pytest.approx(80 * 0.4 + 70 * 0.3)
        assert score.overall == pytest.approx(0.2 * score.non_verbal + 0.2 * score.engagement)

    def test_overall_is_weighted_sum(self):
        result = analyze_transcript(SPOKEN)
        assert result.has_spoken_content is True

        score = ScoreAggregator().aggregate(result, VisualSignals(eye_contact_score=75))

        assert score.verbal > 0
        assert score.content > 0
        assert score.overall == pytest.approx(
            0.3 * score.verbal + 0.2 * score.non_verbal + 0.3 * score.content + 0.2 * score.engagement)

    def test_poor_posture_lowers_non_verbal(self):
        result = analyze_transcript(SPOKEN)
        good = ScoreAggregator().aggregate(result, VisualSignals(eye_contact_score=70, posture="good"))
        slouching = ScoreAggregator().aggregate(result, VisualSignals(eye_contact_score=70, posture="slouching"))

        assert good.non_verbal == pytest.approx(77.5)
        assert slouching.non_verbal == pytest.approx(65.0)
        assert good.overall > slouching.overall

    def test_facial_expression_affects_engagement(self):
        result = empty_result()
        scores = {
            expression: ScoreAggregator().aggregate(
                result, VisualSignals(eye_contact_score=0, facial_expression=expression)).engagement
            for expression in ("positive", "neutral", "negative")
        }

        assert scores == pytest.approx({"positive": 27.0, "neutral": 21.0, "negative": 15.0})

    def test_scores_are_clamped(self):
        visual = VisualSignals(eye_contact_score=500, posture="good", facial_expression="positive")
        score = ScoreAggregator().aggregate(analyze_transcript(SPOKEN), visual)

        for value in (score.overall, score.verbal, score.non_verbal, score.content, score.engagement):
            assert 0 <= value <= 100

    def test_custom_weights(self):
        weights = {"verbal": 0.0, "non_verbal": 1.0, "content": 0.0, "engagement": 0.0}
        score = ScoreAggregator(weights).aggregate(
            analyze_transcript(SPOKEN), VisualSignals(eye_contact_score=65, posture="good"))

        assert score.overall == pytest.approx(75.0)


@pytest.mark.unit
class TestVisualSignalSources:
    """Test cases for visual signal sources."""

    def test_static_source_repeats(self):
        signals = VisualSignals(eye_contact_score=88, posture="tooClose")
        source = StaticVisualSignalSource(signals)

        assert source.sample() is signals
        assert source.sample() is signals

    def test_static_source_default(self):
        assert StaticVisualSignalSource().sample().eye_contact_score == 70

    def test_random_source_is_seeded(self):
        first_source = RandomVisualSignalSource(seed=7)
        second_source = RandomVisualSignalSource(seed=7)
        first = [first_source.sample() for _ in range(5)]
        second = [second_source.sample() for _ in range(5)]

        assert first == second

    def test_random_source_ranges(self):
        source = RandomVisualSignalSource(seed=42)
        for _ in range(200):
            signals = source.sample()
            assert 60 <= signals.eye_contact_score <= 90
            assert signals.posture in POSTURES
            assert signals.facial_expression in FACIAL_EXPRESSIONS
            assert 0 <= signals.grammar_issues <= 5
