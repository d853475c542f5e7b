"""Combine transcript metrics and visual signals into presentation scores."""

import logging

from ..models.analysis import AnalysisResult, InterviewScore, VisualSignals

logger = logging.getLogger(__name__)

POSTURE_SCORES = {"good": 85.0}
DEFAULT_POSTURE_SCORE = 60.0

FACIAL_EXPRESSION_SCORES = {
    "positive": 90.0,
    "neutral": 70.0,
    "negative": 50.0,
}

WEIGHTS = {
    "verbal": 0.3,
    "non_verbal": 0.2,
    "content": 0.3,
    "engagement": 0.2,
}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


class ScoreAggregator:
    """Weighted composition of verbal, non-verbal, content and engagement scores.

    Verbal and content scores come from the transcript and are zero when the
    recording has no spoken content; non-verbal and engagement scores still
    reflect the visual signals.
    """

    def __init__(self, weights=None):
        self.weights = dict(weights or WEIGHTS)

    def aggregate(self, result: AnalysisResult, visual: VisualSignals) -> InterviewScore:
        """Score one answer.

        Args:
            result: Transcript analysis result
            visual: Signals from a VisualSignalSource

        Returns:
            InterviewScore with every field in [0, 100]
        """
        if result.has_spoken_content:
            verbal = (result.confidence_score + result.pacing.score + result.vocabulary.score) / 3
            content = (result.structure.score + result.sentiment.score) / 2
        else:
            verbal = 0.0
            content = 0.0

        posture = POSTURE_SCORES.get(visual.posture, DEFAULT_POSTURE_SCORE)
        non_verbal = (visual.eye_contact_score + posture) / 2

        facial = FACIAL_EXPRESSION_SCORES.get(visual.facial_expression, FACIAL_EXPRESSION_SCORES["neutral"])
        engagement = (visual.eye_contact_score * 0.4
                      + facial * 0.3
                      + result.confidence_score * 0.3)

        verbal, non_verbal, content, engagement = (
            _clamp(verbal), _clamp(non_verbal), _clamp(content), _clamp(engagement))
        overall = (verbal * self.weights["verbal"]
                   + non_verbal * self.weights["non_verbal"]
                   + content * self.weights["content"]
                   + engagement * self.weights["engagement"])

        score = InterviewScore(
            overall=_clamp(overall),
            verbal=verbal,
            non_verbal=non_verbal,
            content=content,
            engagement=engagement,
        )
        logger.debug(f"Aggregated score: {score}")
        return score
