"""Sources of non-transcript (visual) signals for score aggregation."""

import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

from ..models.analysis import VisualSignals

logger = logging.getLogger(__name__)

POSTURES = ("good", "slouching", "tooClose", "tooFar")
FACIAL_EXPRESSIONS = ("positive", "neutral", "negative")


class VisualSignalSource(ABC):
    """Provides one VisualSignals sample per analyzed answer."""

    @abstractmethod
    def sample(self) -> VisualSignals:
        pass


class StaticVisualSignalSource(VisualSignalSource):
    """Always returns the same signals."""

    def __init__(self, signals: Optional[VisualSignals] = None):
        self.signals = signals or VisualSignals(eye_contact_score=70.0)

    def sample(self) -> VisualSignals:
        return self.signals


class RandomVisualSignalSource(VisualSignalSource):
    """Placeholder heuristics until a real vision model is plugged in.

    Eye contact falls in 60-90, posture is mostly "good" and facial
    expression is weighted toward neutral. Seed it for repeatable output.
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def sample(self) -> VisualSignals:
        rng = self._random
        signals = VisualSignals(
            eye_contact_score=float(rng.randint(60, 90)),
            posture="good" if rng.random() < 0.7 else rng.choice(POSTURES[1:]),
            facial_expression=rng.choices(FACIAL_EXPRESSIONS, weights=(3, 5, 2))[0],
            grammar_issues=rng.randint(0, 5),
        )
        logger.debug(f"Sampled visual signals: {signals}")
        return signals
