"""
Predictor port.

An external predictor is an optional, swappable capability. The forecast
engine holds an ordered list of them and tries each in turn; anything a
predictor raises is treated as "unavailable" and the engine moves on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from pingwatch.core.exceptions import PredictorUnavailableError
from pingwatch.data.schema import Sample

from .schema import PredictorResult


class Predictor(ABC):
    """
    Abstract interface for next-value predictors.

    Implementations:
    - HttpForecastPredictor (llm.client): OpenAI-compatible chat endpoint
    - DisabledPredictor: placeholder when nothing is configured
    """

    name: str = "external"

    @abstractmethod
    def forecast(self, samples: List[Sample], timeout_ms: int) -> PredictorResult:
        """
        Predict the value following ``samples``.

        Args:
            samples: Window samples ordered by ascending timestamp
            timeout_ms: Upper bound on how long the call may take

        Returns:
            PredictorResult with finite values

        Raises:
            PredictorUnavailableError: On timeout, transport failure or bad output
        """
        ...


class DisabledPredictor(Predictor):
    """Predictor that is never available."""

    name = "disabled"

    def __init__(self, reason: str = "external predictor not configured"):
        self.reason = reason

    def forecast(self, samples: List[Sample], timeout_ms: int) -> PredictorResult:
        raise PredictorUnavailableError(self.reason)
