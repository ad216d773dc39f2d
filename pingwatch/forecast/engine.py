"""
Forecast engine.

Fetches the trailing window from the sample source and predicts the next
value. ``predict`` walks a prioritized chain: every configured external
predictor first, then exponential smoothing, which always succeeds.
``predict_sma`` is a separate, explicitly requested method outside the chain.
"""

from __future__ import annotations

import concurrent.futures
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from pingwatch.core.config import ForecastConfig, config
from pingwatch.core.exceptions import InsufficientDataError
from pingwatch.data.features import population_std, sample_values
from pingwatch.data.schema import Sample
from pingwatch.data.sources import SampleSource

from .methods import (
    EXPONENTIAL_SMOOTHING,
    SIMPLE_MOVING_AVERAGE,
    confidence_band,
    exponential_smoothing,
    simple_moving_average,
)
from .predictors import Predictor
from .schema import Prediction, PredictorResult

logger = logging.getLogger(__name__)

EXTERNAL = "external"
DEFAULT_TIMEOUT_MS = 10_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ForecastEngine:
    """
    Next-value forecaster with graceful fallback.

    Notes:
    - Fewer than min_samples samples in the window means no forecast (None).
    - Predictor failures, malformed results and calls slower than
      predictor_timeout_ms are logged and never reach the caller.
    - Sample source failures propagate unchanged.
    """

    def __init__(
        self,
        source: SampleSource,
        predictors: Optional[Sequence[Predictor]] = None,
        settings: Optional[ForecastConfig] = None,
        predictor_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.source = source
        self.predictors: List[Predictor] = list(predictors or [])
        self.settings = settings or config.forecast
        self.predictor_timeout_ms = predictor_timeout_ms
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="predictor"
        )

    def predict(self, window_size_hours: int, now: Optional[datetime] = None) -> Optional[Prediction]:
        """
        Predict the next value from the trailing window.

        Args:
            window_size_hours: Trailing window length in hours
            now: Reference time (default: current UTC time)

        Returns:
            Prediction, or None when the window holds too few samples
        """
        now = now or _utcnow()
        samples = self._window(window_size_hours, now)

        if len(samples) < self.settings.min_samples:
            logger.warning(
                f"Insufficient data for forecasting ({len(samples)} < {self.settings.min_samples})"
            )
            return None

        for predictor in self.predictors:
            prediction = self._try_predictor(predictor, samples, now)
            if prediction is not None:
                return prediction

        return self._exponential_smoothing(samples, now)

    def predict_sma(
        self,
        window_size_hours: int,
        period: int,
        now: Optional[datetime] = None,
    ) -> Optional[Prediction]:
        """
        Simple moving average over the last ``period`` samples of the window.

        Returns:
            Prediction, or None when the window holds fewer than ``period`` samples
        """
        now = now or _utcnow()
        samples = self._window(window_size_hours, now)

        try:
            sma, std_dev = simple_moving_average(sample_values(samples), period)
        except InsufficientDataError as exc:
            logger.info(f"Insufficient data for SMA({period}): {exc}")
            return None

        lower, upper = confidence_band(sma, std_dev, self.settings.band_z)
        return Prediction(
            timestamp=now,
            predicted_value=sma,
            confidence_lower=lower,
            confidence_upper=upper,
            method=SIMPLE_MOVING_AVERAGE,
        )

    def _window(self, window_size_hours: int, now: datetime) -> List[Sample]:
        return self.source.samples_since(now - timedelta(hours=window_size_hours))

    def _try_predictor(
        self, predictor: Predictor, samples: List[Sample], now: datetime
    ) -> Optional[Prediction]:
        future = self._executor.submit(predictor.forecast, samples, self.predictor_timeout_ms)
        try:
            result = PredictorResult.model_validate(
                future.result(timeout=self.predictor_timeout_ms / 1000.0)
            )
        except concurrent.futures.TimeoutError:
            # The worker keeps running if the predictor ignores its own timeout
            future.cancel()
            logger.warning(
                f"Predictor '{predictor.name}' exceeded {self.predictor_timeout_ms}ms, falling back"
            )
            return None
        except Exception as exc:
            logger.warning(f"Predictor '{predictor.name}' failed, falling back: {exc}")
            return None

        logger.info(f"Predictor '{predictor.name}' predicted {result.predicted_value:.2f}")
        return Prediction(
            timestamp=now,
            predicted_value=result.predicted_value,
            confidence_lower=result.confidence_lower,
            confidence_upper=result.confidence_upper,
            method=EXTERNAL,
        )

    def close(self) -> None:
        """Release predictor worker threads without waiting for stragglers."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _exponential_smoothing(self, samples: List[Sample], now: datetime) -> Prediction:
        values = sample_values(samples)
        smoothed = exponential_smoothing(values, self.settings.smoothing_alpha)
        lower, upper = confidence_band(smoothed, population_std(values), self.settings.band_z)

        logger.info(f"Exponential smoothing prediction: {smoothed:.2f}")
        return Prediction(
            timestamp=now,
            predicted_value=smoothed,
            confidence_lower=lower,
            confidence_upper=upper,
            method=EXPONENTIAL_SMOOTHING,
        )


def prediction_error(prediction: Prediction, actual: float) -> float:
    """Absolute error of a prediction once the actual value is known."""
    return abs(prediction.predicted_value - actual)
