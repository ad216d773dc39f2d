"""
Forecast module: next-value predictions with confidence bands.
"""

from .engine import ForecastEngine, prediction_error
from .methods import confidence_band, exponential_smoothing, simple_moving_average
from .predictors import DisabledPredictor, Predictor
from .schema import Prediction, PredictorResult

__all__ = [
    "ForecastEngine",
    "Prediction",
    "PredictorResult",
    "Predictor",
    "DisabledPredictor",
    "exponential_smoothing",
    "simple_moving_average",
    "confidence_band",
    "prediction_error",
]
