"""
External forecast predictor.

Prompt construction, response schema and the HTTP client implementing the
pingwatch Predictor port.
"""

from .client import HttpForecastPredictor, create_predictor
from .config import PredictorConfig, load_predictor_config
from .prompt import build_prompt
from .schema import ForecastPayload

__all__ = [
    "PredictorConfig",
    "load_predictor_config",
    "HttpForecastPredictor",
    "create_predictor",
    "build_prompt",
    "ForecastPayload",
]
