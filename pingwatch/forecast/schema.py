"""
Schema definitions for forecasts.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PredictorResult(BaseModel):
    """
    Raw output of a predictor before the engine tags it with a method.

    Values must be finite; bounds are not checked against each other.
    """

    model_config = ConfigDict(frozen=True)

    predicted_value: float = Field(allow_inf_nan=False)
    confidence_lower: float = Field(allow_inf_nan=False)
    confidence_upper: float = Field(allow_inf_nan=False)


class Prediction(BaseModel):
    """
    Single next-value forecast with a confidence band.

    Fields:
    - timestamp: when the forecast was produced
    - predicted_value: expected next value (never rounded)
    - confidence_lower/upper: band around predicted_value
    - method: tag of the strategy that produced it
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    predicted_value: float
    confidence_lower: float
    confidence_upper: float
    method: str
