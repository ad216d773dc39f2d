"""
Schema for model-generated forecasts.

All fields are validated before use; anything that does not fit is rejected.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ForecastPayload(BaseModel):
    """
    Structured forecast returned by the model.

    Fields:
    - predicted: next expected value in ms
    - confidence_lower/upper: interval bounds in ms (JSON: confidenceLower/Upper)
    - reasoning: short explanation, kept for logging only
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    predicted: float = Field(allow_inf_nan=False)
    confidence_lower: float = Field(alias="confidenceLower", allow_inf_nan=False)
    confidence_upper: float = Field(alias="confidenceUpper", allow_inf_nan=False)
    reasoning: Optional[str] = Field(default=None, max_length=2000)
