"""
Configuration for the external forecast predictor.

The predictor is optional: without an API key it stays disabled and the
forecast engine relies on its deterministic methods alone.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from pingwatch.core.exceptions import ConfigurationError


class PredictorConfig(BaseModel):
    """
    Configuration for an OpenAI-compatible chat-completions predictor.

    Notes:
    - endpoint is the full chat-completions URL.
    - timeout_ms bounds every call; a slower answer counts as a failure.
    - temperature is kept low so repeated calls on the same window agree.
    """

    enabled: bool = False
    endpoint: str = Field("https://api.openai.com/v1/chat/completions", min_length=1)
    api_key: Optional[str] = None
    model: str = Field("gpt-4o-mini", min_length=1)
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    timeout_ms: int = Field(10_000, ge=1)
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_usable(self) -> bool:
        return self.enabled and bool(self.api_key)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_predictor_config() -> PredictorConfig:
    """
    Build the predictor config from environment variables.

    PINGWATCH_PREDICTOR_API_KEY (or OPENAI_API_KEY) enables the predictor
    unless PINGWATCH_PREDICTOR_ENABLED says otherwise.

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    api_key = os.getenv("PINGWATCH_PREDICTOR_API_KEY") or os.getenv("OPENAI_API_KEY")
    data: Dict[str, object] = {
        "api_key": api_key,
        "enabled": _parse_bool(os.getenv("PINGWATCH_PREDICTOR_ENABLED"), bool(api_key)),
    }
    if os.getenv("PINGWATCH_PREDICTOR_ENDPOINT"):
        data["endpoint"] = os.getenv("PINGWATCH_PREDICTOR_ENDPOINT")
    if os.getenv("PINGWATCH_PREDICTOR_MODEL"):
        data["model"] = os.getenv("PINGWATCH_PREDICTOR_MODEL")
    if os.getenv("PINGWATCH_PREDICTOR_TIMEOUT_MS"):
        data["timeout_ms"] = os.getenv("PINGWATCH_PREDICTOR_TIMEOUT_MS")

    try:
        return PredictorConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid predictor configuration: {e}") from e
