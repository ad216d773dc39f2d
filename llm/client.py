"""
HTTP forecast predictor.

Calls an OpenAI-compatible chat-completions endpoint and turns its JSON
answer into a PredictorResult. Every failure mode (timeout, transport error,
non-2xx status, missing content, invalid JSON, schema violation) surfaces as
PredictorUnavailableError so the forecast engine can fall back.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from pingwatch.core.exceptions import PredictorUnavailableError
from pingwatch.data.schema import Sample
from pingwatch.forecast.predictors import DisabledPredictor, Predictor
from pingwatch.forecast.schema import PredictorResult

from .config import PredictorConfig, load_predictor_config
from .prompt import build_prompt
from .schema import ForecastPayload

logger = logging.getLogger("llm")


class HttpForecastPredictor(Predictor):
    """
    External predictor backed by a chat-completions endpoint.

    The httpx client is created lazily and reused across calls. Pass a client
    to inject a transport (tests use httpx.MockTransport).
    """

    name = "http-forecast"

    def __init__(self, config: PredictorConfig, client: Optional[httpx.Client] = None):
        self.config = config
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            headers = {"Content-Type": "application/json", **self.config.headers}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.Client(
                timeout=self.config.timeout_ms / 1000.0,
                headers=headers,
            )
        return self._client

    def forecast(self, samples: List[Sample], timeout_ms: int) -> PredictorResult:
        if not self.config.is_usable:
            raise PredictorUnavailableError("HTTP predictor is disabled or has no API key")

        payload = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": build_prompt(samples)}],
            "response_format": {"type": "json_object"},
            "temperature": self.config.temperature,
        }

        try:
            response = self._get_client().post(
                self.config.endpoint,
                json=payload,
                timeout=timeout_ms / 1000.0,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise PredictorUnavailableError(f"predictor timed out after {timeout_ms}ms") from exc
        except httpx.HTTPError as exc:
            raise PredictorUnavailableError(f"predictor request failed: {exc}") from exc
        except ValueError as exc:
            raise PredictorUnavailableError("predictor returned a non-JSON body") from exc

        content = self._message_content(body)
        try:
            parsed = ForecastPayload(**self._parse_json(content))
        except (ValueError, ValidationError) as exc:
            raise PredictorUnavailableError(f"predictor output rejected: {exc}") from exc

        logger.info(f"Model prediction: {parsed.predicted}ms")
        return PredictorResult(
            predicted_value=parsed.predicted,
            confidence_lower=parsed.confidence_lower,
            confidence_upper=parsed.confidence_upper,
        )

    def _message_content(self, body: object) -> str:
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise PredictorUnavailableError("predictor response has no message content") from exc
        if not content or not isinstance(content, str):
            raise PredictorUnavailableError("No content in predictor response")
        return content

    def _parse_json(self, raw: str) -> Dict[str, object]:
        start = raw.find("{")
        end = raw.rfind("}")
        if start == -1 or end == -1 or end <= start:
            raise ValueError("No JSON object found in model output")
        parsed = json.loads(raw[start : end + 1])
        if not isinstance(parsed, dict):
            raise ValueError("Model output is not a JSON object")
        return parsed

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def create_predictor(config: Optional[PredictorConfig] = None) -> Predictor:
    """
    Factory for the external predictor.

    Returns a DisabledPredictor when no usable configuration is present.
    """

    config = config or load_predictor_config()
    if not config.is_usable:
        logger.warning("External predictor not configured, using statistical methods only")
        return DisabledPredictor()
    logger.info(f"External predictor enabled ({config.model} at {config.endpoint})")
    return HttpForecastPredictor(config=config)
