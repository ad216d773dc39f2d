"""
Prompt construction for model-based forecasting.

The prompt lists the window samples in time order and constrains the output to
a single JSON object matching ForecastPayload.
"""

from __future__ import annotations

import json
from typing import List

from pingwatch.data.schema import Sample


def build_prompt(samples: List[Sample]) -> str:
    """
    Build a strict JSON-only forecasting prompt.

    Args:
        samples: Window samples ordered by ascending timestamp
    """

    data_lines = "\n".join(
        f"{sample.timestamp.isoformat()}: {sample.value}ms" for sample in samples
    )

    schema = {
        "predicted": "number (ms)",
        "confidenceLower": "number (ms)",
        "confidenceUpper": "number (ms)",
        "reasoning": "string (brief explanation)",
    }

    prompt = (
        "You are a time-series forecasting expert. Given the following HTTP response "
        "times (in milliseconds) with their timestamps, predict the next expected "
        "response time.\n"
        f"DATA:\n{data_lines}\n"
        "Analyze the pattern and provide the predicted next value and a confidence "
        "interval (lower and upper bounds).\n"
        f"SCHEMA: {json.dumps(schema, sort_keys=True)}\n"
        "RETURN_JSON_ONLY:"
    )

    return prompt
