"""
Unit tests for configuration and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from pingwatch.core.config import Config, DetectionConfig, config
from pingwatch.core.logging_config import setup_app_logging, setup_logging


def test_defaults(tmp_path):
    settings = Config(logs_dir=tmp_path / "logs")

    assert settings.statistics.default_window_hours == 24
    assert settings.statistics.staleness_minutes == 5.0
    assert settings.detection.min_samples == 10
    assert settings.detection.zscore_threshold == 3.0
    assert settings.detection.absolute_threshold_ms == 5000.0
    assert settings.forecast.min_samples == 5
    assert settings.forecast.smoothing_alpha == 0.3
    assert (tmp_path / "logs").is_dir()


def test_nested_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("PINGWATCH_DETECTION__ZSCORE_THRESHOLD", "2.5")
    monkeypatch.setenv("PINGWATCH_STATISTICS__STALENESS_MINUTES", "1")

    settings = Config(logs_dir=tmp_path)

    assert settings.detection.zscore_threshold == 2.5
    assert settings.statistics.staleness_minutes == 1.0


def test_invalid_thresholds_rejected():
    with pytest.raises(ValidationError):
        DetectionConfig(min_samples=0)


@pytest.fixture
def isolated_logs(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "logs_dir", tmp_path)
    created = []
    yield created
    for name in created:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_setup_logging_is_idempotent(isolated_logs, tmp_path):
    isolated_logs.append("pingwatch-test")

    logger = setup_logging("pingwatch-test", level="debug")
    again = setup_logging("pingwatch-test")

    assert again is logger
    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG
    assert (tmp_path / "pingwatch-test.log").exists()


def test_setup_app_logging_quiets_http_client(isolated_logs, monkeypatch):
    for name in ("pingwatch", "backend", "llm"):
        monkeypatch.setattr(logging.getLogger(name), "handlers", [])
        isolated_logs.append(name)

    setup_app_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
    assert all(logging.getLogger(name).handlers for name in ("pingwatch", "backend", "llm"))
