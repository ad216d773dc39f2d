"""
Minimal backend for PingWatch.

Serves the monitor over HTTP for dashboards and the ping scheduler, and can
replay a recorded sample file through the same pipeline from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from dotenv import load_dotenv
from pydantic import ValidationError

from llm.client import create_predictor
from llm.config import load_predictor_config
from pingwatch.anomaly.schema import AnomalySeverity
from pingwatch.core.exceptions import ConfigurationError, StorageError
from pingwatch.core.logging_config import setup_app_logging
from pingwatch.data.ingestion import SampleIngestionError, ingest_samples
from pingwatch.data.schema import Sample

from backend.monitor import MonitorService
from backend.notifications import LoggingNotificationSink, RecordingNotificationSink

load_dotenv()

logger = logging.getLogger("backend")

MONITOR: Optional[MonitorService] = None
EVENTS = RecordingNotificationSink()


def _monitor() -> MonitorService:
    global MONITOR
    if MONITOR is None:
        MONITOR = build_monitor()
    return MONITOR


def build_monitor() -> MonitorService:
    predictor_config = load_predictor_config()
    return MonitorService(
        sinks=[LoggingNotificationSink(), EVENTS],
        predictors=[create_predictor(predictor_config)],
        predictor_timeout_ms=predictor_config.timeout_ms,
    )


def _int_param(params: Dict[str, List[str]], name: str, default: Optional[int] = None) -> Optional[int]:
    raw = params.get(name, [None])[0]
    if raw in (None, ""):
        return default
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be positive")
    return value


def _dump(model: object) -> object:
    if model is None:
        return None
    return model.model_dump(mode="json")


class BackendHandler(BaseHTTPRequestHandler):
    server_version = "PingWatch/1.0"

    def _send_json(self, status: int, payload: Dict[str, object]) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Access-Control-Allow-Origin", os.getenv("CORS_ORIGIN", "*"))
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, PATCH, OPTIONS")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> Optional[Dict[str, object]]:
        length = int(self.headers.get("Content-Length", "0"))
        if length <= 0:
            return None
        data = self.rfile.read(length)
        try:
            payload = json.loads(data.decode("utf-8"))
        except json.JSONDecodeError:
            return None
        return payload if isinstance(payload, dict) else None

    def _route(self) -> Tuple[str, Dict[str, List[str]]]:
        parsed = urlparse(self.path)
        return parsed.path.rstrip("/") or "/", parse_qs(parsed.query)

    def do_GET(self) -> None:
        path, params = self._route()
        monitor = _monitor()

        try:
            window = _int_param(params, "windowHours")
            if path == "/health":
                self._send_json(200, {"status": "ok"})
            elif path == "/api/samples":
                result = monitor.samples.page(_int_param(params, "page", 1), _int_param(params, "limit", 20))
                self._send_json(200, {"data": [_dump(s) for s in result["data"]], "meta": result["meta"]})
            elif path == "/api/samples/latest":
                self._send_json(200, {"data": _dump(monitor.samples.latest())})
            elif path.startswith("/api/samples/") and path.count("/") == 3:
                sample = monitor.samples.get(path.rsplit("/", 1)[-1])
                if sample is None:
                    self._send_json(404, {"detail": "Sample not found"})
                else:
                    self._send_json(200, {"data": _dump(sample)})
            elif path == "/api/anomalies":
                severity_raw = params.get("severity", [None])[0]
                severity = AnomalySeverity(severity_raw) if severity_raw else None
                anomalies = monitor.anomalies.list(_int_param(params, "limit", 50), severity)
                self._send_json(
                    200,
                    {
                        "data": [_dump(a) for a in anomalies],
                        "meta": {"count": len(anomalies), "severity": severity_raw or "all"},
                    },
                )
            elif path == "/api/statistics":
                self._send_json(200, {"data": _dump(monitor.compute_or_fetch_statistics(window))})
            elif path == "/api/statistics/history":
                history = monitor.statistics_history(window, _int_param(params, "limit", 100))
                self._send_json(
                    200,
                    {
                        "data": [_dump(s) for s in history],
                        "meta": {"count": len(history), "window_hours": window or monitor.default_window_hours},
                    },
                )
            elif path == "/api/predictions":
                self._send_json(200, {"data": _dump(monitor.predict_next(window))})
            elif path == "/api/predictions/sma":
                prediction = monitor.predict_sma(window, _int_param(params, "period"))
                self._send_json(200, {"data": _dump(prediction)})
            elif path == "/api/confidence-bands":
                self._send_json(200, {"data": monitor.confidence_bands(window)})
            elif path == "/api/events":
                self._send_json(
                    200,
                    {
                        "samples": [_dump(s) for s in EVENTS.samples],
                        "anomalies": [_dump(a) for a in EVENTS.anomalies],
                    },
                )
            else:
                self._send_json(404, {"detail": "Not found"})
        except ValueError as exc:
            self._send_json(400, {"detail": str(exc)})

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", os.getenv("CORS_ORIGIN", "*"))
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, PATCH, OPTIONS")
        self.end_headers()

    def do_POST(self) -> None:
        path, _ = self._route()
        if path != "/api/samples":
            self._send_json(404, {"detail": "Not found"})
            return

        payload = self._read_json()
        if payload is None:
            self._send_json(400, {"detail": "Expected a JSON object"})
            return
        payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

        try:
            sample = Sample(**payload)
        except ValidationError as exc:
            self._send_json(422, {"detail": exc.errors(include_url=False, include_context=False)})
            return

        try:
            anomalies = _monitor().record_sample(sample)
        except StorageError as exc:
            self._send_json(409, {"detail": str(exc)})
            return
        self._send_json(201, {"data": _dump(sample), "anomalies": [_dump(a) for a in anomalies]})

    def do_PATCH(self) -> None:
        path, _ = self._route()
        parts = path.strip("/").split("/")
        if len(parts) != 4 or parts[:2] != ["api", "anomalies"] or parts[3] != "acknowledge":
            self._send_json(404, {"detail": "Not found"})
            return

        anomaly = _monitor().acknowledge(parts[2])
        if anomaly is None:
            self._send_json(404, {"detail": "Anomaly not found"})
            return
        self._send_json(200, {"data": _dump(anomaly)})


def run(host: str, port: int) -> None:
    _monitor()
    logger.info("Starting backend server on %s:%s", host, port)
    server = ThreadingHTTPServer((host, port), BackendHandler)
    server.serve_forever()


def replay(path: str, window_hours: Optional[int] = None, file_format: str = "auto") -> Dict[str, object]:
    """
    Feed a recorded sample file through a fresh monitor.

    Returns:
        Dict with the sample count, emitted anomalies and forecasts as of the last sample
    """
    predictor_config = load_predictor_config()
    monitor = MonitorService(
        predictors=[create_predictor(predictor_config)],
        predictor_timeout_ms=predictor_config.timeout_ms,
    )
    anomalies = []
    last: Optional[Sample] = None

    for sample in sorted(ingest_samples(path, format=file_format), key=lambda s: s.timestamp):
        anomalies.extend(monitor.record_sample(sample))
        last = sample

    now = last.timestamp if last else datetime.now(timezone.utc)
    return {
        "sample_count": len(monitor.samples),
        "anomalies": [_dump(a) for a in anomalies],
        "statistics": _dump(monitor.compute_or_fetch_statistics(window_hours, now)),
        "prediction": _dump(monitor.predict_next(window_hours, now=now)),
        "sma_prediction": _dump(monitor.predict_sma(window_hours, now=now)),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="PingWatch backend")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    replay_parser = subparsers.add_parser("replay", help="Replay a recorded sample file")
    replay_parser.add_argument("path")
    replay_parser.add_argument("--window-hours", type=int, default=None)
    replay_parser.add_argument("--format", choices=["auto", "json", "csv"], default="auto")

    args = parser.parse_args(argv)
    setup_app_logging()

    if args.command == "replay":
        try:
            result = replay(args.path, args.window_hours, args.format)
        except (SampleIngestionError, StorageError, ConfigurationError) as exc:
            logger.error("Replay failed: %s", exc)
            return 1
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    host = getattr(args, "host", "0.0.0.0")
    port = getattr(args, "port", 8000)
    try:
        run(host, port)
    except ConfigurationError as exc:
        logger.error("Cannot start backend: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
