"""
Integration tests for the monitor pipeline.

Tests the full flow: store -> baseline -> detect -> persist -> publish -> forecast,
plus the replay CLI on recorded sample files.
"""

import json
from datetime import timedelta

import pytest

import backend.main as backend_main
from backend.main import main, replay
from backend.monitor import MonitorService
from backend.notifications import NotificationSink, RecordingNotificationSink
from pingwatch.anomaly.schema import AnomalySeverity, AnomalyType
from pingwatch.data.schema import Sample

pytestmark = pytest.mark.integration

BASELINE = [100.0, 120.0] * 20


class _ExplodingSink(NotificationSink):
    def publish_sample(self, sample):
        raise RuntimeError("sink down")

    def publish_anomaly(self, anomaly):
        raise RuntimeError("sink down")


@pytest.fixture(autouse=True)
def _no_external_predictor(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("PINGWATCH_PREDICTOR_API_KEY", raising=False)


@pytest.fixture
def recorder() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def monitor(recorder) -> MonitorService:
    return MonitorService(sinks=[_ExplodingSink(), recorder])


def _feed(monitor, sample_factory, values):
    emitted = []
    samples = sample_factory(values)
    for sample in samples:
        emitted.extend(monitor.record_sample(sample))
    return samples, emitted


def test_steady_traffic_emits_no_anomalies(monitor, recorder, sample_factory):
    samples, emitted = _feed(monitor, sample_factory, BASELINE)

    assert emitted == []
    assert len(monitor.samples) == len(BASELINE)
    assert [s.id for s in recorder.samples] == [s.id for s in samples]


def test_spike_is_detected_persisted_and_published(monitor, recorder, sample_factory):
    samples, _ = _feed(monitor, sample_factory, BASELINE)
    spike = Sample(id="spike", timestamp=samples[-1].timestamp + timedelta(minutes=6), value=5200.0)

    anomalies = monitor.record_sample(spike)

    assert [a.type for a in anomalies] == [AnomalyType.ZSCORE, AnomalyType.THRESHOLD]
    assert anomalies[0].severity == AnomalySeverity.CRITICAL
    assert all(a.alert_triggered for a in anomalies)
    assert all(a.sample_ref == "spike" for a in anomalies)
    assert [a.id for a in recorder.anomalies] == [a.id for a in anomalies]
    assert {a.id for a in monitor.anomalies.list()} == {a.id for a in anomalies}


def test_acknowledge_flow(monitor, sample_factory):
    samples, _ = _feed(monitor, sample_factory, BASELINE)
    spike = Sample(timestamp=samples[-1].timestamp + timedelta(minutes=6), value=9000.0)
    anomaly = monitor.record_sample(spike)[0]

    acknowledged = monitor.acknowledge(anomaly.id)

    assert acknowledged.acknowledged is True
    assert anomaly.acknowledged is False
    assert monitor.anomalies.get(anomaly.id).acknowledged is True
    assert monitor.acknowledge("unknown") is None


def test_forecasts_and_bands(monitor, sample_factory):
    samples, _ = _feed(monitor, sample_factory, BASELINE)
    now = samples[-1].timestamp

    prediction = monitor.predict_next(now=now)
    sma = monitor.predict_sma(now=now)
    bands = monitor.confidence_bands(now=now + timedelta(minutes=10))

    assert prediction.method == "exponential-smoothing"
    assert 100.0 <= prediction.predicted_value <= 120.0
    assert prediction.confidence_lower < prediction.predicted_value < prediction.confidence_upper
    assert sma.method == "simple-moving-average"
    assert sma.predicted_value == pytest.approx(110.0)
    assert bands["mean"] == pytest.approx(110.0)
    assert bands["std_dev"] == pytest.approx(10.0)
    assert bands["lower"] < bands["mean"] < bands["upper"]
    assert bands["confidence_level"] == 0.95


def test_statistics_history_grows_as_snapshots_expire(monitor, sample_factory):
    _feed(monitor, sample_factory, BASELINE)

    history = monitor.statistics_history()

    assert len(history) > 1
    assert history[0].created_at > history[-1].created_at


def test_replay_csv(tmp_path):
    path = tmp_path / "probe.csv"
    rows = ["timestamp,value"]
    for i, value in enumerate(BASELINE + [5200.0]):
        rows.append(f"2025-02-07T{10 + i // 12:02d}:{(i % 12) * 5:02d}:00Z,{value}")
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")

    result = replay(str(path))

    assert result["sample_count"] == len(BASELINE) + 1
    assert [a["type"] for a in result["anomalies"]][-1] == "threshold"
    assert result["statistics"]["sample_count"] == len(BASELINE) + 1
    assert result["prediction"]["method"] == "exponential-smoothing"
    assert result["sma_prediction"]["method"] == "simple-moving-average"


def test_replay_cli_prints_json(tmp_path, capsys):
    path = tmp_path / "probe.ndjson"
    lines = [
        json.dumps({"timestamp": f"2025-02-07T10:{i:02d}:00Z", "value": 100 + i})
        for i in range(6)
    ]
    path.write_text("\n".join(lines), encoding="utf-8")

    assert main(["replay", str(path)]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["sample_count"] == 6
    assert output["anomalies"] == []
    assert output["prediction"]["method"] == "exponential-smoothing"
    assert output["sma_prediction"] is None


def test_replay_cli_missing_file(tmp_path):
    assert main(["replay", str(tmp_path / "missing.csv")]) == 1


def test_replay_cli_rejects_bad_predictor_config(tmp_path, monkeypatch):
    path = tmp_path / "probe.ndjson"
    path.write_text(json.dumps({"timestamp": "2025-02-07T10:00:00Z", "value": 100}), encoding="utf-8")
    monkeypatch.setenv("PINGWATCH_PREDICTOR_TIMEOUT_MS", "-5")

    assert main(["replay", str(path)]) == 1


def test_replay_uses_configured_predictor_timeout(tmp_path, monkeypatch):
    built = []

    class _TrackedMonitor(MonitorService):
        def __post_init__(self):
            super().__post_init__()
            built.append(self)

    monkeypatch.setattr(backend_main, "MonitorService", _TrackedMonitor)
    monkeypatch.setenv("PINGWATCH_PREDICTOR_TIMEOUT_MS", "2500")
    path = tmp_path / "samples.ndjson"
    path.write_text(json.dumps({"timestamp": "2025-02-07T10:00:00Z", "value": 100}), encoding="utf-8")

    replay(str(path))

    assert len(built) == 1
    assert built[0].predictor_timeout_ms == 2500
    assert built[0].forecaster.predictor_timeout_ms == 2500


@pytest.mark.parametrize("window_hours", [0, -3])
def test_non_positive_window_is_rejected(monitor, sample_factory, window_hours):
    _feed(monitor, sample_factory, BASELINE[:6])

    with pytest.raises(ValueError):
        monitor.compute_or_fetch_statistics(window_hours)
    with pytest.raises(ValueError):
        monitor.predict_next(window_hours)
    with pytest.raises(ValueError):
        monitor.statistics_history(window_hours)


def test_omitted_window_uses_default(monitor, sample_factory):
    _feed(monitor, sample_factory, BASELINE[:6])
    now = monitor.samples.latest().timestamp

    snapshot = monitor.compute_or_fetch_statistics(None, now)

    assert snapshot.window_size_hours == monitor.default_window_hours


def test_recording_sink_requires_room_for_events():
    with pytest.raises(ValueError):
        RecordingNotificationSink(max_events=0)


def test_recording_sink_keeps_most_recent_events(sample_factory):
    sink = RecordingNotificationSink(max_events=2)
    samples = sample_factory([1.0, 2.0, 3.0])

    for sample in samples:
        sink.publish_sample(sample)

    assert [s.id for s in sink.samples] == [s.id for s in samples[-2:]]
