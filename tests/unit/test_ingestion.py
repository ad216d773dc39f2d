"""
Unit tests for sample file ingestion.
"""

import json
from datetime import datetime, timezone

import pytest

from pingwatch.data.ingestion import (
    SampleIngestionError,
    ingest_samples,
    record_to_sample,
)


def test_record_with_value_alias():
    sample = record_to_sample({"id": 7, "timestamp": "2025-02-07T10:30:45Z", "responseTime": "182.4"})

    assert sample.id == "7"
    assert sample.value == 182.4
    assert sample.timestamp == datetime(2025, 2, 7, 10, 30, 45, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "record",
    [
        {"timestamp": "2025-02-07T10:30:45Z"},
        {"value": 10.0},
        {"timestamp": "not a date", "value": 10.0},
        {"timestamp": "2025-02-07T10:30:45Z", "value": "NaN"},
    ],
)
def test_unusable_records_are_skipped(record):
    assert record_to_sample(record) is None


def test_json_array(tmp_path):
    path = tmp_path / "samples.json"
    path.write_text(
        json.dumps(
            [
                {"timestamp": "2025-02-07T10:30:00Z", "value": 120},
                {"timestamp": "2025-02-07T10:35:00Z", "response_time": 135.5},
                "garbage",
            ]
        ),
        encoding="utf-8",
    )

    samples = list(ingest_samples(path))

    assert [s.value for s in samples] == [120.0, 135.5]


def test_ndjson_skips_malformed_lines(tmp_path):
    path = tmp_path / "samples.ndjson"
    path.write_text(
        '{"timestamp": "2025-02-07T10:30:00Z", "value": 100}\n'
        "{not json}\n"
        "\n"
        '{"timestamp": "2025-02-07T10:35:00Z", "value": 110}\n',
        encoding="utf-8",
    )

    samples = list(ingest_samples(path))

    assert [s.value for s in samples] == [100.0, 110.0]


def test_csv(tmp_path):
    path = tmp_path / "samples.csv"
    path.write_text(
        "id,timestamp,value\n"
        "a,2025-02-07T10:30:00Z,100\n"
        "b,2025-02-07T10:35:00Z,\n"
        "c,2025-02-07T10:40:00Z, 140.5 \n",
        encoding="utf-8",
    )

    samples = list(ingest_samples(path))

    assert [(s.id, s.value) for s in samples] == [("a", 100.0), ("c", 140.5)]


def test_explicit_format_overrides_suffix(tmp_path):
    path = tmp_path / "samples.txt"
    path.write_text("timestamp,value\n2025-02-07T10:30:00Z,99\n", encoding="utf-8")

    with pytest.raises(SampleIngestionError):
        list(ingest_samples(path))

    assert [s.value for s in ingest_samples(path, format="csv")] == [99.0]


def test_missing_file(tmp_path):
    with pytest.raises(SampleIngestionError):
        list(ingest_samples(tmp_path / "missing.json"))


def test_invalid_json_array(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text('[{"timestamp": ', encoding="utf-8")

    with pytest.raises(SampleIngestionError):
        list(ingest_samples(path))
