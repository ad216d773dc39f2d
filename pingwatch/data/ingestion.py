"""
Sample ingestion from recorded probe files.

Supports JSON (array or NDJSON) and CSV files with ``timestamp`` and ``value``
columns (``response_time`` / ``responseTime`` are accepted as value aliases;
``id`` is optional). Used by the replay CLI to feed recorded probe results
through the monitor.

Design:
- Format detection from the file suffix, or explicit format
- Iterator-based for memory efficiency with large files
- Bad rows logged and skipped, they don't crash the replay
"""

import csv
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from pydantic import ValidationError

from .schema import Sample

logger = logging.getLogger(__name__)

VALUE_KEYS = ("value", "response_time", "responseTime", "response_time_ms")


class SampleIngestionError(Exception):
    """Raised when a sample file cannot be read at all."""
    pass


def record_to_sample(record: Dict[str, Any]) -> Optional[Sample]:
    """
    Convert a raw record into a Sample.

    Returns:
        Sample, or None if the record lacks a timestamp or value or fails validation
    """
    value = next((record[key] for key in VALUE_KEYS if record.get(key) not in (None, "")), None)
    timestamp = record.get("timestamp")
    if value is None or not timestamp:
        return None

    data: Dict[str, Any] = {"timestamp": timestamp, "value": value}
    if record.get("id"):
        data["id"] = str(record["id"])

    try:
        return Sample(**data)
    except ValidationError as e:
        logger.warning(f"Invalid sample record skipped: {e.errors()[0]['msg']}")
        return None


class BaseSampleSourceFile(ABC):
    """
    Abstract base class for sample files.

    Subclasses handle format-specific reading; conversion to Sample is shared.
    """

    def __init__(self, filepath: Union[str, Path], encoding: str = "utf-8"):
        self.filepath = Path(filepath)
        self.encoding = encoding

        if not self.filepath.exists():
            raise SampleIngestionError(f"Sample file not found: {self.filepath}")

    @abstractmethod
    def records(self) -> Iterator[Dict[str, Any]]:
        """Yield raw records from the file."""
        pass

    def ingest(self) -> Iterator[Sample]:
        skipped = 0
        for record in self.records():
            sample = record_to_sample(record)
            if sample is None:
                skipped += 1
                continue
            yield sample
        if skipped:
            logger.warning(f"Skipped {skipped} unusable records in {self.filepath}")


class JSONSampleFile(BaseSampleSourceFile):
    """
    Reads samples from a JSON array or NDJSON file.

    Example NDJSON:
        {"timestamp": "2025-02-07T10:30:45Z", "value": 182.4}
        {"timestamp": "2025-02-07T10:35:45Z", "value": 201.0}
    """

    def records(self) -> Iterator[Dict[str, Any]]:
        try:
            with open(self.filepath, "r", encoding=self.encoding) as f:
                content = f.read().lstrip("\ufeff").strip()
        except OSError as e:
            raise SampleIngestionError(f"Failed to read JSON samples: {e}") from e

        if content.startswith("["):
            try:
                rows = json.loads(content)
            except json.JSONDecodeError as e:
                raise SampleIngestionError(f"Invalid JSON array: {e}") from e

            for idx, row in enumerate(rows):
                if isinstance(row, dict):
                    yield row
                else:
                    logger.warning(f"Non-dict entry at index {idx}: {type(row)}")
            return

        for line_num, line in enumerate(content.split("\n"), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError:
                logger.warning(f"Malformed JSON at line {line_num}: {line[:100]}")
                continue
            if isinstance(row, dict):
                yield row
            else:
                logger.warning(f"NDJSON line {line_num} not a dict: {type(row)}")


class CSVSampleFile(BaseSampleSourceFile):
    """
    Reads samples from a CSV file with a header row.

    Example:
        timestamp,value
        2025-02-07T10:30:45Z,182.4
    """

    def records(self) -> Iterator[Dict[str, Any]]:
        try:
            with open(self.filepath, "r", encoding=self.encoding, newline="") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames is None:
                    raise SampleIngestionError("CSV file has no header")
                for row in reader:
                    yield {k.strip(): (v.strip() if isinstance(v, str) else v) for k, v in row.items() if k}
        except OSError as e:
            raise SampleIngestionError(f"Failed to read CSV samples: {e}") from e


def ingest_samples(filepath: Union[str, Path], format: str = "auto") -> Iterator[Sample]:
    """
    Ingest samples from a file.

    Args:
        filepath: Path to the sample file
        format: "json", "csv", or "auto" (detect from suffix)

    Yields:
        Sample objects in file order

    Raises:
        SampleIngestionError: If the file is missing or the format is unsupported
    """
    path = Path(filepath)
    if format == "auto":
        suffix = path.suffix.lower()
        if suffix in {".json", ".ndjson", ".jsonl"}:
            format = "json"
        elif suffix == ".csv":
            format = "csv"
        else:
            raise SampleIngestionError(f"Cannot detect sample format from suffix: {suffix!r}")

    if format == "json":
        source: BaseSampleSourceFile = JSONSampleFile(path)
    elif format == "csv":
        source = CSVSampleFile(path)
    else:
        raise SampleIngestionError(f"Unsupported sample format: {format}")

    logger.info(f"Ingesting samples from {path} (format={format})")
    yield from source.ingest()
