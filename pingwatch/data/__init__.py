"""
Data module: sample schema, the sample source port, numeric summaries and
file ingestion for replaying recorded probes.
"""

from pingwatch.data.features import mean, population_std, sample_values, summarize
from pingwatch.data.ingestion import (
    CSVSampleFile,
    JSONSampleFile,
    SampleIngestionError,
    ingest_samples,
)
from pingwatch.data.schema import Sample
from pingwatch.data.sources import SampleSource

__all__ = [
    "Sample",
    "SampleSource",
    "mean",
    "population_std",
    "sample_values",
    "summarize",
    "ingest_samples",
    "JSONSampleFile",
    "CSVSampleFile",
    "SampleIngestionError",
]
