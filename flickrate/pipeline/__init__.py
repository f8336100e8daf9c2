"""Concurrent photo detail fetching over the persistent cache."""

from flickrate.pipeline.constants import DEFAULT_CONCURRENCY
from flickrate.pipeline.fetcher import DetailFetchPipeline, DetailSource
from flickrate.pipeline.metrics import PipelineMetrics
from flickrate.pipeline.models import (
    FetchErrorRecord,
    FetchJob,
    FetchResult,
    PipelineResult,
)


__all__ = [
    "DEFAULT_CONCURRENCY",
    "DetailFetchPipeline",
    "DetailSource",
    "FetchErrorRecord",
    "FetchJob",
    "FetchResult",
    "PipelineMetrics",
    "PipelineResult",
]
