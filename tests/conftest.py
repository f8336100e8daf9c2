"""Shared fixtures."""

from collections.abc import Iterator

import pytest

from flickrate.api.metrics import ApiMetrics
from flickrate.pipeline.metrics import PipelineMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    """Give every test fresh metrics singletons."""
    ApiMetrics.reset()
    PipelineMetrics.reset()
    yield
    ApiMetrics.reset()
    PipelineMetrics.reset()
