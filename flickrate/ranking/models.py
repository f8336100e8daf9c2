"""Data models for photo ranking."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from flickrate.api.models import PhotoDetail
from flickrate.ranking.constants import (
    DEFAULT_MIN_DAYS,
    DEFAULT_MIN_VIEWS,
    DEFAULT_TOP,
    SECONDS_PER_DAY,
)


class RankMetric(str, Enum):
    """Popularity metric a photo can be selected by.

    Declaration order is the order metrics are applied in; the final
    listing follows the last one applied.
    """

    VIEWS = "views"
    FAVES = "faves"
    FAVE_RATE = "fave_rate"
    RATE = "rate"


ALL_METRICS: frozenset[RankMetric] = frozenset(RankMetric)


class RankCriteria(BaseModel):
    """Which photos qualify and how many are selected per metric."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_days: int = Field(default=DEFAULT_MIN_DAYS, ge=0)
    max_days: int | None = Field(default=None, ge=0)
    min_views: int = Field(default=DEFAULT_MIN_VIEWS, ge=0)
    top: int = Field(default=DEFAULT_TOP, ge=0)
    metrics: frozenset[RankMetric] = ALL_METRICS

    @model_validator(mode="after")
    def _check_window(self) -> "RankCriteria":
        if self.max_days is not None and self.max_days < self.min_days:
            msg = f"max_days ({self.max_days}) is below min_days ({self.min_days})"
            raise ValueError(msg)
        if not self.metrics:
            msg = "at least one metric is required"
            raise ValueError(msg)
        return self

    @property
    def ordered_metrics(self) -> list[RankMetric]:
        """Get the selected metrics in application order."""
        return [metric for metric in RankMetric if metric in self.metrics]


@dataclass
class RankedPhoto:
    """A photo with its popularity figures.

    Attributes:
        detail: Detail record.
        age_seconds: Seconds since the photo was posted.
        selected: Whether any metric placed it in its top N.
    """

    detail: PhotoDetail
    age_seconds: int
    selected: bool = False

    @property
    def age_days(self) -> int:
        """Get the age in whole days."""
        return self.age_seconds // SECONDS_PER_DAY

    @property
    def views(self) -> int:
        """Get the view count."""
        return self.detail.views

    @property
    def faves(self) -> int:
        """Get the favorites count."""
        return self.detail.favorites

    @property
    def rate(self) -> float:
        """Get views per second since posting."""
        if self.age_seconds == 0:
            return 0.0
        return self.detail.views / self.age_seconds

    @property
    def rate_per_day(self) -> float:
        """Get views per day since posting."""
        return self.rate * SECONDS_PER_DAY

    @property
    def fave_rate(self) -> float:
        """Get favorites per view."""
        if self.detail.views == 0:
            return 0.0
        return self.detail.favorites / self.detail.views

    def metric_value(self, metric: RankMetric) -> float:
        """Get the value of one metric.

        Args:
            metric: Metric to read.

        Returns:
            The metric value.
        """
        values = {
            RankMetric.VIEWS: self.views,
            RankMetric.FAVES: self.faves,
            RankMetric.FAVE_RATE: self.fave_rate,
            RankMetric.RATE: self.rate,
        }
        return values[metric]


@dataclass
class RankingResult:
    """Result of ranking a set of photos.

    Attributes:
        selected: Selected photos, in final order.
        considered: Number of photos that passed the filter.
        total: Number of photos offered.
    """

    selected: list[RankedPhoto]
    considered: int
    total: int
