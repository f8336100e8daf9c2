"""Popularity ranking of photo detail records."""

from flickrate.ranking.models import (
    ALL_METRICS,
    RankCriteria,
    RankedPhoto,
    RankingResult,
    RankMetric,
)
from flickrate.ranking.ranker import filter_photos, rank_photos


__all__ = [
    "ALL_METRICS",
    "RankCriteria",
    "RankMetric",
    "RankedPhoto",
    "RankingResult",
    "filter_photos",
    "rank_photos",
]
