"""Filter and rank photos by popularity."""

from collections.abc import Iterable

import structlog

from flickrate.api.models import PhotoDetail
from flickrate.ranking.constants import COMPONENT_RANKING
from flickrate.ranking.models import RankCriteria, RankedPhoto, RankingResult


logger = structlog.get_logger()


def filter_photos(
    details: Iterable[PhotoDetail], criteria: RankCriteria, now: int
) -> list[RankedPhoto]:
    """Keep photos inside the age window with enough views.

    Args:
        details: Detail records.
        criteria: Selection criteria.
        now: Current Unix time.

    Returns:
        Qualifying photos, in input order.
    """
    kept: list[RankedPhoto] = []
    for detail in details:
        photo = RankedPhoto(detail=detail, age_seconds=now - detail.posted)
        if photo.age_days < criteria.min_days:
            continue
        if criteria.max_days is not None and photo.age_days > criteria.max_days:
            continue
        if photo.views < criteria.min_views:
            continue
        kept.append(photo)
    return kept


def rank_photos(
    details: Iterable[PhotoDetail],
    criteria: RankCriteria,
    now: int,
    run_id: str = "",
) -> RankingResult:
    """Select the most popular photos.

    Every selected metric in turn stable-sorts the qualifying photos in
    descending order and marks its top N. Ties keep the order left by the
    previous metric, so the final listing follows the last metric applied.

    Args:
        details: Detail records.
        criteria: Selection criteria.
        now: Current Unix time.
        run_id: Run identifier for logging.

    Returns:
        RankingResult with the selected photos in final order.
    """
    details = list(details)
    # Photo id order makes ties deterministic regardless of fetch order
    photos = filter_photos(sorted(details, key=lambda d: d.id), criteria, now)

    for metric in criteria.ordered_metrics:
        photos.sort(key=lambda p, m=metric: p.metric_value(m), reverse=True)
        for photo in photos[: criteria.top]:
            photo.selected = True

    selected = [photo for photo in photos if photo.selected]

    logger.bind(component=COMPONENT_RANKING, run_id=run_id).info(
        "ranking_complete",
        total=len(details),
        considered=len(photos),
        selected=len(selected),
        metrics=[metric.value for metric in criteria.ordered_metrics],
    )
    return RankingResult(selected=selected, considered=len(photos), total=len(details))
