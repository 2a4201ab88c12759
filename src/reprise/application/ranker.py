"""
Review priority ranker.

Scores every due review for urgency and returns them most urgent first,
joined with the item they belong to:

    priority = days_overdue * 10
             + (30 - interval_days) * 2
             + (20 if NG, 10 if MAYBE, 0 if OK)

The interval term is not floored: items with intervals above 30 days get a
negative contribution and simply sink.
"""

import logging
import math
from datetime import datetime

from reprise.application.utils.clock import as_utc, utcnow
from reprise.domain.constants import (
    INTERVAL_PIVOT_DAYS,
    INTERVAL_WEIGHT,
    MAYBE_BONUS,
    NG_BONUS,
    OVERDUE_DAY_WEIGHT,
    SECONDS_PER_DAY,
)
from reprise.domain.models import LearningItem, RankedReview, ReviewOutcome, ReviewState
from reprise.domain.ports import ItemRepository, ReviewRepository

logger = logging.getLogger(__name__)

OUTCOME_BONUS = {
    ReviewOutcome.NG: NG_BONUS,
    ReviewOutcome.MAYBE: MAYBE_BONUS,
    ReviewOutcome.OK: 0,
}


def days_overdue(review: ReviewState, now: datetime) -> int:
    """Whole days since the review fell due (negative if not yet due)."""
    elapsed = (as_utc(now) - as_utc(review.due_at)).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)


def compute_priority(review: ReviewState, now: datetime) -> int:
    """Urgency score of a review. Higher is served first."""
    priority = days_overdue(review, now) * OVERDUE_DAY_WEIGHT
    priority += (INTERVAL_PIVOT_DAYS - review.interval_days) * INTERVAL_WEIGHT
    priority += OUTCOME_BONUS[review.last_outcome]
    return priority


class ReviewPriorityRanker:
    """
    Ranks the due set by priority.

    Reviews whose item no longer exists are dropped from the result.
    """

    def __init__(self, reviews: ReviewRepository, items: ItemRepository):
        self._reviews = reviews
        self._items = items

    async def rank_due(
        self, now: datetime | None = None, limit: int | None = None
    ) -> list[RankedReview]:
        """
        Rank every review with due_at <= now.

        Args:
            now: Reference time (defaults to the current UTC time).
            limit: Keep only the first `limit` entries after ranking.

        Returns:
            RankedReview entries, descending by priority. Ties keep the
            repository's order.
        """
        now = utcnow() if now is None else as_utc(now)

        due = await self._reviews.get_all_due(now)
        if not due:
            return []

        items_by_id = await self._load_items()

        ranked: list[RankedReview] = []
        for review in due:
            # Repositories may return records that are not yet due.
            if as_utc(review.due_at) > now:
                continue

            item = items_by_id.get(review.item_id)
            if item is None:
                logger.debug(f"Dropping review for missing item {review.item_id}")
                continue

            ranked.append(
                RankedReview(
                    item=item,
                    review=review,
                    priority=compute_priority(review, now),
                    days_overdue=days_overdue(review, now),
                )
            )

        ranked.sort(key=lambda r: r.priority, reverse=True)

        if limit is not None:
            ranked = ranked[: max(limit, 0)]
        return ranked

    async def _load_items(self) -> dict[str, LearningItem]:
        return {item.id: item for item in await self._items.get_all()}
