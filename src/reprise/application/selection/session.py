"""
Session assembler for the normal mode.

Builds a daily session from:
1. Due reviews, most urgent first (up to the daily target)
2. Fresh items, in the repository's native order, to fill the remainder

Fresh items are not shuffled: normal mode walks through unseen material in
order. Template items are left out on both sides.
"""

import logging
from collections.abc import Sequence

from reprise.domain.models import LearningItem, PracticeMode

from .base import SelectionStrategy

logger = logging.getLogger(__name__)


class SessionAssembler(SelectionStrategy):
    mode = PracticeMode.NORMAL

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        daily_target = count
        if daily_target <= 0:
            return []

        ranked = (await self.ctx.due_study_reviews())[:daily_target]
        review_items = [entry.item for entry in ranked]
        claimed = {entry.review.item_id for entry in ranked}

        remaining = daily_target - len(review_items)
        if remaining <= 0:
            return review_items

        # Only ids claimed by this session are excluded; items with a review
        # that is not yet due still count as fresh.
        fresh = [item for item in await self.ctx.study_pool() if item.id not in claimed]
        fresh_items = fresh[:remaining]

        logger.debug(
            f"normal: {len(review_items)} due reviews + {len(fresh_items)} fresh items "
            f"for a target of {daily_target}"
        )
        return review_items + fresh_items
