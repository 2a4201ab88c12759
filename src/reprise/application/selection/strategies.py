"""Selection strategies, one per practice mode (normal lives in session.py)."""

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence

from reprise.domain.models import FlashcardWord, LearningItem, PracticeMode, ReviewOutcome

from .base import SelectionStrategy
from .shuffle import shuffled
from .words import flashcard_words

logger = logging.getLogger(__name__)


class ReviewOnlyStrategy(SelectionStrategy):
    """Due reviews only, in priority order. Never padded with fresh items."""

    mode = PracticeMode.REVIEW_ONLY

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        if count <= 0:
            return []
        ranked = await self.ctx.due_study_reviews()
        return [entry.item for entry in ranked[:count]]


class ShuffleStrategy(SelectionStrategy):
    """The whole pool in random order, truncated to count."""

    mode = PracticeMode.SHUFFLE

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        pool = await self.ctx.study_pool()
        self._log_pool(len(pool))
        return shuffled(pool, self.ctx.rng)[: max(count, 0)]


class TypingStrategy(ShuffleStrategy):
    mode = PracticeMode.TYPING


class FocusStrategy(ShuffleStrategy):
    mode = PracticeMode.FOCUS


class RandomStrategy(ShuffleStrategy):
    mode = PracticeMode.RANDOM


class FavoriteStrategy(SelectionStrategy):
    """Favorite items only, shuffled."""

    mode = PracticeMode.FAVORITE

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        pool = [item for item in await self.ctx.study_pool() if item.favorite]
        self._log_pool(len(pool))
        return shuffled(pool, self.ctx.rng)[: max(count, 0)]


class WeakStrategy(SelectionStrategy):
    """
    Items that were graded NG at least once.

    The pool is ordered by NG count and then shuffled before truncation, so
    the NG count only decides membership; the served order is random.
    """

    mode = PracticeMode.WEAK

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        ng_counts = await self._ng_counts()
        pool = [item for item in await self.ctx.study_pool() if ng_counts[item.id] > 0]
        pool.sort(key=lambda item: ng_counts[item.id], reverse=True)
        self._log_pool(len(pool))
        return shuffled(pool, self.ctx.rng)[: max(count, 0)]

    async def _ng_counts(self) -> Counter[str]:
        reviews = await self.ctx.reviews.get_all()
        return Counter(r.item_id for r in reviews if r.last_outcome is ReviewOutcome.NG)


class SpeedStrategy(SelectionStrategy):
    """Favorites first (shuffled), then everything else (shuffled)."""

    mode = PracticeMode.SPEED

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        pool = await self.ctx.study_pool()
        favorites = [item for item in pool if item.favorite]
        others = [item for item in pool if not item.favorite]
        self._log_pool(len(pool))
        ordered = shuffled(favorites, self.ctx.rng) + shuffled(others, self.ctx.rng)
        return ordered[: max(count, 0)]


class FlashcardStrategy(SelectionStrategy):
    """Word cards built from every item's important words, shuffled."""

    mode = PracticeMode.FLASHCARD

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[FlashcardWord]:
        words = flashcard_words(await self.ctx.study_pool())
        self._log_pool(len(words))
        return shuffled(words, self.ctx.rng)[: max(count, 0)]


class CustomStrategy(SelectionStrategy):
    """
    Exactly the items the caller picked, in the caller's order.

    Ids that do not resolve are dropped. The count argument is ignored and
    template items are not filtered out.
    """

    mode = PracticeMode.CUSTOM

    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem]:
        if not item_ids:
            return []

        # Lookups are independent; gather keeps the input order.
        resolved = await asyncio.gather(*(self.ctx.items.get_by_id(i) for i in item_ids))

        items = [item for item in resolved if item is not None]
        if len(items) < len(item_ids):
            logger.debug(f"custom: dropped {len(item_ids) - len(items)} unresolved ids")
        return items
