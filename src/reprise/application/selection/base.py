"""
Base types for selection strategies.

A strategy turns a requested count into an ordered sequence to present. The
returned order is part of the contract: callers must not re-shuffle it.
"""

import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar

from reprise.application.ranker import ReviewPriorityRanker
from reprise.application.utils.clock import utcnow
from reprise.domain.models import FlashcardWord, LearningItem, PracticeMode, RankedReview
from reprise.domain.ports import ItemRepository, ReviewRepository

logger = logging.getLogger(__name__)


@dataclass
class SelectionContext:
    """Collaborators shared by every strategy of one selection call."""

    items: ItemRepository
    reviews: ReviewRepository
    ranker: ReviewPriorityRanker
    rng: random.Random = field(default_factory=random.Random)
    now: datetime = field(default_factory=utcnow)

    async def study_pool(self) -> list[LearningItem]:
        """Every item except template (seed/demo) content, in native order."""
        return [item for item in await self.items.get_all() if not item.is_template]

    async def due_study_reviews(self) -> list[RankedReview]:
        """Due reviews in priority order, without template items."""
        ranked = await self.ranker.rank_due(now=self.now)
        return [entry for entry in ranked if not entry.item.is_template]


class SelectionStrategy(ABC):
    """One learning mode's way of picking items."""

    mode: ClassVar[PracticeMode]

    def __init__(self, context: SelectionContext):
        self.ctx = context

    @abstractmethod
    async def select(
        self, count: int, item_ids: Sequence[str] | None = None
    ) -> list[LearningItem] | list[FlashcardWord]:
        """
        Args:
            count: Maximum number of entries to return.
            item_ids: Explicit ids; only the custom mode reads them.
        """
        pass

    def _log_pool(self, pool_size: int) -> None:
        logger.debug(f"{self.mode.value}: pool of {pool_size} candidates")
