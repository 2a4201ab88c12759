"""
Mode dispatch for card selection.

Every PracticeMode member is registered to exactly one strategy. The registry
is checked for completeness at import time, so adding a mode without a
strategy fails immediately instead of falling through to a default.
"""

import logging
import random
from collections.abc import Sequence
from datetime import datetime

from reprise.application.ranker import ReviewPriorityRanker
from reprise.application.utils.clock import as_utc, utcnow
from reprise.domain.constants import DEFAULT_SESSION_COUNT, MODE_DEFAULT_COUNTS
from reprise.domain.errors import UnknownModeError
from reprise.domain.models import FlashcardWord, LearningItem, PracticeMode
from reprise.domain.ports import ItemRepository, ReviewRepository

from .base import SelectionContext, SelectionStrategy
from .session import SessionAssembler
from .strategies import (
    CustomStrategy,
    FavoriteStrategy,
    FlashcardStrategy,
    FocusStrategy,
    RandomStrategy,
    ReviewOnlyStrategy,
    ShuffleStrategy,
    SpeedStrategy,
    TypingStrategy,
    WeakStrategy,
)

logger = logging.getLogger(__name__)

STRATEGIES: dict[PracticeMode, type[SelectionStrategy]] = {
    cls.mode: cls
    for cls in (
        SessionAssembler,
        TypingStrategy,
        ShuffleStrategy,
        FocusStrategy,
        ReviewOnlyStrategy,
        CustomStrategy,
        FavoriteStrategy,
        WeakStrategy,
        RandomStrategy,
        SpeedStrategy,
        FlashcardStrategy,
    )
}


def _check_registry(registry: dict[PracticeMode, type[SelectionStrategy]]) -> None:
    missing = [mode.value for mode in PracticeMode if mode not in registry]
    if missing:
        raise RuntimeError(f"Practice modes without a selection strategy: {missing}")


_check_registry(STRATEGIES)


def resolve_mode(mode: PracticeMode | str) -> PracticeMode:
    """Parse a mode name; unknown names raise UnknownModeError."""
    if isinstance(mode, PracticeMode):
        return mode
    try:
        return PracticeMode(str(mode).strip().lower())
    except ValueError:
        raise UnknownModeError(mode) from None


def strategy_for(mode: PracticeMode | str) -> type[SelectionStrategy]:
    resolved = resolve_mode(mode)
    try:
        return STRATEGIES[resolved]
    except KeyError:
        raise UnknownModeError(resolved) from None


def default_count(mode: PracticeMode | str) -> int:
    """Session size for mode when the caller does not ask for one."""
    return MODE_DEFAULT_COUNTS.get(resolve_mode(mode).value, DEFAULT_SESSION_COUNT)


class CardSelector:
    """
    Entry point for "cards for mode M, count N".

    Args:
        items: Item repository (port).
        reviews: Review repository (port).
        rng: Random source shared by every shuffle; seed it for reproducible runs.
    """

    def __init__(
        self,
        items: ItemRepository,
        reviews: ReviewRepository,
        rng: random.Random | None = None,
        ranker: ReviewPriorityRanker | None = None,
    ):
        self._items = items
        self._reviews = reviews
        self._rng = rng or random.Random()
        self._ranker = ranker or ReviewPriorityRanker(reviews, items)

    async def select(
        self,
        mode: PracticeMode | str,
        count: int,
        item_ids: Sequence[str] | None = None,
        now: datetime | None = None,
    ) -> list[LearningItem] | list[FlashcardWord]:
        """
        Run the strategy registered for mode.

        Args:
            mode: Practice mode (member or name).
            count: Requested number of entries (ignored by custom).
            item_ids: Explicit ids for the custom mode.
            now: Reference time for due computations.

        Returns:
            At most count entries (custom: every resolved id), in presentation
            order. An empty list means there is nothing to study.
        """
        strategy_cls = strategy_for(mode)
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")

        context = SelectionContext(
            items=self._items,
            reviews=self._reviews,
            ranker=self._ranker,
            rng=self._rng,
            now=utcnow() if now is None else as_utc(now),
        )
        selected = await strategy_cls(context).select(count, item_ids=item_ids)
        logger.debug(f"Selected {len(selected)} entries for mode {strategy_cls.mode.value}")
        return selected
