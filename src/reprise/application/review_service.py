"""
Review Service — Application layer orchestrator.

Records grading outcomes (read prior state, schedule, persist) and reports
on the stored review set.
"""

import asyncio
import logging
from collections import Counter
from datetime import date, datetime, timedelta

from reprise.application.config import ConfigProvider, SchedulingConfig
from reprise.application.scheduler import compute_next_state
from reprise.application.utils.clock import as_utc, utc_day, utcnow
from reprise.domain.constants import DEFAULT_SCHEDULE_DAYS, UPCOMING_WINDOW_DAYS
from reprise.domain.errors import ItemNotFoundError
from reprise.domain.models import ReviewOutcome, ReviewState, ReviewStats
from reprise.domain.ports import ItemRepository, ReviewRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for grading items and summarizing reviews.

    The review store is last-writer-wins. With serialize_writes=True,
    record_outcome holds a per-item lock around its read-modify-write, so
    concurrent gradings of the same item in this process apply one after
    the other.
    """

    def __init__(
        self,
        reviews: ReviewRepository,
        config_provider: ConfigProvider,
        items: ItemRepository | None = None,
        serialize_writes: bool = False,
    ):
        """
        Args:
            reviews: The repository (port) for review records.
            config_provider: Source of the current SchedulingConfig.
            items: Needed only to check that graded ids exist.
            serialize_writes: Serialize record_outcome per item id.
        """
        self._reviews = reviews
        self._config = config_provider
        self._items = items
        self._serialize = serialize_writes
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    async def record_outcome(
        self,
        item_id: str,
        outcome: ReviewOutcome | str,
        now: datetime | None = None,
        require_item: bool = False,
    ) -> ReviewState:
        """
        Grade an item and persist its new review state.

        Args:
            item_id: The graded item.
            outcome: OK, MAYBE or NG.
            now: Reference time (defaults to the current UTC time).
            require_item: Raise ItemNotFoundError if the item does not exist.

        Returns:
            The stored ReviewState.
        """
        outcome = ReviewOutcome.parse(outcome)

        if require_item:
            if self._items is None or await self._items.get_by_id(item_id) is None:
                raise ItemNotFoundError(item_id)

        if self._serialize:
            return await self._apply_locked(item_id, outcome, now)
        return await self._apply(item_id, outcome, now)

    async def _apply_locked(
        self, item_id: str, outcome: ReviewOutcome, now: datetime | None
    ) -> ReviewState:
        # A lock lives only while some grading of its item holds or awaits it.
        lock = self._locks.setdefault(item_id, asyncio.Lock())
        self._lock_users[item_id] += 1
        try:
            async with lock:
                return await self._apply(item_id, outcome, now)
        finally:
            self._lock_users[item_id] -= 1
            if not self._lock_users[item_id]:
                del self._lock_users[item_id]
                del self._locks[item_id]

    async def _apply(
        self, item_id: str, outcome: ReviewOutcome, now: datetime | None
    ) -> ReviewState:
        config: SchedulingConfig = await self._config.load()
        prior = await self._reviews.get_by_id(item_id)

        state = compute_next_state(prior, outcome, config, now=now, item_id=item_id)
        await self._reviews.put(state)

        previous = prior.interval_days if prior else None
        logger.info(
            f"Graded {item_id} {outcome.value}: interval {previous} -> {state.interval_days}d, "
            f"due {state.due_at.isoformat()}"
        )
        return state

    async def review_stats(self, now: datetime | None = None) -> ReviewStats:
        """
        Summarize every stored review.

        due_reviews and overdue_count share the due_at <= now predicate;
        upcoming_reviews counts reviews due within the next seven days.
        """
        now = utcnow() if now is None else as_utc(now)
        week_later = now + timedelta(days=UPCOMING_WINDOW_DAYS)

        reviews = await self._reviews.get_all()
        stats = ReviewStats(
            total_reviews=len(reviews),
            due_reviews=0,
            upcoming_reviews=0,
            average_interval=0.0,
            overdue_count=0,
        )

        total_interval = 0
        for review in reviews:
            total_interval += review.interval_days
            stats.outcome_distribution[review.last_outcome] += 1

            due_at = as_utc(review.due_at)
            if due_at <= now:
                stats.overdue_count += 1
            elif due_at <= week_later:
                stats.upcoming_reviews += 1

        stats.due_reviews = stats.overdue_count
        if reviews:
            stats.average_interval = round(total_interval / len(reviews), 1)
        return stats

    async def review_schedule(
        self, days: int = DEFAULT_SCHEDULE_DAYS, today: date | None = None
    ) -> dict[date, int]:
        """
        Count reviews per calendar day (UTC) for the next `days` days.

        Every day in the window is present, with 0 when nothing is due.
        Reviews already overdue before `today` are not counted.
        """
        start = today or utcnow().date()
        schedule = {start + timedelta(days=i): 0 for i in range(max(days, 0))}

        for review in await self._reviews.get_all():
            day = utc_day(review.due_at)
            if day in schedule:
                schedule[day] += 1
        return schedule
