"""
Key-value review repository.

Implements ReviewRepository on top of any KeyValueStore. Each record lives
under "review:<item_id>"; an index key lists the stored item ids so that
get_all does not need key enumeration from the store.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from reprise.application.utils.clock import as_utc, parse_timestamp
from reprise.domain.models import ReviewOutcome, ReviewState
from reprise.domain.ports import KeyValueStore, ReviewRepository

logger = logging.getLogger(__name__)

REVIEW_KEY_PREFIX = "review:"
REVIEW_INDEX_KEY = "reviews:index"


def review_to_record(state: ReviewState) -> dict[str, Any]:
    return {
        "itemId": state.item_id,
        "dueAt": as_utc(state.due_at).isoformat(),
        "intervalDays": state.interval_days,
        "lastOutcome": state.last_outcome.value,
    }


def review_from_record(record: dict[str, Any]) -> ReviewState:
    """Raises KeyError/ValueError on corrupt records; callers let them propagate."""
    return ReviewState(
        item_id=str(record["itemId"]),
        due_at=parse_timestamp(record["dueAt"]),
        interval_days=int(record["intervalDays"]),
        last_outcome=ReviewOutcome.parse(record["lastOutcome"]),
    )


class KeyValueReviewRepository(ReviewRepository):
    """
    Review records over a KeyValueStore.

    Index updates hold a lock across their read and write, so concurrent puts
    of different items through one repository never drop each other's ids.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._index_lock = asyncio.Lock()

    async def get_by_id(self, item_id: str) -> ReviewState | None:
        record = await self._store.get(REVIEW_KEY_PREFIX + item_id)
        if record is None:
            return None
        return review_from_record(record)

    async def put(self, state: ReviewState) -> None:
        await self._store.set(REVIEW_KEY_PREFIX + state.item_id, review_to_record(state))

        async with self._index_lock:
            index = await self._index()
            if state.item_id not in index:
                index.append(state.item_id)
                await self._store.set(REVIEW_INDEX_KEY, index)

    async def get_all(self) -> list[ReviewState]:
        states: list[ReviewState] = []
        for item_id in await self._index():
            record = await self._store.get(REVIEW_KEY_PREFIX + item_id)
            if record is None:
                logger.debug(f"Review index lists {item_id} but no record exists")
                continue
            states.append(review_from_record(record))
        return states

    async def get_all_due(self, now: datetime, limit: int | None = None) -> list[ReviewState]:
        now = as_utc(now)
        due = [s for s in await self.get_all() if s.due_at <= now]
        due.sort(key=lambda s: s.due_at)
        return due[:limit] if limit is not None else due

    async def delete(self, item_id: str) -> None:
        await self._store.delete(REVIEW_KEY_PREFIX + item_id)
        async with self._index_lock:
            index = await self._index()
            if item_id in index:
                index.remove(item_id)
                await self._store.set(REVIEW_INDEX_KEY, index)

    async def _index(self) -> list[str]:
        return list(await self._store.get(REVIEW_INDEX_KEY) or [])
