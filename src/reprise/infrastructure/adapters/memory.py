"""
In-memory adapters.

Dict-backed implementations of every port. Used by tests, by the "memory"
backend and by callers that embed reprise and keep their own storage.
"""

import copy
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from reprise.application.utils.clock import as_utc
from reprise.domain.models import LearningItem, ReviewState
from reprise.domain.ports import ItemRepository, KeyValueStore, ReviewRepository


class InMemoryKeyValueStore(KeyValueStore):
    """Values are deep-copied in and out, like a serializing store would."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class InMemoryItemRepository(ItemRepository):
    """Items in insertion order. put() and delete() are for the owning collaborator."""

    def __init__(self, items: Iterable[LearningItem] = ()):
        self._items: dict[str, LearningItem] = {}
        for item in items:
            self._items[item.id] = item

    async def get_by_id(self, item_id: str) -> LearningItem | None:
        return self._items.get(item_id)

    async def get_all(self) -> list[LearningItem]:
        return list(self._items.values())

    async def put(self, item: LearningItem) -> None:
        self._items[item.id] = item

    async def delete(self, item_id: str) -> None:
        self._items.pop(item_id, None)


class InMemoryReviewRepository(ReviewRepository):
    def __init__(self, states: Iterable[ReviewState] = ()):
        self._states: dict[str, ReviewState] = {}
        for state in states:
            self._states[state.item_id] = state

    async def get_by_id(self, item_id: str) -> ReviewState | None:
        return self._states.get(item_id)

    async def put(self, state: ReviewState) -> None:
        self._states[state.item_id] = state

    async def get_all_due(self, now: datetime, limit: int | None = None) -> list[ReviewState]:
        now = as_utc(now)
        due = [s for s in self._states.values() if as_utc(s.due_at) <= now]
        due.sort(key=lambda s: as_utc(s.due_at))
        return due[:limit] if limit is not None else due

    async def get_all(self) -> list[ReviewState]:
        return list(self._states.values())

    async def delete(self, item_id: str) -> None:
        self._states.pop(item_id, None)
