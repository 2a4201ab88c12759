"""
Ports (interfaces) for items, reviews and key-value storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from .models import LearningItem, ReviewState


class ItemRepository(ABC):
    """
    Port for reading learning items (cards).

    Implementations:
        - InMemoryItemRepository: dict-backed, for tests and embedding.
        - YamlItemRepository: read-only deck file.
    """

    @abstractmethod
    async def get_by_id(self, item_id: str) -> LearningItem | None:
        """Return the item, or None if it does not exist."""
        pass

    @abstractmethod
    async def get_all(self) -> list[LearningItem]:
        """
        Return every item in the repository's native order.

        The native order is meaningful: normal sessions take fresh items in it.
        """
        pass

    async def get_by_collection(self, collection_id: str) -> list[LearningItem]:
        """
        Items of one lesson, by explicit order, then creation time.

        Items without an order come after ordered ones; the rest keep native order.
        """
        items = [i for i in await self.get_all() if i.collection_id == collection_id]
        return sorted(items, key=lesson_order_key)


def lesson_order_key(item: LearningItem) -> tuple:
    created = item.created_at.timestamp() if item.created_at else float("inf")
    order = item.order if item.order is not None else float("inf")
    return (order, created)


class ReviewRepository(ABC):
    """
    Port for review records, keyed 1:1 by item id.

    No locking discipline is required: concurrent writers for one item race
    and the last write wins. ReviewService can serialize writes per item.
    """

    @abstractmethod
    async def get_by_id(self, item_id: str) -> ReviewState | None:
        pass

    @abstractmethod
    async def put(self, state: ReviewState) -> None:
        """Insert or replace the record for state.item_id."""
        pass

    @abstractmethod
    async def get_all_due(self, now: datetime, limit: int | None = None) -> list[ReviewState]:
        """
        Return records with due_at <= now, ascending by due_at.

        Args:
            now: Reference time.
            limit: Optional maximum number of records.
        """
        pass

    @abstractmethod
    async def get_all(self) -> list[ReviewState]:
        pass


class KeyValueStore(ABC):
    """Port for a flat store of JSON-compatible values."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the key. Missing keys are ignored."""
        pass
