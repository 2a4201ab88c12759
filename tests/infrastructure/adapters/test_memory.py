from datetime import datetime, timedelta, timezone

import pytest

from reprise.domain.models import LearningItem, ReviewOutcome, ReviewState
from reprise.infrastructure.adapters import (
    InMemoryItemRepository,
    InMemoryKeyValueStore,
    InMemoryReviewRepository,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def review(item_id: str, offset_days: float) -> ReviewState:
    return ReviewState(item_id, NOW + timedelta(days=offset_days), 1, ReviewOutcome.OK)


class TestInMemoryKeyValueStore:
    @pytest.mark.asyncio
    async def test_roundtrip_and_delete(self):
        store = InMemoryKeyValueStore()
        await store.set("k", {"a": 1})
        assert await store.get("k") == {"a": 1}
        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_values_are_copied(self):
        store = InMemoryKeyValueStore()
        value = {"ids": ["a"]}
        await store.set("k", value)
        value["ids"].append("b")
        fetched = await store.get("k")
        fetched["ids"].append("c")
        assert await store.get("k") == {"ids": ["a"]}


class TestInMemoryItemRepository:
    @pytest.mark.asyncio
    async def test_native_order_and_lookup(self, item_factory):
        repo = InMemoryItemRepository([item_factory("b"), item_factory("a")])
        assert [i.id for i in await repo.get_all()] == ["b", "a"]
        assert (await repo.get_by_id("a")).id == "a"
        assert await repo.get_by_id("zzz") is None

    @pytest.mark.asyncio
    async def test_get_by_collection_orders_by_order_then_created(self):
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

        def item(item_id, lesson="l1", **kw):
            return LearningItem(id=item_id, collection_id=lesson, prompt="", target="", **kw)

        repo = InMemoryItemRepository(
            [
                item("late", created_at=t0 + timedelta(days=2)),
                item("second", order=2),
                item("other-lesson", lesson="l2", order=0),
                item("first", order=1),
                item("early", created_at=t0),
                item("undated"),
            ]
        )
        lesson = await repo.get_by_collection("l1")
        assert [i.id for i in lesson] == ["first", "second", "early", "late", "undated"]


class TestInMemoryReviewRepository:
    @pytest.mark.asyncio
    async def test_put_replaces(self):
        repo = InMemoryReviewRepository()
        await repo.put(review("a", 1))
        await repo.put(review("a", 5))
        assert len(await repo.get_all()) == 1
        assert (await repo.get_by_id("a")).due_at == NOW + timedelta(days=5)

    @pytest.mark.asyncio
    async def test_get_all_due_sorted_and_limited(self):
        repo = InMemoryReviewRepository(
            [review("b", -1), review("future", 1), review("a", -3), review("now", 0)]
        )
        due = await repo.get_all_due(NOW)
        assert [r.item_id for r in due] == ["a", "b", "now"]
        assert [r.item_id for r in await repo.get_all_due(NOW, limit=2)] == ["a", "b"]
