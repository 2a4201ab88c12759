import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from reprise.application.review_service import ReviewService
from reprise.domain.models import ReviewOutcome, ReviewState
from reprise.infrastructure.adapters import InMemoryKeyValueStore, KeyValueReviewRepository
from reprise.infrastructure.adapters.kv_reviews import (
    REVIEW_INDEX_KEY,
    review_from_record,
    review_to_record,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repo(kv_store):
    return KeyValueReviewRepository(kv_store)


def test_record_layout():
    state = ReviewState("c1", NOW, 3, ReviewOutcome.MAYBE)
    assert review_to_record(state) == {
        "itemId": "c1",
        "dueAt": "2024-03-10T12:00:00+00:00",
        "intervalDays": 3,
        "lastOutcome": "MAYBE",
    }


def test_reads_javascript_timestamps():
    state = review_from_record(
        {
            "itemId": "c1",
            "dueAt": "2024-03-10T12:00:00.000Z",
            "intervalDays": 2,
            "lastOutcome": "NG",
        }
    )
    assert state.due_at == NOW
    assert state.last_outcome is ReviewOutcome.NG


def test_corrupt_record_raises():
    with pytest.raises(KeyError):
        review_from_record({"itemId": "c1"})


@pytest.mark.asyncio
async def test_put_get_and_index(repo, kv_store):
    state = ReviewState("c1", NOW, 3, ReviewOutcome.OK)
    await repo.put(state)
    await repo.put(state)

    assert await repo.get_by_id("c1") == state
    assert await repo.get_by_id("c2") is None
    assert await kv_store.get(REVIEW_INDEX_KEY) == ["c1"]


@pytest.mark.asyncio
async def test_get_all_due(repo):
    await repo.put(ReviewState("later", NOW - timedelta(days=1), 1, ReviewOutcome.OK))
    await repo.put(ReviewState("future", NOW + timedelta(hours=1), 1, ReviewOutcome.OK))
    await repo.put(ReviewState("earlier", NOW - timedelta(days=4), 1, ReviewOutcome.NG))

    due = await repo.get_all_due(NOW)
    assert [s.item_id for s in due] == ["earlier", "later"]
    assert len(await repo.get_all_due(NOW, limit=1)) == 1


@pytest.mark.asyncio
async def test_delete(repo, kv_store):
    await repo.put(ReviewState("c1", NOW, 1, ReviewOutcome.OK))
    await repo.delete("c1")
    assert await repo.get_all() == []
    assert await kv_store.get(REVIEW_INDEX_KEY) == []


@pytest.mark.asyncio
async def test_index_entry_without_record_is_skipped(repo, kv_store):
    await kv_store.set(REVIEW_INDEX_KEY, ["ghost"])
    assert await repo.get_all() == []


class YieldingKeyValueStore(InMemoryKeyValueStore):
    """Suspends on every read so concurrent index updates interleave."""

    async def get(self, key):
        value = await super().get(key)
        await asyncio.sleep(0)
        return value


@pytest.mark.asyncio
async def test_concurrent_puts_keep_every_index_entry():
    repo = KeyValueReviewRepository(YieldingKeyValueStore())
    await asyncio.gather(
        *(repo.put(ReviewState(item_id, NOW, 1, ReviewOutcome.NG)) for item_id in "abc")
    )
    assert sorted(s.item_id for s in await repo.get_all()) == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_concurrent_gradings_of_different_items_are_all_kept(config_provider):
    repo = KeyValueReviewRepository(YieldingKeyValueStore())
    service = ReviewService(repo, config_provider, serialize_writes=True)

    await asyncio.gather(*(service.record_outcome(i, "NG", now=NOW) for i in "abc"))

    assert sorted(s.item_id for s in await repo.get_all_due(NOW + timedelta(days=1))) == [
        "a",
        "b",
        "c",
    ]
