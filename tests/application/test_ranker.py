from datetime import timedelta

import pytest

from reprise.application.ranker import ReviewPriorityRanker, compute_priority, days_overdue
from reprise.domain.models import ReviewOutcome
from reprise.infrastructure.adapters import InMemoryItemRepository, InMemoryReviewRepository


def test_priority_formula(review_factory, now):
    a = review_factory("A", days_overdue=5, interval=3, outcome=ReviewOutcome.NG)
    b = review_factory("B", days_overdue=1, interval=3, outcome=ReviewOutcome.OK)
    assert compute_priority(a, now) == 50 + 54 + 20
    assert compute_priority(b, now) == 10 + 54 + 0


def test_maybe_bonus(review_factory, now):
    review = review_factory("M", days_overdue=0, interval=10, outcome=ReviewOutcome.MAYBE)
    assert compute_priority(review, now) == 0 + 40 + 10


def test_interval_term_can_go_negative(review_factory, now):
    review = review_factory("old", days_overdue=0, interval=100)
    assert compute_priority(review, now) == -140


def test_days_overdue_floors_partial_days(review_factory, now):
    review = review_factory("x", days_overdue=2.9)
    assert days_overdue(review, now) == 2
    assert days_overdue(review, now - timedelta(days=5)) < 0


class TestRankDue:
    """ReviewPriorityRanker.rank_due against in-memory repositories."""

    @pytest.mark.asyncio
    async def test_worked_example_ranks_a_first(self, item_factory, review_factory, now):
        items = InMemoryItemRepository([item_factory("A"), item_factory("B")])
        reviews = InMemoryReviewRepository(
            [
                review_factory("B", days_overdue=1, interval=3, outcome=ReviewOutcome.OK),
                review_factory("A", days_overdue=5, interval=3, outcome=ReviewOutcome.NG),
            ]
        )
        ranked = await ReviewPriorityRanker(reviews, items).rank_due(now=now)

        assert [r.item.id for r in ranked] == ["A", "B"]
        assert [r.priority for r in ranked] == [124, 64]
        assert ranked[0].days_overdue == 5

    @pytest.mark.asyncio
    async def test_more_overdue_ranks_higher(self, item_factory, review_factory, now):
        items = InMemoryItemRepository([item_factory("late"), item_factory("later")])
        reviews = InMemoryReviewRepository(
            [
                review_factory("late", days_overdue=2, interval=5),
                review_factory("later", days_overdue=3, interval=5),
            ]
        )
        ranked = await ReviewPriorityRanker(reviews, items).rank_due(now=now)
        assert [r.item.id for r in ranked] == ["later", "late"]
        assert ranked[0].priority > ranked[1].priority

    @pytest.mark.asyncio
    async def test_dangling_reviews_are_dropped(self, item_factory, review_factory, now):
        items = InMemoryItemRepository([item_factory("kept")])
        reviews = InMemoryReviewRepository(
            [
                review_factory("kept", days_overdue=1),
                review_factory("deleted", days_overdue=10, outcome=ReviewOutcome.NG),
            ]
        )
        ranked = await ReviewPriorityRanker(reviews, items).rank_due(now=now)
        assert [r.item.id for r in ranked] == ["kept"]

    @pytest.mark.asyncio
    async def test_future_reviews_are_not_due(self, item_factory, review_factory, now):
        items = InMemoryItemRepository([item_factory("a"), item_factory("b")])
        reviews = InMemoryReviewRepository(
            [review_factory("a", days_overdue=0), review_factory("b", days_overdue=-1)]
        )
        ranked = await ReviewPriorityRanker(reviews, items).rank_due(now=now)
        assert [r.item.id for r in ranked] == ["a"]

    @pytest.mark.asyncio
    async def test_ties_keep_repository_order(self, item_factory, review_factory, now):
        items = InMemoryItemRepository([item_factory(i) for i in "xyz"])
        # Same priority; the repository returns them by due_at ascending.
        reviews = InMemoryReviewRepository(
            [
                review_factory("z", days_overdue=1.2, interval=4),
                review_factory("x", days_overdue=1.6, interval=4),
                review_factory("y", days_overdue=1.4, interval=4),
            ]
        )
        ranked = await ReviewPriorityRanker(reviews, items).rank_due(now=now)
        assert [r.item.id for r in ranked] == ["x", "y", "z"]

    @pytest.mark.asyncio
    async def test_limit_applies_after_ranking(self, item_factory, review_factory, now):
        items = InMemoryItemRepository([item_factory(i) for i in "abc"])
        reviews = InMemoryReviewRepository(
            [
                review_factory("a", days_overdue=9),
                review_factory("b", days_overdue=1, outcome=ReviewOutcome.NG),
                review_factory("c", days_overdue=5),
            ]
        )
        ranked = await ReviewPriorityRanker(reviews, items).rank_due(now=now, limit=2)
        assert [r.item.id for r in ranked] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_empty_due_set(self, ranker, now):
        assert await ranker.rank_due(now=now) == []
