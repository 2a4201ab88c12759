import random
from datetime import datetime, timedelta, timezone

import pytest

from reprise.application.config import ConfigProvider
from reprise.application.ranker import ReviewPriorityRanker
from reprise.application.selection import CardSelector
from reprise.domain.models import LearningItem, ReviewOutcome, ReviewState
from reprise.infrastructure.adapters import (
    InMemoryItemRepository,
    InMemoryKeyValueStore,
    InMemoryReviewRepository,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_item(item_id: str, **overrides) -> LearningItem:
    fields = {
        "collection_id": "lesson-1",
        "prompt": f"prompt {item_id}",
        "target": f"target sentence {item_id}",
    }
    fields.update(overrides)
    return LearningItem(id=item_id, **fields)


def make_review(
    item_id: str,
    days_overdue: float = 0,
    interval: int = 1,
    outcome: ReviewOutcome = ReviewOutcome.OK,
    now: datetime = NOW,
) -> ReviewState:
    """Review that fell due `days_overdue` days before now (negative: in the future)."""
    return ReviewState(
        item_id=item_id,
        due_at=now - timedelta(days=days_overdue),
        interval_days=interval,
        last_outcome=outcome,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def config_provider(store):
    return ConfigProvider(store)


@pytest.fixture
def deck():
    """Six regular cards (two favorites) plus one favorite template card."""
    return [
        make_item("c1", target="Where is the station?", favorite=True),
        make_item("c2", target="I would like some coffee"),
        make_item("c3", target="The train leaves at nine", favorite=True),
        make_item("c4", target="How much does this cost?"),
        make_item("c5", target="Please speak slowly"),
        make_item("c6", target="See you tomorrow"),
        make_item("t1", target="Welcome to the demo deck", source_type="template", favorite=True),
    ]


@pytest.fixture
def item_repo(deck):
    return InMemoryItemRepository(deck)


@pytest.fixture
def review_repo():
    return InMemoryReviewRepository()


@pytest.fixture
def ranker(review_repo, item_repo):
    return ReviewPriorityRanker(review_repo, item_repo)


@pytest.fixture
def selector(item_repo, review_repo):
    return CardSelector(item_repo, review_repo, rng=random.Random(42))


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def review_factory():
    return make_review


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate ~/.config/reprise from the developer's real settings
    monkeypatch.setenv("HOME", str(home))
    for var in ("REPRISE_BACKEND", "REPRISE_DATA_DIR", "REPRISE_DECK_FILE", "REPRISE_DEFAULT_COUNT"):
        monkeypatch.delenv(var, raising=False)
    return home
