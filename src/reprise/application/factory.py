"""
Service Factory
Centralizes the wiring of repositories and services from AppSettings.
"""

import logging
import random
from dataclasses import dataclass

from reprise.application.config import AppSettings, ConfigProvider
from reprise.application.ranker import ReviewPriorityRanker
from reprise.application.review_service import ReviewService
from reprise.application.selection import CardSelector
from reprise.domain.ports import ItemRepository, KeyValueStore, ReviewRepository
from reprise.infrastructure.adapters import (
    InMemoryItemRepository,
    InMemoryKeyValueStore,
    InMemoryReviewRepository,
    JsonFileKeyValueStore,
    KeyValueReviewRepository,
    YamlItemRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: KeyValueStore
    items: ItemRepository
    reviews: ReviewRepository
    config: ConfigProvider
    ranker: ReviewPriorityRanker
    selector: CardSelector
    review_service: ReviewService


def get_store(settings: AppSettings) -> KeyValueStore:
    if settings.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(settings.store_path)


def get_item_repository(settings: AppSettings) -> ItemRepository:
    if settings.deck_file is not None:
        return YamlItemRepository(settings.deck_file)
    logger.debug("No deck file configured; starting with an empty item pool")
    return InMemoryItemRepository()


def get_review_repository(settings: AppSettings, store: KeyValueStore) -> ReviewRepository:
    if settings.backend == "memory":
        return InMemoryReviewRepository()
    return KeyValueReviewRepository(store)


def build_services(settings: AppSettings, rng: random.Random | None = None) -> Services:
    """
    Returns every service wired against the backend selected in settings.
    """
    store = get_store(settings)
    items = get_item_repository(settings)
    reviews = get_review_repository(settings, store)
    config = ConfigProvider(store)
    ranker = ReviewPriorityRanker(reviews, items)

    return Services(
        store=store,
        items=items,
        reviews=reviews,
        config=config,
        ranker=ranker,
        selector=CardSelector(items, reviews, rng=rng, ranker=ranker),
        review_service=ReviewService(
            reviews, config, items=items, serialize_writes=settings.serialize_writes
        ),
    )
