# Infrastructure Adapters Package
from .file_store import JsonFileKeyValueStore
from .kv_reviews import KeyValueReviewRepository
from .memory import InMemoryItemRepository, InMemoryKeyValueStore, InMemoryReviewRepository
from .yaml_deck import YamlItemRepository

__all__ = [
    "InMemoryItemRepository",
    "InMemoryKeyValueStore",
    "InMemoryReviewRepository",
    "JsonFileKeyValueStore",
    "KeyValueReviewRepository",
    "YamlItemRepository",
]
