"""
YAML Deck Repository: read-only ItemRepository backed by a deck file.

Deck layout:

    lesson: lesson-1            # default collection for cards without one
    cards:
      - id: c1
        prompt: 駅はどこですか
        target: Where is the station?
        favorite: true
        important_words: [station]

The camelCase field names of older exports (lessonId, prompt_jp, target_en, source_type,
isFavorite, importantWords, createdAt) are accepted as well.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml  # type: ignore
import yaml.error

from reprise.application.utils.clock import as_utc, parse_timestamp
from reprise.domain.errors import DeckFormatError
from reprise.domain.models import LearningItem
from reprise.domain.ports import ItemRepository

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "default"


def _first(card: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if card.get(key) is not None:
            return card[key]
    return default


def _as_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _timestamp(value: Any) -> datetime | None:
    # PyYAML already turns unquoted ISO timestamps and dates into objects.
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return as_utc(datetime(value.year, value.month, value.day))
    return parse_timestamp(str(value))


def card_from_mapping(card: dict[str, Any], default_collection: str) -> LearningItem:
    created = _first(card, "created_at", "createdAt")
    order = _first(card, "order")
    return LearningItem(
        id=str(card["id"]),
        collection_id=str(
            _first(card, "lesson", "lessonId", "collection_id", default=default_collection)
        ),
        prompt=str(_first(card, "prompt", "prompt_jp", default="")),
        target=str(_first(card, "target", "target_en", default="")),
        source_type=str(_first(card, "source_type", "sourceType", default="manual_pair")),
        favorite=bool(_first(card, "favorite", "isFavorite", default=False)),
        created_at=_timestamp(created),
        order=int(order) if order is not None else None,
        important_words=_as_tuple(_first(card, "important_words", "importantWords")),
        tags=_as_tuple(_first(card, "tags")),
        notes=_first(card, "notes"),
    )


def load_deck(path: Path) -> list[LearningItem]:
    """
    Parse a deck file into items, in file order.

    Cards without an id are skipped with a warning; duplicate ids keep the
    first occurrence.
    """
    raw = Path(path).read_text(encoding="utf-8").lstrip("\ufeff")

    # Fix tabs (common user error)
    if "\t" in raw:
        raw = raw.replace("\t", "  ")

    try:
        meta = yaml.safe_load(raw) or {}
    except yaml.error.YAMLError as e:
        raise DeckFormatError(path, f"invalid YAML: {e}") from e

    if isinstance(meta, list):
        meta = {"cards": meta}
    if not isinstance(meta, dict):
        raise DeckFormatError(path, "expected a mapping with a 'cards' list")

    cards = meta.get("cards") or []
    if not isinstance(cards, list):
        raise DeckFormatError(path, "'cards' must be a list")

    default_collection = str(meta.get("lesson") or DEFAULT_COLLECTION)
    items: list[LearningItem] = []
    seen: set[str] = set()

    for i, card in enumerate(cards):
        if not isinstance(card, dict) or card.get("id") in (None, ""):
            logger.warning(f"Skipping card #{i} in {path}: missing id")
            continue
        if str(card["id"]) in seen:
            logger.warning(f"Skipping duplicate card id {card['id']} in {path}")
            continue
        try:
            item = card_from_mapping(card, default_collection)
        except (TypeError, ValueError) as e:
            raise DeckFormatError(path, f"card {card['id']}: {e}") from e
        seen.add(item.id)
        items.append(item)

    return items


class YamlItemRepository(ItemRepository):
    """Loads the deck once, on first access."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._items: list[LearningItem] | None = None

    async def get_by_id(self, item_id: str) -> LearningItem | None:
        for item in self._all():
            if item.id == item_id:
                return item
        return None

    async def get_all(self) -> list[LearningItem]:
        return list(self._all())

    def _all(self) -> list[LearningItem]:
        if self._items is None:
            self._items = load_deck(self.path)
            logger.debug(f"Loaded {len(self._items)} cards from {self.path}")
        return self._items
