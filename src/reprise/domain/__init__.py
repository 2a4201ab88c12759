# Domain Package
from .errors import (
    ConfigOutOfRange,
    DeckFormatError,
    ItemNotFoundError,
    RepriseError,
    UnknownModeError,
)
from .models import (
    FlashcardWord,
    GradingDetails,
    LearningItem,
    PracticeMode,
    RankedReview,
    ReviewOutcome,
    ReviewState,
    ReviewStats,
)
from .ports import ItemRepository, KeyValueStore, ReviewRepository

__all__ = [
    "ConfigOutOfRange",
    "DeckFormatError",
    "FlashcardWord",
    "GradingDetails",
    "ItemNotFoundError",
    "ItemRepository",
    "KeyValueStore",
    "LearningItem",
    "PracticeMode",
    "RankedReview",
    "RepriseError",
    "ReviewOutcome",
    "ReviewRepository",
    "ReviewState",
    "ReviewStats",
    "UnknownModeError",
]
