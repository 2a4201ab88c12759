"""
Domain models for scheduling and card selection.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .constants import TEMPLATE_SOURCE_TYPE


class ReviewOutcome(str, Enum):
    """Three-valued grading result of a review attempt."""

    OK = "OK"
    MAYBE = "MAYBE"
    NG = "NG"

    @classmethod
    def parse(cls, value: "str | ReviewOutcome") -> "ReviewOutcome":
        """Accept a member or its name in any case; anything else is a ValueError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown review outcome {value!r}; expected one of OK, MAYBE, NG"
            ) from None


class PracticeMode(str, Enum):
    """Learning modes. Each one maps to exactly one selection strategy."""

    NORMAL = "normal"
    TYPING = "typing"
    SHUFFLE = "shuffle"
    FOCUS = "focus"
    REVIEW_ONLY = "review_only"
    CUSTOM = "custom"
    FAVORITE = "favorite"
    WEAK = "weak"
    RANDOM = "random"
    SPEED = "speed"
    FLASHCARD = "flashcard"


@dataclass(frozen=True)
class LearningItem:
    """
    A card: a prompt/target pair that belongs to one lesson.

    Attributes:
        id: Stable identity of the card.
        collection_id: The lesson the card belongs to.
        prompt: Prompt side (opaque text).
        target: Target side (opaque text).
        source_type: How the card was created; "template" marks seed content.
        favorite: Favorite marker.
        created_at: Creation time, used as an ordering fallback.
        order: Explicit position inside the lesson.
        important_words: Words picked by the user for word-card practice.
    """

    id: str
    collection_id: str
    prompt: str
    target: str
    source_type: str = "manual_pair"
    favorite: bool = False
    created_at: datetime | None = None
    order: int | None = None
    important_words: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    notes: str | None = None

    @property
    def is_template(self) -> bool:
        return self.source_type == TEMPLATE_SOURCE_TYPE


@dataclass(frozen=True)
class ReviewState:
    """
    Review record of one item. At most one per item; absence means "never reviewed".

    Attributes:
        item_id: The reviewed item.
        due_at: When the item is next due (timezone-aware UTC).
        interval_days: Days between the last grading and due_at.
        last_outcome: Outcome of the last grading.
    """

    item_id: str
    due_at: datetime
    interval_days: int
    last_outcome: ReviewOutcome


@dataclass(frozen=True)
class RankedReview:
    """A due review joined with its item and urgency score."""

    item: LearningItem
    review: ReviewState
    priority: int
    days_overdue: int


@dataclass(frozen=True)
class FlashcardWord:
    """A word-card derived from an item's important words."""

    word: str
    item: LearningItem


@dataclass
class ReviewStats:
    """Aggregate view over every stored review."""

    total_reviews: int
    due_reviews: int
    upcoming_reviews: int  # due within the next week, not yet due
    average_interval: float
    overdue_count: int
    outcome_distribution: dict[ReviewOutcome, int] = field(
        default_factory=lambda: {outcome: 0 for outcome in ReviewOutcome}
    )


@dataclass(frozen=True)
class GradingDetails:
    """Result of auto-grading a typed answer."""

    outcome: ReviewOutcome
    similarity: float
    normalized_answer: str
    normalized_expected: str
