# Application Selection Package
from .base import SelectionContext, SelectionStrategy
from .registry import STRATEGIES, CardSelector, default_count, resolve_mode, strategy_for
from .session import SessionAssembler
from .shuffle import shuffled
from .words import flashcard_words, important_words

__all__ = [
    "STRATEGIES",
    "CardSelector",
    "SelectionContext",
    "SelectionStrategy",
    "SessionAssembler",
    "default_count",
    "flashcard_words",
    "important_words",
    "resolve_mode",
    "shuffled",
    "strategy_for",
]
