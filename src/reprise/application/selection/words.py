"""Important-word extraction for word-card (flashcard) practice."""

import re
from collections.abc import Iterable

from reprise.domain.constants import MAX_AUTO_WORDS, MIN_AUTO_WORD_LENGTH
from reprise.domain.models import FlashcardWord, LearningItem

_PUNCTUATION = re.compile(r"""[.,!?;:()\[\]{}'"]""")


def extract_words(text: str) -> list[str]:
    """Lowercase words of text with punctuation removed."""
    return [w for w in _PUNCTUATION.sub(" ", text.lower()).split() if w]


def important_words(item: LearningItem) -> list[str]:
    """
    Words to drill for an item.

    The user's own list wins. Otherwise the first few words of the target side
    that are at least three characters long.
    """
    if item.important_words:
        return list(item.important_words)
    words = extract_words(item.target)
    return [w for w in words if len(w) >= MIN_AUTO_WORD_LENGTH][:MAX_AUTO_WORDS]


def flashcard_words(items: Iterable[LearningItem]) -> list[FlashcardWord]:
    """
    Flatten items into (word, item) pairs, one per distinct lowercase word.

    When several items share a word, the first item in iteration order owns it.
    """
    seen: set[str] = set()
    words: list[FlashcardWord] = []
    for item in items:
        for word in important_words(item):
            key = word.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            words.append(FlashcardWord(word=key, item=item))
    return words
