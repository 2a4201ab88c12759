import re

# ---------- Answer normalization ----------

_SENTENCE_PUNCTUATION = re.compile(r"[.,!?;:]")
_QUOTES = re.compile(r"['\"]")
_WHITESPACE = re.compile(r"\s+")


def normalize_answer(text: str) -> str:
    """Lowercase, trim, drop sentence punctuation and quotes, collapse whitespace."""
    out = text.lower().strip()
    out = _SENTENCE_PUNCTUATION.sub("", out)
    out = _WHITESPACE.sub(" ", out)
    out = _QUOTES.sub("", out)
    return out


# ---------- Edit distance ----------


def levenshtein(a: str, b: str) -> int:
    """Insert/delete/substitute edit distance, two-row dynamic programming."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """
    Similarity of two answers in [0, 1] after normalization.

    1.0 when the normalized strings are equal (including both empty).
    """
    na, nb = normalize_answer(a), normalize_answer(b)
    if na == nb:
        return 1.0
    longest = max(len(na), len(nb))
    return 1 - levenshtein(na, nb) / longest
