import random
from collections.abc import Iterable
from typing import TypeVar

T = TypeVar("T")


def shuffled(items: Iterable[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a uniformly random permutation of items (Fisher-Yates).

    The input is never mutated. Pass a seeded random.Random for reproducible order.
    """
    rng = rng or random.Random()
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out
