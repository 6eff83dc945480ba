"""
Random selection helpers for study modes.
"""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """
    Fisher-Yates shuffle of a copy of ``items``.

    Args:
        items: Items to shuffle (left untouched)
        rng: Random source, module-level random when None

    Returns:
        New list with the items in random order
    """
    rand = rng or random
    result = list(items)

    for i in range(len(result) - 1, 0, -1):
        j = rand.randint(0, i)
        result[i], result[j] = result[j], result[i]

    return result


def get_random_items(
    items: Sequence[T],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[T]:
    """Pick up to ``count`` distinct items in random order."""
    return shuffle(items, rng)[:max(0, min(count, len(items)))]


def get_random_items_excluding(
    items: Sequence[T],
    count: int,
    exclude: Sequence[T],
    rng: Optional[random.Random] = None,
) -> List[T]:
    """Pick up to ``count`` random items that are not equal to any excluded value."""
    filtered = [item for item in items if item not in exclude]
    return get_random_items(filtered, count, rng)
