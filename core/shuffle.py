"""Presentation order generation for exam sessions."""
from __future__ import annotations

import random

from core.errors import ValidationError


def generate_shuffle_order(n: int, rng: random.Random | None = None) -> list[int]:
    """
    Return a uniformly random permutation of ``range(n)``.

    Index ``i`` of the result is the presentation position, the value is the
    original question index. Uses an in-place Fisher-Yates pass so every
    permutation is equally likely for a fair ``rng``.
    """
    if not isinstance(n, int) or isinstance(n, bool) or n < 1:
        raise ValidationError(f"Question count must be a positive integer, got {n!r}")

    rng = rng or random.SystemRandom()
    order = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def is_permutation(order: object, n: int) -> bool:
    """Check that ``order`` is a permutation of ``range(n)``."""
    if not isinstance(order, (list, tuple)) or len(order) != n:
        return False
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in order):
        return False
    return sorted(order) == list(range(n))
