"""
Categorical draws over weighted outcomes.

Every random decision in the engine goes through `weighted_choice` with an
explicit random source, so a seeded `random.Random` (or any object exposing
`random() -> float` in [0, 1)) makes a whole match reproducible.
"""
import random
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


_default_rng = random.Random()


def default_rng() -> RandomSource:
    return _default_rng


def weighted_index(weights: Sequence[float], rng: RandomSource = None) -> int:
    """Pick an index with probability proportional to its weight"""
    total = sum(weights)
    if total <= 0:
        raise ValueError("weights must sum to a positive value")

    roll = (rng or _default_rng).random() * total
    cumulative = 0.0
    for index, weight in enumerate(weights):
        cumulative += weight
        if roll < cumulative:
            return index
    # Float rounding can leave roll == total; fall back to the last positive weight
    return max(i for i, w in enumerate(weights) if w > 0)


def weighted_choice(options: Sequence[T], weights: Sequence[float], rng: RandomSource = None) -> T:
    """Categorical draw: options[i] with probability weights[i] / sum(weights)"""
    if len(options) != len(weights):
        raise ValueError("options and weights must be the same length")
    return options[weighted_index(weights, rng)]
