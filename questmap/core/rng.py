"""
Seeded random number stream.

Every piece of world and combat randomness is drawn from a SeededRNG so the
same seed always replays the same terrain, encounters and dice. No clock or
OS entropy is ever consulted.
"""
from typing import Sequence, TypeVar

from questmap.core.errors import OutOfRangeSeedError

T = TypeVar("T")

# Linear congruential generator constants
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
SEED_MODULUS = 2 ** 31
SEED_MASK = SEED_MODULUS - 1

# Large odd multiplier used to fold coordinates into a seed
COORDINATE_MULTIPLIER = 1000003


def validate_seed(seed: int) -> int:
    """
    Check that a seed lies in the non-negative 31-bit domain.

    Raises:
        OutOfRangeSeedError: If the seed is not an int in [0, 2^31)
    """
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise OutOfRangeSeedError(seed)
    if seed < 0 or seed >= SEED_MODULUS:
        raise OutOfRangeSeedError(seed)
    return seed


def derive_seed(seed: int, x: int, y: int) -> int:
    """
    Fold a coordinate into a base seed: ``seed + x*K + y`` masked to 31 bits.

    Any coordinate, negative ones included, yields a valid seed.
    """
    return (seed + x * COORDINATE_MULTIPLIER + y) & SEED_MASK


class SeededRNG:
    """A deterministic stream of floats in [0, 1)."""

    def __init__(self, seed: int):
        self._state = validate_seed(seed)

    @property
    def state(self) -> int:
        """Internal state; ``SeededRNG(rng.state)`` resumes the stream."""
        return self._state

    def next(self) -> float:
        """Advance the stream and return a float in [0, 1)."""
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) & SEED_MASK
        return self._state / SEED_MODULUS

    def randint(self, low: int, high: int) -> int:
        """Inclusive integer in [low, high] using a single draw."""
        if high < low:
            raise ValueError(f"Empty range: [{low}, {high}]")
        return low + int(self.next() * (high - low + 1))

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element using a single draw."""
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[int(self.next() * len(items))]

    def __repr__(self) -> str:
        return f"SeededRNG(state={self._state})"


def create(seed: int) -> SeededRNG:
    """Create a stream from a seed."""
    return SeededRNG(seed)
