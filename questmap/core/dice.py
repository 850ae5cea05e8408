"""
Dice rolling on a seeded stream.

Handles the dice used by combat resolution:
- Single dice of any size
- d20 attack checks with natural 20 / natural 1 detection
"""
from dataclasses import dataclass

from questmap.core.rng import SeededRNG


@dataclass(frozen=True)
class D20Result:
    """Result of a d20 roll, tracking criticals."""
    roll: int  # Natural die value
    modifier: int
    total: int
    natural_20: bool = False
    natural_1: bool = False


def roll_die(sides: int, rng: SeededRNG) -> int:
    """Roll a single die with the given number of sides."""
    if sides < 1:
        raise ValueError(f"Invalid die: d{sides}")
    return rng.randint(1, sides)


def roll_d20(rng: SeededRNG, modifier: int = 0) -> D20Result:
    """
    Roll a d20 attack or ability check.

    Args:
        rng: Stream the die is drawn from
        modifier: Bonus to add to the roll (attack bonus, level, etc.)

    Returns:
        D20Result with all roll information
    """
    roll = roll_die(20, rng)
    return D20Result(
        roll=roll,
        modifier=modifier,
        total=roll + modifier,
        natural_20=(roll == 20),
        natural_1=(roll == 1),
    )
