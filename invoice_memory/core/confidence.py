"""
Confidence math - pure helpers keeping every confidence value in [0, 1]
rounded to two decimals.
"""

from typing import Iterable


def clamp(value: float) -> float:
    """Map a value into [0, 1], rounded to 2 decimals."""
    if value < 0:
        return 0.0
    if value > 1:
        return 1.0
    return round(value, 2)


def reinforce(current: float, increment: float = 0.1) -> float:
    """Increase confidence when a memory is confirmed."""
    return clamp(current + increment)


def decay(current: float, penalty: float = 0.2) -> float:
    """Decrease confidence when a memory is rejected or leads to an error."""
    return clamp(current - penalty)


def average(values: Iterable[float]) -> float:
    """Arithmetic mean of confidence values; 0 for an empty sequence."""
    values = list(values)
    if not values:
        return 0.0
    return clamp(sum(values) / len(values))
