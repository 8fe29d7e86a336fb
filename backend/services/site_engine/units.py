"""
Unit conversion and the seeded pseudo-random generator used for jitter.
"""

from typing import Optional


def meters_to_km(m: float) -> float:
    return m / 1000.0


def km_to_meters(km: float) -> float:
    return km * 1000.0


_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply (low 32 bits of the product)."""
    return (a * b) & _MASK32


class Mulberry32:
    """
    Mulberry32 PRNG.

    Produces the same sequence as the classic 32-bit implementation for a
    given seed, so layouts generated from a seed are reproducible across
    runs and platforms.

    Usage::

        rng = Mulberry32(42)
        x = rng()          # float in [0, 1)
    """

    def __init__(self, seed: Optional[int] = 1):
        if seed is None:
            seed = 1
        self._state = int(seed) & _MASK32

    def __call__(self) -> float:
        return self.random()

    def random(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def uniform(self, low: float, high: float) -> float:
        """Float in ``[low, high)``."""
        return low + (high - low) * self.random()
