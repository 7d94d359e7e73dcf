"""Deterministic RNG used by the fight simulator and the level-up generator.

The generator is XorShift128 seeded through a MurmurHash3 finalizer. Unlike
`random.Random` its output only depends on integer arithmetic, so a stored
seed replays the same stream on every platform and interpreter release.

Every public helper consumes exactly one underlying draw. That keeps the
stream position a pure function of the call sequence, which is what makes a
fight replayable from its seed.
"""
from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

MASK64 = 0xFFFFFFFFFFFFFFFF
MAX_SEED = 1 << 64


def _murmur_hash3(x: int) -> int:
    x &= MASK64
    x ^= x >> 33
    x = (x * 0xFF51AFD7ED558CCD) & MASK64
    x ^= x >> 33
    x = (x * 0xC4CEB9FE1A85EC53) & MASK64
    x ^= x >> 33
    return x


class SeededRandom:
    """Explicitly seeded random source. Never share one between fights."""

    def __init__(self, seed: int):
        self.seed0 = 0
        self.seed1 = 0
        self.seed = 0
        self.draws = 0
        self.reseed(seed)

    def reseed(self, seed: int) -> None:
        """Reset the stream to the start of `seed`."""
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError(f"seed must be an integer, got {seed!r}")
        if seed < 0 or seed >= MAX_SEED:
            raise ValueError(f"seed must be in [0, 2**64), got {seed}")
        self.seed = seed
        # murmur(0) == 0 would leave the xorshift state stuck at zero
        state = seed if seed != 0 else 1 << 63
        self.seed0 = _murmur_hash3(state)
        self.seed1 = _murmur_hash3(self.seed0)
        self.draws = 0

    def _next_u64(self) -> int:
        s1 = self.seed0
        s0 = self.seed1
        self.seed0 = s0
        s1 ^= (s1 << 23) & MASK64
        self.seed1 = (s1 ^ s0 ^ (s1 >> 17) ^ (s0 >> 26)) & MASK64
        self.draws += 1
        return (self.seed0 + self.seed1) & MASK64

    def next(self, bound: int) -> int:
        """Integer in [0, bound)."""
        if bound <= 0:
            raise ValueError("bound must be positive")
        return (self._next_u64() * bound) >> 64

    def next_float(self) -> float:
        """Float in [0, 1)."""
        return (self._next_u64() >> 11) / float(1 << 53)

    def next_range(self, low: int, high: int) -> int:
        """Integer in the closed range [low, high]."""
        if high < low:
            raise ValueError("high must be >= low")
        return low + self.next(high - low + 1)

    def chance(self, p: float) -> bool:
        """Return True with probability p. Always consumes one draw."""
        return self.next_float() < p

    def weighted_pick(self, items: Sequence[T], weights: Sequence[int]) -> T:
        """Pick one item with probability proportional to its integer weight."""
        if not items or len(items) != len(weights):
            raise ValueError("items and weights must be non-empty and of equal length")
        total = 0
        for w in weights:
            if isinstance(w, bool) or not isinstance(w, int) or w < 0:
                raise ValueError(f"weights must be non-negative integers, got {w!r}")
            total += w
        if total <= 0:
            raise ValueError("total weight must be positive")

        roll = self.next(total)
        upto = 0
        for item, w in zip(items, weights):
            upto += w
            if roll < upto:
                return item
        # unreachable: roll < total == upto
        return items[-1]

    def state(self) -> tuple:
        return (self.seed0, self.seed1, self.draws)
