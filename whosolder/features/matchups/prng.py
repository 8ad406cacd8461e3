"""
Mulberry32 pseudo-random generator, version 1.

The exact bit mixing is part of the game protocol: every implementation must
produce the same sequence for the same seed, otherwise clients and servers
disagree about the daily challenge. All arithmetic is modulo 2**32.
"""

import re

MASK32 = 0xFFFFFFFF
INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296
DATE_SEED_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class Mulberry32:
    """Deterministic 32-bit generator; ``random()`` returns floats in [0, 1)."""

    def __init__(self, seed: int):
        self.state = seed & MASK32

    def next_uint32(self) -> int:
        self.state = (self.state + INCREMENT) & MASK32
        t = self.state
        t = ((t ^ (t >> 15)) * (t | 1)) & MASK32
        t ^= (t + (((t ^ (t >> 7)) * (t | 61)) & MASK32)) & MASK32
        return (t ^ (t >> 14)) & MASK32

    def random(self) -> float:
        return self.next_uint32() / TWO_POW_32


def seed_from_date(date_seed: str) -> int:
    """20251120 for "2025-11-20"; the integer is truncated to 32 bits."""
    if not isinstance(date_seed, str) or not DATE_SEED_PATTERN.fullmatch(date_seed):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {date_seed!r}")
    return int(date_seed.replace("-", "")) & MASK32
