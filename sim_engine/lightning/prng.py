"""
CHAIN LIGHTNING — Seeded PRNG

Bit-exact port of the 48-bit linear congruential generator behind
java.util.Random. Every stored catalog seed is replayed through this class,
so any deviation here silently changes every grid and every win.

    state0 = (seed ^ 0x5DEECE66D) & (2^48 - 1)
    state  = (state * 0x5DEECE66D + 0xB) & (2^48 - 1)
    next(bits) = (int32)(state >>> (48 - bits))

Usage:
    from sim_engine.lightning.prng import JavaRandom
    rng = JavaRandom(1718000000)
    rng.next_int(6)      # bounded int in [0, 6)
    rng.next_double()    # uniform float in [0, 1)
"""

from __future__ import annotations

from sim_engine.lightning.errors import ConfigError

MULTIPLIER = 0x5DEECE66D
ADDEND = 0xB
MASK = (1 << 48) - 1
DOUBLE_UNIT = float(1 << 53)


def to_int32(value: int) -> int:
    """Wrap an arbitrary Python int to signed 32-bit two's complement."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


class JavaRandom:
    """java.util.Random with the same seed scrambling and draw methods."""

    __slots__ = ("_state",)

    def __init__(self, seed: int):
        self.set_seed(seed)

    def set_seed(self, seed: int) -> None:
        self._state = (int(seed) ^ MULTIPLIER) & MASK

    @property
    def state(self) -> int:
        return self._state

    def next(self, bits: int) -> int:
        """Advance once and return the top `bits` bits as a signed int32."""
        self._state = (self._state * MULTIPLIER + ADDEND) & MASK
        return to_int32(self._state >> (48 - bits))

    def next_int(self, bound: int) -> int:
        """Uniform int in [0, bound).

        The rejection test `bits - val + (bound - 1) < 0` only fires when the
        sum overflows a signed 32-bit int, so it is evaluated with int32
        wraparound rather than unbounded ints.
        """
        if bound <= 0:
            raise ConfigError(f"bound must be positive, got {bound}")

        if (bound & -bound) == bound:
            return (bound * self.next(31)) >> 31

        while True:
            bits = self.next(31)
            val = bits % bound
            if to_int32(bits - val + (bound - 1)) >= 0:
                return val

    def next_double(self) -> float:
        """Uniform float in [0, 1) built from 53 random bits."""
        return ((self.next(26) << 27) + self.next(27)) / DOUBLE_UNIT
