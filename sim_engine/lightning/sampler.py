"""Weighted symbol sampler: quantised pool plus an independent wild roll."""

from __future__ import annotations

from typing import Sequence

from sim_engine.lightning.errors import ConfigError
from sim_engine.lightning.prng import JavaRandom

WILD = 0


def quantized_count(weight: float) -> int:
    """Pool copies for a weight: round(weight * 10), halves rounding up."""
    return int((weight * 10 + 0.5) // 1)


class WeightedSymbolSampler:
    """Discrete distribution over symbol codes 1..N.

    Each symbol appears round(weight * 10) times in the pool, so the effective
    distribution is quantised to tenths of a weight unit. Index 0 of the
    weight vector belongs to the wild and is ignored.
    """

    def __init__(self, weights: Sequence[float], wild_prob: float):
        if len(weights) < 2:
            raise ConfigError("weight vector needs at least one non-wild symbol")
        if not 0.0 <= wild_prob < 1.0:
            raise ConfigError(f"wild_prob must be in [0, 1), got {wild_prob}")

        pool: list[int] = []
        for symbol in range(1, len(weights)):
            weight = weights[symbol]
            if weight < 0:
                raise ConfigError(f"negative weight {weight} for symbol {symbol}")
            pool.extend([symbol] * quantized_count(weight))

        if not pool:
            raise ConfigError("symbol pool is empty; every weight rounds to zero")

        self.weights = list(weights)
        self.wild_prob = wild_prob
        self.pool = pool

    @property
    def pool_size(self) -> int:
        return len(self.pool)

    @property
    def symbol_count(self) -> int:
        return len(self.weights) - 1

    def probability(self, symbol: int) -> float:
        """Exact per-draw probability of `symbol` (0 = wild)."""
        if symbol == WILD:
            return self.wild_prob
        return (1.0 - self.wild_prob) * self.pool.count(symbol) / len(self.pool)

    def draw(self, rng: JavaRandom) -> int:
        if rng.next_double() < self.wild_prob:
            return WILD
        return self.pool[rng.next_int(len(self.pool))]
