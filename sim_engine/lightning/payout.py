"""Payout engine: paytable lookup × chain-length multiplier × wild-mode bonus."""

from __future__ import annotations

from typing import Mapping, Sequence

from sim_engine.lightning.base import MIN_CHAIN_LENGTH
from sim_engine.lightning.errors import ConfigError

REFERENCE_BET = 100


class PayoutEngine:
    """Integer currency payouts for traced chains.

    Paytable values are quoted per REFERENCE_BET, so a chain pays
    floor(bet * value / 100); at the reference bet that is the table value.
    """

    def __init__(self, paytable: Mapping[int, Sequence[int]],
                 multipliers: Sequence[int], bet: int = REFERENCE_BET):
        if not paytable:
            raise ConfigError("paytable is empty")
        if not multipliers:
            raise ConfigError("length multiplier table is empty")
        if bet <= 0:
            raise ConfigError(f"bet must be positive, got {bet}")
        self.paytable = {int(k): list(v) for k, v in paytable.items()}
        self.multipliers = list(multipliers)
        self.bet = bet

    def payout(self, symbol: int, length: int) -> int:
        if length < MIN_CHAIN_LENGTH:
            return 0
        pays = self.paytable.get(symbol)
        if not pays:
            return 0
        idx = min(length - MIN_CHAIN_LENGTH, len(pays) - 1)
        return self.bet * pays[idx] // REFERENCE_BET

    def multiplier(self, length: int) -> int:
        idx = min(length - 1, len(self.multipliers) - 1)
        return self.multipliers[idx]

    def chain_win(self, symbol: int, length: int, bonus: int = 1) -> int:
        return self.payout(symbol, length) * self.multiplier(length) * bonus
