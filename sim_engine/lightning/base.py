"""
CHAIN LIGHTNING — Base Chain Tracer

Abstract base for the chain-tracing policies. A tracer takes a grid, a start
cell and the cells already claimed this round, and returns the chain of
matching symbols it finds. Wilds join any chain; the chain's symbol is fixed
by the first non-wild cell it reaches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AbstractSet

from sim_engine.lightning.grid import Cell, Grid
from sim_engine.lightning.sampler import WILD

UNRESOLVED = -1
MIN_CHAIN_LENGTH = 3


@dataclass
class Chain:
    """Result of one trace."""
    path: list = field(default_factory=list)   # ordered cells, start first
    symbol: int = WILD                          # 0 when the chain is wild-only

    @property
    def length(self) -> int:
        return len(self.path)

    @property
    def pays(self) -> bool:
        return self.length >= MIN_CHAIN_LENGTH and self.symbol > 0

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "length": self.length,
            "path": [list(cell) for cell in self.path],
        }


def match_symbol(current: int, candidate: int) -> int | None:
    """Symbol the chain carries after stepping onto `candidate`, or None if it can't."""
    if candidate == WILD:
        return current
    if current == UNRESOLVED:
        return candidate
    if candidate == current:
        return current
    return None


class ChainTracer(ABC):
    """Common interface for the cloud and longest-path policies."""

    policy: str = "base"
    display_name: str = "Base Tracer"

    def trace(self, grid: Grid, start: Cell, used: AbstractSet[Cell]) -> Chain:
        start_symbol = grid[start]
        symbol = UNRESOLVED if start_symbol == WILD else start_symbol
        path, symbol = self._search(grid, start, used, symbol)
        return Chain(path=path, symbol=WILD if symbol == UNRESOLVED else symbol)

    @abstractmethod
    def _search(self, grid: Grid, start: Cell, used: AbstractSet[Cell],
                symbol: int) -> tuple[list, int]:
        """Return (path, resolved symbol or UNRESOLVED)."""
        ...
