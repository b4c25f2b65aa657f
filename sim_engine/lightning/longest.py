"""Longest-path policy: exhaustive depth-first search for the longest simple path."""

from __future__ import annotations

from typing import AbstractSet

from sim_engine.lightning.base import ChainTracer, match_symbol
from sim_engine.lightning.grid import Cell, Grid


class LongestPathTracer(ChainTracer):
    """Backtracking over every branch; the first branch reaching the max length wins.

    Exponential in the worst case, bounded by the cell count (recursion depth
    never exceeds rows * cols). Each branch gets its own visited set so no
    undo bookkeeping is shared between siblings.
    """

    policy = "longest"
    display_name = "Longest Path (DFS)"

    def _search(self, grid: Grid, start: Cell, used: AbstractSet[Cell],
                symbol: int) -> tuple[list, int]:
        tail, symbol = self._extend(grid, start, frozenset([start]), symbol, used)
        return [start, *tail], symbol

    def _extend(self, grid: Grid, cell: Cell, visited: frozenset, symbol: int,
                used: AbstractSet[Cell]) -> tuple[tuple, int]:
        best: tuple = ()
        best_symbol = symbol

        for nb in grid.neighbors(cell):
            if nb in visited or nb in used:
                continue
            next_symbol = match_symbol(symbol, grid[nb])
            if next_symbol is None:
                continue

            tail, tail_symbol = self._extend(grid, nb, visited | {nb}, next_symbol, used)
            if len(tail) + 1 > len(best):
                best = (nb, *tail)
                best_symbol = tail_symbol

        return best, best_symbol
