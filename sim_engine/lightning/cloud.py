"""Cloud policy: breadth-first collection of the whole connected region."""

from __future__ import annotations

from collections import deque
from typing import AbstractSet

from sim_engine.lightning.base import ChainTracer, match_symbol
from sim_engine.lightning.grid import Cell, Grid


class CloudTracer(ChainTracer):
    policy = "cloud"
    display_name = "Cloud (BFS)"

    def _search(self, grid: Grid, start: Cell, used: AbstractSet[Cell],
                symbol: int) -> tuple[list, int]:
        path = [start]
        visited = {start}
        queue = deque([start])

        while queue:
            cell = queue.popleft()
            for nb in grid.neighbors(cell):
                if nb in visited or nb in used:
                    continue
                next_symbol = match_symbol(symbol, grid[nb])
                if next_symbol is None:
                    continue
                # first non-wild neighbour fixes the symbol for the whole cloud
                symbol = next_symbol
                visited.add(nb)
                path.append(nb)
                queue.append(nb)

        return path, symbol
