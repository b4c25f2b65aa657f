"""
CHAIN LIGHTNING — Grid

A round's R×C matrix of symbol codes (0 = wild) and the seeded generator
that fills it. The generator draws one symbol per cell in row-major order;
changing that order changes every later PRNG value, including the strike
start cells drawn after the grid.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from sim_engine.lightning.errors import ConfigError
from sim_engine.lightning.prng import JavaRandom
from sim_engine.lightning.sampler import WILD, WeightedSymbolSampler

Cell = tuple[int, int]

# Moore neighbourhood, scanned in this fixed order by every tracer
NEIGHBOR_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


class Grid:
    """Immutable-by-convention symbol matrix with neighbour lookup."""

    __slots__ = ("rows", "cols", "cells")

    def __init__(self, cells: Sequence[Sequence[int]]):
        if not cells or not cells[0]:
            raise ConfigError("grid must have at least one row and one column")
        width = len(cells[0])
        if any(len(row) != width for row in cells):
            raise ConfigError("grid rows must all have the same length")
        self.rows = len(cells)
        self.cols = width
        self.cells = [list(row) for row in cells]

    def __getitem__(self, cell: Cell) -> int:
        r, c = cell
        return self.cells[r][c]

    def __eq__(self, other) -> bool:
        return isinstance(other, Grid) and self.cells == other.cells

    def __repr__(self) -> str:
        return f"Grid({self.rows}x{self.cols})"

    def in_bounds(self, cell: Cell) -> bool:
        r, c = cell
        return 0 <= r < self.rows and 0 <= c < self.cols

    def neighbors(self, cell: Cell) -> list[Cell]:
        r, c = cell
        out = []
        for dr, dc in NEIGHBOR_OFFSETS:
            nr, nc = r + dr, c + dc
            if 0 <= nr < self.rows and 0 <= nc < self.cols:
                out.append((nr, nc))
        return out

    def iter_cells(self) -> Iterator[Cell]:
        for r in range(self.rows):
            for c in range(self.cols):
                yield (r, c)

    def wilds(self) -> list[Cell]:
        """Wild cells in row-major scan order."""
        return [cell for cell in self.iter_cells() if self[cell] == WILD]

    def to_list(self) -> list[list[int]]:
        return [list(row) for row in self.cells]


class GridGenerator:
    """Fills a fresh grid from a seed. Returns the PRNG so the round can keep drawing."""

    def __init__(self, rows: int, cols: int, sampler: WeightedSymbolSampler):
        if rows <= 0 or cols <= 0:
            raise ConfigError(f"grid dimensions must be positive, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self.sampler = sampler

    def fill(self, rng: JavaRandom) -> Grid:
        draw = self.sampler.draw
        return Grid([[draw(rng) for _ in range(self.cols)] for _ in range(self.rows)])

    def generate(self, seed: int) -> tuple[Grid, JavaRandom]:
        rng = JavaRandom(seed)
        return self.fill(rng), rng
