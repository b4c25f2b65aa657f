"""
CHAIN LIGHTNING — Round Simulator

One round = one seed → one grid → one total win.

    1. Reset the PRNG to the seed and fill the grid row-major.
    2. Count wilds. At or above the wild-mode threshold, anchor a chain search
       at every unused wild (scan order): trace from each unused non-wild
       neighbour, keep the first longest chain, pay it with the wild-mode
       bonus and claim the wild plus the chain's cells.
    3. Otherwise run the strikes: each draws row then column from the same
       PRNG until it finds an unused cell (30 draws max, then the strike is
       lost), traces from it and pays qualifying chains without bonus.

All per-round state lives on a RoundContext; nothing survives between rounds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sim_engine.lightning.base import Chain, ChainTracer
from sim_engine.lightning.grid import Cell, Grid, GridGenerator
from sim_engine.lightning.payout import PayoutEngine
from sim_engine.lightning.prng import JavaRandom
from sim_engine.lightning.sampler import WILD, WeightedSymbolSampler

MAX_START_ATTEMPTS = 30


# ═══════════════════════════════════════════════════════════════
# Data Structures
# ═══════════════════════════════════════════════════════════════

@dataclass
class RoundContext:
    """Mutable state owned by a single round."""
    grid: Grid
    rng: JavaRandom
    used: set = field(default_factory=set)

    def claim(self, cells) -> None:
        self.used.update(cells)


@dataclass
class ChainWin:
    """An accepted, paid chain."""
    symbol: int
    length: int
    base_pay: int
    mult: int
    wild_mult: int
    win: int
    path: list
    wild_start: Optional[Cell] = None

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "length": self.length,
            "basePay": self.base_pay,
            "mult": self.mult,
            "wildMult": self.wild_mult,
            "win": self.win,
            "path": [list(cell) for cell in self.path],
            "wildStart": list(self.wild_start) if self.wild_start else None,
        }


@dataclass
class RoundResult:
    seed: Optional[int]
    grid: Grid
    total_win: int = 0
    wild_mode: bool = False
    wild_count: int = 0
    wild_mode_multiplier: int = 1
    chains: list = field(default_factory=list)
    lost_strikes: int = 0

    def claimed_cells(self) -> list:
        """Every cell claimed this round, anchors included (duplicates kept)."""
        cells = []
        for chain in self.chains:
            if chain.wild_start is not None:
                cells.append(chain.wild_start)
            cells.extend(chain.path)
        return cells

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "grid": self.grid.to_list(),
            "totalWin": self.total_win,
            "wildMode": self.wild_mode,
            "wildCount": self.wild_count,
            "wildModeMultiplier": self.wild_mode_multiplier,
            "chains": [c.to_dict() for c in self.chains],
        }


# ═══════════════════════════════════════════════════════════════
# Simulator
# ═══════════════════════════════════════════════════════════════

class RoundSimulator:
    """Deterministic round resolution for a fixed game configuration."""

    def __init__(self, generator: GridGenerator, tracer: ChainTracer, payouts: PayoutEngine,
                 strikes_per_spin: int = 3, min_wilds: int = 3, wild_multiplier: int = 5,
                 max_start_attempts: int = MAX_START_ATTEMPTS):
        self.generator = generator
        self.tracer = tracer
        self.payouts = payouts
        self.strikes_per_spin = strikes_per_spin
        self.min_wilds = min_wilds
        self.wild_multiplier = wild_multiplier
        self.max_start_attempts = max_start_attempts

    @classmethod
    def from_config(cls, config, tracer: ChainTracer) -> "RoundSimulator":
        """Build from a config.game_schema.GameConfig."""
        sampler = WeightedSymbolSampler(config.symbols.weights, config.symbols.wild_prob)
        generator = GridGenerator(config.grid.rows, config.grid.cols, sampler)
        payouts = PayoutEngine(config.paytable, config.lightning.multipliers, bet=config.bet)
        return cls(
            generator, tracer, payouts,
            strikes_per_spin=config.lightning.strikes_per_spin,
            min_wilds=config.wild_mode.min_wilds,
            wild_multiplier=config.wild_mode.multiplier,
            max_start_attempts=config.lightning.max_start_attempts,
        )

    @property
    def bet(self) -> int:
        return self.payouts.bet

    def start(self, seed: int) -> RoundContext:
        grid, rng = self.generator.generate(seed)
        return RoundContext(grid=grid, rng=rng)

    def play(self, seed: int) -> RoundResult:
        result = self.resolve(self.start(seed))
        result.seed = seed
        return result

    def total_win(self, seed: int) -> int:
        return self.play(seed).total_win

    def resolve(self, ctx: RoundContext) -> RoundResult:
        wilds = ctx.grid.wilds()
        result = RoundResult(seed=None, grid=ctx.grid, wild_count=len(wilds))

        if len(wilds) >= self.min_wilds:
            result.wild_mode = True
            result.wild_mode_multiplier = self.wild_multiplier
            self._resolve_wilds(ctx, wilds, result)
        else:
            self._resolve_strikes(ctx, result)

        result.total_win = sum(c.win for c in result.chains)
        return result

    # ── Wild-anchored resolution ──────────────────────────────

    def _best_from_wild(self, ctx: RoundContext, anchor: Cell) -> Chain:
        # the anchor is off-limits to its own chain so anchor and path stay disjoint
        blocked = ctx.used | {anchor}
        best = Chain()
        for nb in ctx.grid.neighbors(anchor):
            if nb in ctx.used or ctx.grid[nb] == WILD:
                continue
            chain = self.tracer.trace(ctx.grid, nb, blocked)
            if chain.length > best.length:
                best = chain
        return best

    def _resolve_wilds(self, ctx: RoundContext, wilds: list, result: RoundResult) -> None:
        for anchor in wilds:
            if anchor in ctx.used:
                continue
            chain = self._best_from_wild(ctx, anchor)
            if not chain.pays:
                continue
            result.chains.append(self._pay(chain, self.wild_multiplier, anchor))
            ctx.claim([anchor])
            ctx.claim(chain.path)

    # ── Strike resolution ─────────────────────────────────────

    def _pick_start(self, ctx: RoundContext) -> Optional[Cell]:
        rows, cols = ctx.grid.rows, ctx.grid.cols
        for _ in range(self.max_start_attempts):
            cell = (ctx.rng.next_int(rows), ctx.rng.next_int(cols))
            if cell not in ctx.used:
                return cell
        return None

    def _resolve_strikes(self, ctx: RoundContext, result: RoundResult) -> None:
        for _ in range(self.strikes_per_spin):
            start = self._pick_start(ctx)
            if start is None:
                result.lost_strikes += 1
                continue
            chain = self.tracer.trace(ctx.grid, start, ctx.used)
            if not chain.pays:
                continue
            result.chains.append(self._pay(chain, 1))
            ctx.claim(chain.path)

    def _pay(self, chain: Chain, wild_mult: int, anchor: Optional[Cell] = None) -> ChainWin:
        return ChainWin(
            symbol=chain.symbol,
            length=chain.length,
            base_pay=self.payouts.payout(chain.symbol, chain.length),
            mult=self.payouts.multiplier(chain.length),
            wild_mult=wild_mult,
            win=self.payouts.chain_win(chain.symbol, chain.length, bonus=wild_mult),
            path=list(chain.path),
            wild_start=anchor,
        )
