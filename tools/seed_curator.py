"""
CHAIN LIGHTNING — Seed Curator

Builds an RTP-balanced catalog of (seed, win) pairs from a sequential seed
stream. Every candidate seed is simulated once, then:

  1. Frequency cap: reject if this exact win already holds
     floor(count × max_win_pct) catalog slots.
  2. Balance: rtp = total_win / (accepted × bet) × 100.
       • first round                       → accept
       • rtp < target and win > rtp        → accept (pulls RTP up)
       • rtp > target and win < rtp        → accept (pulls RTP down)
       • |rtp - target| < near_target      → accept if target ± band_width covers win
       • otherwise                         → reject

The win is compared directly against the RTP percentage. At the reference
bet of 100 the RTP percentage equals the mean catalog win, so the rule reads
"accept wins on the far side of the running mean".

Scanning stops with NonConvergenceError once scan_limit seeds have been
tried without filling the catalog.

Usage:
    from tools.seed_curator import SeedCurator
    curator = SeedCurator(simulator, CuratorConfig(count=10_000, base_seed=1718000000))
    result = curator.run()
    print(result.summary())
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from config.game_schema import CuratorConfig
from sim_engine.lightning.errors import ConfigError, NonConvergenceError
from tools.seed_catalog import SeedRecord

logger = logging.getLogger("chainlightning.curator")

SKIP_LOG_EVERY = 10_000


class CuratorState(str, Enum):
    SCANNING         = "scanning"
    ACCEPTED         = "accepted"
    REJECTED_CAP     = "rejected_by_cap"
    REJECTED_BALANCE = "rejected_by_balance"
    DONE             = "done"


# ═══════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════

@dataclass
class CatalogResult:
    records: list = field(default_factory=list)
    base_seed: int = 0
    scanned: int = 0
    total_win: int = 0
    bet: int = 100
    target_rtp: float = 96.5
    rejected_cap: int = 0
    rejected_balance: int = 0
    win_counts: dict = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def rtp(self) -> float:
        if not self.records:
            return 0.0
        return self.total_win / (len(self.records) * self.bet) * 100

    def summary(self) -> str:
        speed = self.scanned / self.duration_seconds if self.duration_seconds > 0 else 0
        lines = [
            f"═══ Seed Catalog ═══",
            f"  Seeds:        {len(self.records):,}",
            f"  Seeds tested: {self.scanned:,}",
            f"  Target RTP:   {self.target_rtp:.2f}%",
            f"  Final RTP:    {self.rtp:.2f}%",
            f"  Cap skips:    {self.rejected_cap:,}",
            f"  RTP skips:    {self.rejected_balance:,}",
            f"  Speed:        {speed:,.0f} seeds/sec",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "count": len(self.records),
            "base_seed": self.base_seed,
            "scanned": self.scanned,
            "target_rtp_pct": self.target_rtp,
            "rtp_pct": round(self.rtp, 4),
            "rejected_cap": self.rejected_cap,
            "rejected_balance": self.rejected_balance,
            "distinct_wins": len(self.win_counts),
            "duration_s": round(self.duration_seconds, 2),
        }


# ═══════════════════════════════════════════════════════════════
# Curator
# ═══════════════════════════════════════════════════════════════

class SeedCurator:
    """Sequential accept/reject over base_seed, base_seed + 1, ..."""

    def __init__(self, simulator, config: CuratorConfig):
        if config.max_win_count < 1:
            raise ConfigError(
                f"Frequency cap floor({config.count} × {config.max_win_pct}) is 0; "
                f"raise max_win_pct or count"
            )
        self.simulator = simulator
        self.config = config
        self.bet = simulator.bet
        self.base_seed = config.base_seed if config.base_seed is not None else int(time.time())

        self.records: list[SeedRecord] = []
        self.win_counts: dict[int, int] = {}
        self.total_win = 0
        self.offset = 0
        self.rejected_cap = 0
        self.rejected_balance = 0
        self.state = CuratorState.SCANNING

    @property
    def done(self) -> bool:
        return len(self.records) >= self.config.count

    def current_rtp(self) -> float:
        if not self.records:
            return 0.0
        return self.total_win / (len(self.records) * self.bet) * 100

    def decide(self, win: int) -> CuratorState:
        """Accept/reject verdict for a candidate win against the current catalog."""
        cfg = self.config
        if self.win_counts.get(win, 0) >= cfg.max_win_count:
            return CuratorState.REJECTED_CAP

        if not self.records:
            return CuratorState.ACCEPTED

        rtp = self.current_rtp()
        target = cfg.target_rtp
        if rtp < target and win > rtp:
            take = True
        elif rtp > target and win < rtp:
            take = True
        elif abs(rtp - target) < cfg.near_target:
            take = target - cfg.band_width <= win <= target + cfg.band_width
        else:
            take = False
        return CuratorState.ACCEPTED if take else CuratorState.REJECTED_BALANCE

    def offer(self, seed: int, win: int) -> CuratorState:
        """Apply the verdict for one simulated seed."""
        verdict = self.decide(win)
        if verdict is CuratorState.ACCEPTED:
            self.records.append(SeedRecord(seed=seed, win=win))
            self.win_counts[win] = self.win_counts.get(win, 0) + 1
            self.total_win += win
        elif verdict is CuratorState.REJECTED_CAP:
            self.rejected_cap += 1
        else:
            self.rejected_balance += 1

        self.state = CuratorState.DONE if self.done else verdict
        return verdict

    def step(self) -> CuratorState:
        seed = self.base_seed + self.offset
        self.offset += 1
        return self.offer(seed, self.simulator.total_win(seed))

    def run(self, on_progress: Optional[Callable[[int, int, float, int], None]] = None) -> CatalogResult:
        """Scan until the catalog is full.

        on_progress(accepted, count, rtp, scanned) fires at every 5% of the
        target catalog size.
        """
        cfg = self.config
        limit = cfg.scan_limit
        last_percent = -1
        started = time.time()
        logger.info(
            f"Curating {cfg.count:,} seeds from base {self.base_seed} "
            f"(target RTP {cfg.target_rtp}%, cap {cfg.max_win_count}/win, scan limit {limit:,})"
        )

        while not self.done:
            if self.offset >= limit:
                msg = (
                    f"No convergence after {self.offset:,} seeds: {len(self.records):,}/"
                    f"{cfg.count:,} accepted, RTP {self.current_rtp():.2f}%"
                )
                logger.error(msg)
                raise NonConvergenceError(
                    msg, accepted=len(self.records), scanned=self.offset, records=self.records,
                )

            verdict = self.step()

            if verdict is CuratorState.ACCEPTED:
                percent = len(self.records) * 100 // cfg.count
                if percent != last_percent and percent % 5 == 0:
                    last_percent = percent
                    rtp = self.current_rtp()
                    logger.info(f"{percent}% (RTP: {rtp:.2f}%, seeds: {self.offset:,})")
                    if on_progress:
                        on_progress(len(self.records), cfg.count, rtp, self.offset)
            elif self.offset % SKIP_LOG_EVERY == 0:
                logger.debug(f"Skip ({verdict.value}): RTP={self.current_rtp():.1f}%, i={self.offset:,}")

        result = CatalogResult(
            records=list(self.records),
            base_seed=self.base_seed,
            scanned=self.offset,
            total_win=self.total_win,
            bet=self.bet,
            target_rtp=cfg.target_rtp,
            rejected_cap=self.rejected_cap,
            rejected_balance=self.rejected_balance,
            win_counts=dict(self.win_counts),
            duration_seconds=time.time() - started,
        )
        logger.info(f"Seeds tested: {result.scanned:,} | Final RTP: {result.rtp:.2f}%")
        return result
