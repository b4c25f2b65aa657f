"""
CHAIN LIGHTNING — Monte Carlo Statistics

Plays N consecutive seeds through the deterministic round simulator and
reports what a certification lab asks for:
  • Overall RTP, hit rate, sigma (in bets), max win
  • Base-mode vs wild-mode RTP split and wild-mode trigger frequency
  • Wilds-per-trigger, chain-length and per-symbol breakdowns
  • Win/loss streaks and a bucketed win distribution
  • Chi-squared uniformity check on the PRNG itself

Runs are reproducible: same config + policy + base seed → same report.

Usage:
    from tools.chain_montecarlo import run_simulation
    stats = run_simulation(simulator, rounds=1_000_000, base_seed=42)
    print(stats.summary())
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import time
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import groupby
from typing import Callable, Optional

from sim_engine.lightning.prng import JavaRandom

logger = logging.getLogger("chainlightning.sim")


# ═══════════════════════════════════════════════════════════════
# Data Structures
# ═══════════════════════════════════════════════════════════════

@dataclass
class TracePoint:
    """Running snapshot taken every log_interval rounds."""
    round: int
    rtp: float
    hit_rate: float
    wild_freq: float
    sigma: float


@dataclass
class SimulationStats:
    policy: str
    rounds: int = 0
    bet: int = 100
    base_seed: int = 0
    total_wagered: int = 0
    total_won: int = 0
    base_won: int = 0
    wild_mode_won: int = 0
    hits: int = 0
    wild_mode_count: int = 0
    max_win: int = 0
    sum_sq: float = 0.0
    lost_strikes: int = 0

    chain_lengths: dict = field(default_factory=dict)    # {length: count}
    symbol_stats: dict = field(default_factory=dict)     # {symbol: [chains, total_win]}
    wilds_distribution: dict = field(default_factory=dict)  # {wild_count: triggers}
    streak_analysis: dict = field(default_factory=dict)
    win_distribution: dict = field(default_factory=dict)
    chi_squared: float = 0.0
    chi_squared_pass: bool = True
    trace: list = field(default_factory=list)
    symbol_names: list = field(default_factory=list)

    duration_seconds: float = 0.0
    generated_at: str = ""

    def __post_init__(self):
        if not self.generated_at:
            self.generated_at = datetime.now(timezone.utc).isoformat()

    # ── Derived metrics ───────────────────────────────────────

    def _pct(self, part: float, whole: float) -> float:
        return part / whole * 100 if whole else 0.0

    @property
    def rtp(self) -> float:
        return self._pct(self.total_won, self.total_wagered)

    @property
    def base_rtp(self) -> float:
        return self._pct(self.base_won, self.total_wagered)

    @property
    def wild_rtp(self) -> float:
        return self._pct(self.wild_mode_won, self.total_wagered)

    @property
    def hit_rate(self) -> float:
        return self._pct(self.hits, self.rounds)

    @property
    def wild_freq(self) -> float:
        return self._pct(self.wild_mode_count, self.rounds)

    @property
    def std_dev(self) -> float:
        if not self.rounds:
            return 0.0
        mean = self.total_won / self.rounds
        return math.sqrt(max(0.0, self.sum_sq / self.rounds - mean * mean))

    @property
    def sigma(self) -> float:
        """Standard deviation of the win, in bets."""
        return self.std_dev / self.bet

    @property
    def rounds_per_second(self) -> float:
        return self.rounds / self.duration_seconds if self.duration_seconds > 0 else 0.0

    def symbol_name(self, symbol: int) -> str:
        if symbol < len(self.symbol_names):
            return self.symbol_names[symbol]
        return f"Symbol{symbol}"

    # ── Output ────────────────────────────────────────────────

    def summary(self) -> str:
        lines = [
            "==================================================",
            "       CHAIN LIGHTNING - SIMULATION RESULTS",
            "==================================================",
            "",
            "--- GENERAL ---",
            f"Policy: {self.policy}",
            f"Spins: {self.rounds:,}",
            f"RTP: {self.rtp:.2f}%",
            f"Hit Rate: {self.hit_rate:.2f}%",
            f"Sigma: {self.std_dev:.2f} ({self.sigma:.2f}x bet)",
            f"Max Win: {self.max_win:,} ({self.max_win // self.bet}x bet)",
            "",
            "--- RTP BREAKDOWN ---",
            f"Base Mode: {self.base_rtp:.2f}%",
            f"Wild Mode: {self.wild_rtp:.2f}%",
            "",
            "--- WILD MODE ---",
            f"Frequency: {self.wild_freq:.3f}% "
            f"(1/{round(100 / self.wild_freq) if self.wild_freq > 0 else 0})",
            "Wilds distribution:",
        ]
        for wilds, n in sorted(self.wilds_distribution.items()):
            lines.append(f"  {wilds} wilds: {n:,} ({self._pct(n, self.wild_mode_count):.1f}%)")

        lines += ["", "--- CHAIN LENGTHS ---"]
        total_chains = sum(self.chain_lengths.values())
        for length, n in sorted(self.chain_lengths.items()):
            lines.append(f"  Length {length}: {n:,} ({self._pct(n, total_chains):.1f}%)")

        lines += ["", "--- SYMBOL WINS ---"]
        for symbol, (n, won) in sorted(self.symbol_stats.items()):
            lines.append(
                f"  {symbol}. {self.symbol_name(symbol):<12}: {n:,} chains, "
                f"RTP {self._pct(won, self.total_wagered):.2f}%"
            )

        if self.streak_analysis:
            lines += [
                "",
                "--- STREAKS ---",
                f"Max Loss Streak: {self.streak_analysis.get('max_loss_streak', 'N/A')}",
                f"Max Win Streak:  {self.streak_analysis.get('max_win_streak', 'N/A')}",
            ]

        lines += [
            "",
            "--- PERFORMANCE ---",
            f"Time: {self.duration_seconds:.1f}s",
            f"Speed: {self.rounds_per_second:,.0f} spins/sec",
            "==================================================",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "policy": self.policy,
            "rounds": self.rounds,
            "base_seed": self.base_seed,
            "bet": self.bet,
            "rtp_pct": round(self.rtp, 4),
            "base_rtp_pct": round(self.base_rtp, 4),
            "wild_rtp_pct": round(self.wild_rtp, 4),
            "hit_rate_pct": round(self.hit_rate, 4),
            "wild_mode_freq_pct": round(self.wild_freq, 4),
            "sigma_bets": round(self.sigma, 4),
            "max_win": self.max_win,
            "lost_strikes": self.lost_strikes,
            "chain_lengths": {str(k): v for k, v in sorted(self.chain_lengths.items())},
            "wilds_distribution": {str(k): v for k, v in sorted(self.wilds_distribution.items())},
            "symbols": {
                str(sym): {
                    "name": self.symbol_name(sym),
                    "chains": n,
                    "rtp_pct": round(self._pct(won, self.total_wagered), 4),
                }
                for sym, (n, won) in sorted(self.symbol_stats.items())
            },
            "distribution": self.win_distribution,
            "streak_analysis": self.streak_analysis,
            "uniformity": {
                "chi_squared": round(self.chi_squared, 4),
                "pass": self.chi_squared_pass,
            },
            "performance": {
                "duration_s": round(self.duration_seconds, 2),
                "rounds_per_sec": int(self.rounds_per_second),
            },
            "generated_at": self.generated_at,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def trace_csv(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(["Round", "RTP%", "HitRate%", "WildModeFreq%", "Sigma"])
        for p in self.trace:
            writer.writerow([p.round, f"{p.rtp:.4f}", f"{p.hit_rate:.4f}",
                             f"{p.wild_freq:.4f}", f"{p.sigma:.4f}"])
        return buf.getvalue()


# ═══════════════════════════════════════════════════════════════
# Streak & Distribution Analysis
# ═══════════════════════════════════════════════════════════════

# Upper edges of the paying win buckets, in bets; a win of exactly 0 is its own bucket
WIN_BUCKET_EDGES = (1, 2, 5, 10, 50, 100)
WIN_BUCKET_LABELS = ("0-1x", "1-2x", "2-5x", "5-10x", "10-50x", "50-100x", "100x+")

UNIFORMITY_BINS = 100
# chi-squared critical value, 99 degrees of freedom, α = 0.01
UNIFORMITY_CRITICAL = 135.8


def _analyze_streaks(outcomes: list[int]) -> dict:
    """Longest runs of paying and dead rounds."""
    if not outcomes:
        return {}

    longest = {True: 0, False: 0}
    for paying, run in groupby(outcomes, key=lambda win: win > 0):
        longest[paying] = max(longest[paying], sum(1 for _ in run))

    wins = sum(1 for win in outcomes if win > 0)
    return {
        "max_win_streak": longest[True],
        "max_loss_streak": longest[False],
        "total_wins": wins,
        "total_losses": len(outcomes) - wins,
    }


def _win_distribution(outcomes: list[int], bet: int) -> dict:
    """Percent of rounds per win bucket, buckets measured in bets."""
    edges = [m * bet for m in WIN_BUCKET_EDGES]
    counts = Counter(
        WIN_BUCKET_LABELS[bisect_right(edges, win)] if win else "0x" for win in outcomes
    )
    n = len(outcomes)
    labels = ("0x",) + WIN_BUCKET_LABELS
    return {label: round(counts[label] / n * 100, 2) if n else 0 for label in labels}


def chi_squared_uniformity(seed: int, n_samples: int = 100_000) -> tuple[float, bool]:
    """Chi-squared goodness of fit of JavaRandom.next_double over equal-width bins."""
    rng = JavaRandom(seed)
    observed = Counter(int(rng.next_double() * UNIFORMITY_BINS) for _ in range(n_samples))
    expected = n_samples / UNIFORMITY_BINS
    chi2 = sum((observed[b] - expected) ** 2 for b in range(UNIFORMITY_BINS)) / expected
    return chi2, chi2 < UNIFORMITY_CRITICAL


# ═══════════════════════════════════════════════════════════════
# Runner
# ═══════════════════════════════════════════════════════════════

def run_simulation(simulator, rounds: int, base_seed: int = 0,
                   log_interval: int = 100_000, symbol_names: Optional[list] = None,
                   uniformity_samples: int = 100_000,
                   on_progress: Optional[Callable[[int, int, float], None]] = None) -> SimulationStats:
    """Play seeds base_seed .. base_seed + rounds - 1 and aggregate statistics.

    on_progress(done, rounds, rtp) fires every log_interval rounds.
    """
    bet = simulator.bet
    stats = SimulationStats(
        policy=simulator.tracer.policy, bet=bet, base_seed=base_seed,
        symbol_names=list(symbol_names or []),
    )
    outcomes = []

    t0 = time.time()
    for i in range(1, rounds + 1):
        result = simulator.play(base_seed + i - 1)
        win = result.total_win

        stats.rounds = i
        stats.total_wagered += bet
        stats.total_won += win
        stats.sum_sq += float(win) * win
        stats.lost_strikes += result.lost_strikes
        outcomes.append(win)
        if win > 0:
            stats.hits += 1
        if win > stats.max_win:
            stats.max_win = win

        if result.wild_mode:
            stats.wild_mode_count += 1
            stats.wild_mode_won += win
            stats.wilds_distribution[result.wild_count] = \
                stats.wilds_distribution.get(result.wild_count, 0) + 1
        else:
            stats.base_won += win

        for chain in result.chains:
            stats.chain_lengths[chain.length] = stats.chain_lengths.get(chain.length, 0) + 1
            entry = stats.symbol_stats.setdefault(chain.symbol, [0, 0])
            entry[0] += 1
            entry[1] += chain.win

        if log_interval and i % log_interval == 0:
            stats.trace.append(TracePoint(
                round=i, rtp=stats.rtp, hit_rate=stats.hit_rate,
                wild_freq=stats.wild_freq, sigma=stats.sigma,
            ))
            if on_progress:
                on_progress(i, rounds, stats.rtp)

    stats.duration_seconds = time.time() - t0
    stats.streak_analysis = _analyze_streaks(outcomes)
    stats.win_distribution = _win_distribution(outcomes, bet)
    if uniformity_samples:
        stats.chi_squared, stats.chi_squared_pass = chi_squared_uniformity(
            base_seed, n_samples=uniformity_samples)
    logger.info(f"Simulated {rounds:,} rounds ({stats.policy}): RTP {stats.rtp:.2f}% "
                f"in {stats.duration_seconds:.1f}s")
    return stats
