"""
CHAIN LIGHTNING — Seed Catalog

Flat list of {seed, win} records plus the tools to persist and audit it.
Replaying a record's seed through the same game config and tracing policy
must reproduce its win exactly; verify_catalog() checks that for every row.

Usage:
    from tools.seed_catalog import load_catalog, verify_catalog
    records = load_catalog("cl-seeds-balanced.json")
    report = verify_catalog(records, simulator)
    print(report.summary())
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from sim_engine.lightning.errors import CatalogMismatchError, ConfigError

logger = logging.getLogger("chainlightning.catalog")


@dataclass(frozen=True)
class SeedRecord:
    seed: int
    win: int

    def to_dict(self) -> dict:
        return {"seed": self.seed, "win": self.win}


# ═══════════════════════════════════════════════════════════════
# Persistence
# ═══════════════════════════════════════════════════════════════

def save_catalog(records: Iterable[SeedRecord], path) -> Path:
    """Write the whole catalog as one JSON array (not streamed)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = [r.to_dict() for r in records]
    path.write_text(json.dumps(rows), encoding="utf-8")
    logger.info(f"Saved {len(rows)} seeds to {path}")
    return path


def load_catalog(path) -> list[SeedRecord]:
    path = Path(path)
    try:
        rows = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read catalog {path}: {e}") from e
    if not isinstance(rows, list):
        raise ConfigError(f"Catalog {path} must be a JSON array of {{seed, win}} objects")
    try:
        return [SeedRecord(seed=int(r["seed"]), win=int(r["win"])) for r in rows]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed catalog row in {path}: {e}") from e


# ═══════════════════════════════════════════════════════════════
# Audit
# ═══════════════════════════════════════════════════════════════

@dataclass
class CatalogReport:
    """Result of replaying every seed in a catalog."""
    count: int = 0
    bet: int = 100
    total_win: int = 0
    mismatches: list = field(default_factory=list)     # [(seed, expected, actual)]
    win_counts: dict = field(default_factory=dict)
    seeds_increasing: bool = True

    @property
    def rtp(self) -> float:
        return self.total_win / (self.count * self.bet) * 100 if self.count else 0.0

    @property
    def ok(self) -> bool:
        return not self.mismatches and self.seeds_increasing

    @property
    def most_common(self) -> tuple:
        if not self.win_counts:
            return (None, 0)
        win = max(self.win_counts, key=lambda w: (self.win_counts[w], -w))
        return (win, self.win_counts[win])

    def summary(self) -> str:
        status = "✅ PASS" if self.ok else "❌ FAIL"
        win, n = self.most_common
        lines = [
            f"═══ Catalog Verification ═══",
            f"  Records:       {self.count:,}",
            f"  Catalog RTP:   {self.rtp:.2f}%",
            f"  Distinct wins: {len(self.win_counts):,}",
            f"  Most common:   win={win} × {n}",
            f"  Seed order:    {'increasing' if self.seeds_increasing else 'NOT increasing'}",
            f"  Mismatches:    {len(self.mismatches)}",
            f"  Result:        {status}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        win, n = self.most_common
        return {
            "count": self.count,
            "rtp_pct": round(self.rtp, 4),
            "distinct_wins": len(self.win_counts),
            "most_common_win": win,
            "most_common_count": n,
            "seeds_increasing": self.seeds_increasing,
            "mismatches": [
                {"seed": s, "expected": e, "actual": a} for s, e, a in self.mismatches
            ],
            "ok": self.ok,
        }


def replay_seed(seed: int, simulator):
    """Full round detail for one stored seed."""
    return simulator.play(seed)


def verify_catalog(records: Iterable[SeedRecord], simulator, strict: bool = False) -> CatalogReport:
    """Replay every record. strict=True raises on the first mismatch."""
    report = CatalogReport(bet=simulator.bet)
    previous: Optional[int] = None

    for record in records:
        actual = simulator.total_win(record.seed)
        if actual != record.win:
            if strict:
                raise CatalogMismatchError(record.seed, record.win, actual)
            report.mismatches.append((record.seed, record.win, actual))
            logger.warning(f"Seed {record.seed}: catalog win={record.win}, replay win={actual}")

        if previous is not None and record.seed <= previous:
            report.seeds_increasing = False
        previous = record.seed

        report.count += 1
        report.total_win += record.win
        report.win_counts[record.win] = report.win_counts.get(record.win, 0) + 1

    return report
