#!/usr/bin/env python3
"""
Tests for the Seed Curator, Seed Catalog and Monte Carlo statistics

Validates:
1. Accept/reject rules (first round, pull-up, pull-down, near-target band)
2. Frequency cap is never exceeded and a zero cap is refused up front
3. Same config + policy + base seed → identical catalog
4. Catalog size, strictly increasing seeds, replay reproduces every win
5. Scan ceiling raises NonConvergenceError with the partial catalog
6. save_catalog / load_catalog / verify_catalog
7. run_simulation totals agree with per-seed replays
"""

import json
import os
import sys
import tempfile
from pathlib import Path

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from config.game_schema import CuratorConfig, default_game_config
from sim_engine.lightning import build_simulator
from sim_engine.lightning.errors import CatalogMismatchError, ConfigError, NonConvergenceError
from tools.chain_montecarlo import (
    _analyze_streaks, _win_distribution, chi_squared_uniformity, run_simulation,
)
from tools.seed_catalog import SeedRecord, load_catalog, replay_seed, save_catalog, verify_catalog
from tools.seed_curator import CuratorState, SeedCurator


class StubSimulator:
    """Fixed seed → win table; unknown seeds win nothing."""
    bet = 100

    def __init__(self, wins=None):
        self.wins = dict(wins or {})

    def total_win(self, seed):
        return self.wins.get(seed, 0)


def _curator(**overrides):
    cfg = {"count": 100, "max_win_pct": 0.5, "base_seed": 0}
    cfg.update(overrides)
    return SeedCurator(StubSimulator(), CuratorConfig(**cfg))


def _small_catalog(policy="cloud", base_seed=1000):
    sim = build_simulator(default_game_config(), policy)
    cfg = CuratorConfig(count=20, max_win_pct=0.25, base_seed=base_seed)
    return sim, SeedCurator(sim, cfg).run()


# ============================================================
# Accept / reject rules
# ============================================================

def test_first_round_always_accepted():
    curator = _curator()
    assert curator.decide(0) is CuratorState.ACCEPTED
    assert curator.decide(5000) is CuratorState.ACCEPTED


def test_below_target_takes_bigger_wins():
    curator = _curator()
    assert curator.offer(0, 50) is CuratorState.ACCEPTED
    assert curator.current_rtp() == 50.0
    assert curator.decide(60) is CuratorState.ACCEPTED
    assert curator.decide(40) is CuratorState.REJECTED_BALANCE


def test_above_target_takes_smaller_wins():
    curator = _curator()
    curator.offer(0, 300)
    assert curator.decide(100) is CuratorState.ACCEPTED
    assert curator.decide(0) is CuratorState.ACCEPTED
    assert curator.decide(400) is CuratorState.REJECTED_BALANCE


def test_near_target_band():
    curator = _curator(target_rtp=100)
    curator.offer(0, 100)
    assert curator.current_rtp() == 100.0
    assert curator.decide(150) is CuratorState.ACCEPTED
    assert curator.decide(50) is CuratorState.ACCEPTED
    assert curator.decide(151) is CuratorState.REJECTED_BALANCE
    assert curator.decide(49) is CuratorState.REJECTED_BALANCE


def test_frequency_cap_rejects_before_balance():
    curator = _curator(count=10, max_win_pct=0.2, target_rtp=100)
    assert curator.config.max_win_count == 2
    assert curator.offer(0, 100) is CuratorState.ACCEPTED
    assert curator.offer(1, 100) is CuratorState.ACCEPTED
    assert curator.offer(2, 100) is CuratorState.REJECTED_CAP
    assert curator.rejected_cap == 1
    assert len(curator.records) == 2


def test_zero_cap_is_config_error():
    with pytest.raises(ConfigError):
        SeedCurator(StubSimulator(), CuratorConfig(count=10, max_win_pct=0.01, base_seed=0))


def test_step_walks_consecutive_seeds():
    sim = StubSimulator({7: 45, 8: 0, 9: 225})
    curator = SeedCurator(sim, CuratorConfig(count=100, max_win_pct=0.5, base_seed=7))
    assert curator.step() is CuratorState.ACCEPTED
    assert curator.step() is CuratorState.REJECTED_BALANCE
    assert curator.step() is CuratorState.ACCEPTED
    assert [r.seed for r in curator.records] == [7, 9]
    assert curator.offset == 3


def test_base_seed_defaults_to_clock():
    curator = SeedCurator(StubSimulator(), CuratorConfig(count=100, max_win_pct=0.5))
    assert curator.base_seed > 1_600_000_000


# ============================================================
# Full runs
# ============================================================

def test_catalog_size_order_and_replay():
    sim, result = _small_catalog()
    seeds = [r.seed for r in result.records]
    assert len(result.records) == 20
    assert seeds == sorted(set(seeds))
    assert seeds[0] >= 1000
    assert result.scanned >= 20
    for record in result.records:
        assert sim.total_win(record.seed) == record.win


def test_hundred_record_catalog():
    sim = build_simulator(default_game_config(), "cloud")
    cfg = CuratorConfig(count=100, max_win_pct=0.1, base_seed=1718000000)
    result = SeedCurator(sim, cfg).run()
    seeds = [r.seed for r in result.records]
    assert len(seeds) == 100
    assert all(b > a for a, b in zip(seeds, seeds[1:]))
    assert max(result.win_counts.values()) <= 10


def test_frequency_cap_holds():
    _, result = _small_catalog()
    cap = int(20 * 0.25)
    counts = {}
    for r in result.records:
        counts[r.win] = counts.get(r.win, 0) + 1
    assert counts == result.win_counts
    assert max(counts.values()) <= cap


def test_same_inputs_same_catalog():
    _, a = _small_catalog(base_seed=555)
    _, b = _small_catalog(base_seed=555)
    assert a.records == b.records
    assert a.scanned == b.scanned


def test_longest_policy_curates():
    sim, result = _small_catalog(policy="dfs", base_seed=42)
    assert len(result.records) == 20
    assert verify_catalog(result.records, sim).ok


def test_progress_callback_every_five_percent():
    sim = build_simulator(default_game_config(), "cloud")
    calls = []
    SeedCurator(sim, CuratorConfig(count=20, max_win_pct=0.25, base_seed=1000)).run(
        on_progress=lambda accepted, count, rtp, scanned: calls.append(accepted)
    )
    assert calls == list(range(1, 21))


def test_scan_ceiling_raises():
    sim = build_simulator(default_game_config(), "cloud")
    cfg = CuratorConfig(count=1000, max_win_pct=0.01, base_seed=0, max_scanned=50)
    with pytest.raises(NonConvergenceError) as exc:
        SeedCurator(sim, cfg).run()
    err = exc.value
    assert err.scanned == 50
    assert 0 < err.accepted < 1000
    assert len(err.records) == err.accepted


def test_result_dict_and_summary():
    _, result = _small_catalog()
    d = result.to_dict()
    assert d["count"] == 20
    assert d["base_seed"] == 1000
    assert d["rtp_pct"] == round(result.rtp, 4)
    assert "Final RTP" in result.summary()
    json.dumps(d)


# ============================================================
# Catalog persistence and verification
# ============================================================

def test_save_and_load_catalog():
    records = [SeedRecord(seed=10, win=0), SeedRecord(seed=12, win=225)]
    with tempfile.TemporaryDirectory() as tmp:
        path = save_catalog(records, os.path.join(tmp, "out", "seeds.json"))
        raw = json.loads(path.read_text())
        assert raw == [{"seed": 10, "win": 0}, {"seed": 12, "win": 225}]
        assert load_catalog(path) == records


def test_load_catalog_rejects_garbage():
    with tempfile.TemporaryDirectory() as tmp:
        bad = Path(tmp) / "bad.json"
        bad.write_text("{not json")
        with pytest.raises(ConfigError):
            load_catalog(bad)
        bad.write_text(json.dumps({"seed": 1}))
        with pytest.raises(ConfigError):
            load_catalog(bad)
        bad.write_text(json.dumps([{"seed": 1}]))
        with pytest.raises(ConfigError):
            load_catalog(bad)


def test_verify_curated_catalog_passes():
    sim, result = _small_catalog()
    report = verify_catalog(result.records, sim)
    assert report.ok
    assert report.count == 20
    assert report.mismatches == []
    assert abs(report.rtp - result.rtp) < 1e-9
    win, n = report.most_common
    assert n == max(result.win_counts.values())
    assert result.win_counts[win] == n


def test_verify_flags_tampered_win():
    sim, result = _small_catalog()
    records = list(result.records)
    first = records[0]
    records[0] = SeedRecord(seed=first.seed, win=first.win + 1)

    report = verify_catalog(records, sim)
    assert not report.ok
    assert report.mismatches == [(first.seed, first.win + 1, first.win)]

    with pytest.raises(CatalogMismatchError) as exc:
        verify_catalog(records, sim, strict=True)
    assert exc.value.seed == first.seed
    assert exc.value.actual == first.win


def test_verify_flags_unordered_seeds():
    sim, result = _small_catalog()
    report = verify_catalog(list(reversed(result.records)), sim)
    assert report.mismatches == []
    assert not report.seeds_increasing
    assert not report.ok


def test_replay_seed_matches_record():
    sim, result = _small_catalog()
    record = result.records[-1]
    round_result = replay_seed(record.seed, sim)
    assert round_result.seed == record.seed
    assert round_result.total_win == record.win


# ============================================================
# Monte Carlo statistics
# ============================================================

def test_simulation_totals_match_replays():
    sim = build_simulator(default_game_config(), "cloud")
    stats = run_simulation(sim, rounds=2000, base_seed=0, log_interval=500,
                           uniformity_samples=10_000)
    wins = [sim.total_win(seed) for seed in range(2000)]

    assert stats.rounds == 2000
    assert stats.total_wagered == 2000 * 100
    assert stats.total_won == sum(wins)
    assert stats.max_win == max(wins)
    assert stats.hits == sum(1 for w in wins if w > 0)
    assert stats.base_won + stats.wild_mode_won == stats.total_won
    assert [p.round for p in stats.trace] == [500, 1000, 1500, 2000]
    assert abs(stats.rtp - sum(wins) / 2000) < 1e-9


def test_simulation_report_outputs():
    sim = build_simulator(default_game_config(), "cloud")
    stats = run_simulation(sim, rounds=300, base_seed=7, log_interval=100,
                           symbol_names=["Wild", "Diamond"], uniformity_samples=0)
    d = json.loads(stats.to_json())
    assert d["rounds"] == 300
    assert d["policy"] == "cloud"
    assert sum(d["distribution"].values()) == pytest.approx(100.0, abs=0.1)
    assert "CHAIN LIGHTNING" in stats.summary()
    assert stats.trace_csv().splitlines()[0] == "Round,RTP%,HitRate%,WildModeFreq%,Sigma"
    assert len(stats.trace_csv().splitlines()) == 4
    assert stats.symbol_name(1) == "Diamond"
    assert stats.symbol_name(5) == "Symbol5"


def test_win_buckets_in_bets():
    # bet 100: edges fall at 100, 200, 500, 1000, 5000, 10000
    wins = [0, 0, 99, 100, 199, 200, 499, 500, 999, 1000, 4999, 5000, 9999, 10000, 25000, 0]
    dist = _win_distribution(wins, bet=100)
    assert list(dist) == ["0x", "0-1x", "1-2x", "2-5x", "5-10x", "10-50x", "50-100x", "100x+"]
    assert dist["0x"] == 18.75
    assert dist["0-1x"] == 6.25
    assert dist["1-2x"] == 12.5
    assert dist["100x+"] == 12.5
    assert _win_distribution([50], bet=50) == {**{k: 0.0 for k in dist}, "1-2x": 100.0}
    assert set(_win_distribution([], bet=100).values()) == {0}


def test_streaks():
    assert _analyze_streaks([]) == {}
    streaks = _analyze_streaks([0, 45, 90, 0, 0, 0, 225, 0])
    assert streaks == {
        "max_win_streak": 2,
        "max_loss_streak": 3,
        "total_wins": 3,
        "total_losses": 5,
    }


def test_prng_uniformity():
    chi2, passed = chi_squared_uniformity(seed=12345, n_samples=50_000)
    assert 0 < chi2 < 200
    assert passed == (chi2 < 135.8)


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
