#!/usr/bin/env python3
"""
Tests for the chain_cli command line

Validates:
1. Unknown tracing policy → exit 1, nothing written
2. curate writes a loadable catalog (aliases bfs/dfs accepted)
3. verify → 0 on a clean catalog, 4 after tampering
4. Scan ceiling → exit 3
5. Bad config / impossible cap → exit 1
6. simulate, replay and config commands run end to end
"""

import json
import sys
import tempfile
from pathlib import Path

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from tools.chain_cli import (
    EXIT_BAD_INPUT, EXIT_NO_CONVERGENCE, EXIT_OK, EXIT_VERIFY_FAILED, main,
)
from tools.seed_catalog import load_catalog


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


def _curate(out: Path, policy="bfs", count="20"):
    return main(["curate", count, policy, str(out),
                 "--max-win-pct", "0.25", "--base-seed", "1000"])


def test_unknown_policy_exits_1(tmp_dir, capsys):
    out = tmp_dir / "seeds.json"
    assert main(["curate", "10", "zigzag", str(out)]) == EXIT_BAD_INPUT
    assert not out.exists()
    assert "Unknown policy" in capsys.readouterr().out


def test_unknown_policy_on_every_command(tmp_dir):
    assert main(["simulate", "--rounds", "10", "--policy", "spiral"]) == EXIT_BAD_INPUT
    assert main(["replay", "1", "--policy", "spiral"]) == EXIT_BAD_INPUT
    assert main(["verify", str(tmp_dir / "x.json"), "--policy", "spiral"]) == EXIT_BAD_INPUT


def test_curate_writes_catalog(tmp_dir):
    out = tmp_dir / "seeds.json"
    assert _curate(out) == EXIT_OK
    records = load_catalog(out)
    assert len(records) == 20
    assert [r.seed for r in records] == sorted(r.seed for r in records)


def test_curate_longest_alias(tmp_dir):
    out = tmp_dir / "dfs.json"
    assert _curate(out, policy="dfs") == EXIT_OK
    assert len(load_catalog(out)) == 20


def test_verify_clean_and_tampered(tmp_dir):
    out = tmp_dir / "seeds.json"
    assert _curate(out) == EXIT_OK
    assert main(["verify", str(out), "--policy", "cloud"]) == EXIT_OK

    rows = json.loads(out.read_text())
    rows[3]["win"] += 7
    out.write_text(json.dumps(rows))
    assert main(["verify", str(out), "--policy", "cloud"]) == EXIT_VERIFY_FAILED


def test_verify_missing_catalog(tmp_dir):
    assert main(["verify", str(tmp_dir / "missing.json")]) == EXIT_BAD_INPUT


def test_scan_ceiling_exits_3(tmp_dir):
    out = tmp_dir / "seeds.json"
    code = main(["curate", "1000", "cloud", str(out),
                 "--base-seed", "0", "--max-scanned", "50"])
    assert code == EXIT_NO_CONVERGENCE
    assert not out.exists()


def test_zero_cap_exits_1(tmp_dir):
    out = tmp_dir / "seeds.json"
    code = main(["curate", "10", "cloud", str(out),
                 "--max-win-pct", "0.01", "--base-seed", "0"])
    assert code == EXIT_BAD_INPUT


def test_invalid_count_exits_1(tmp_dir):
    assert main(["curate", "0", "cloud", str(tmp_dir / "s.json")]) == EXIT_BAD_INPUT


def test_bad_game_config_exits_1(tmp_dir):
    cfg = tmp_dir / "game.json"
    cfg.write_text(json.dumps({"paytable": {"1": [1, 2]}}))
    assert main(["--config", str(cfg), "config"]) == EXIT_BAD_INPUT


def test_legacy_game_config_used(tmp_dir, capsys):
    cfg = tmp_dir / "game.json"
    cfg.write_text(json.dumps({"wildProb": 0.05, "lightning": {"strikesPerSpin": 2}}))
    assert main(["--config", str(cfg), "config"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "0.05" in out
    assert "strikes_per_spin" in out


def test_simulate_writes_reports(tmp_dir):
    code = main(["simulate", "--rounds", "200", "--log", "100",
                 "--base-seed", "3", "--output-dir", str(tmp_dir)])
    assert code == EXIT_OK
    report = json.loads((tmp_dir / "3_chain_lightning_out.json").read_text())
    assert report["rounds"] == 200
    csv_lines = (tmp_dir / "3_chain_lightning_log.csv").read_text().splitlines()
    assert len(csv_lines) == 3


def test_replay_prints_round(capsys):
    assert main(["replay", "1718000000", "--policy", "longest"]) == EXIT_OK
    assert "totalWin" in capsys.readouterr().out


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
