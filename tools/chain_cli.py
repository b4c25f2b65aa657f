#!/usr/bin/env python3
"""
CHAIN LIGHTNING — Command Line

Usage:
    python -m tools.chain_cli curate 10000 cloud cl-seeds-balanced.json
    python -m tools.chain_cli curate 5000 dfs --base-seed 1718000000
    python -m tools.chain_cli simulate --rounds 1000000 --policy longest
    python -m tools.chain_cli verify cl-seeds-balanced.json --policy cloud
    python -m tools.chain_cli replay 1718000042
    python -m tools.chain_cli --config config.json config

The global --config path.json option (before the command) takes legacy game
JSON or the schema's own field names.

Exit codes: 0 ok, 1 bad policy or config, 3 curation did not converge,
4 catalog verification failed.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.game_schema import CuratorConfig, GameConfig, default_game_config, validate_config
from config.settings import LOG_LEVEL, OUTPUT_DIR, CurationDefaults
from sim_engine.lightning import POLICIES, build_simulator, normalize_policy
from sim_engine.lightning.errors import ConfigError, NonConvergenceError
from tools.chain_montecarlo import run_simulation
from tools.seed_catalog import load_catalog, replay_seed, save_catalog, verify_catalog
from tools.seed_curator import SeedCurator

logger = logging.getLogger("chainlightning.cli")
console = Console()

EXIT_OK = 0
EXIT_BAD_INPUT = 1
EXIT_NO_CONVERGENCE = 3
EXIT_VERIFY_FAILED = 4

POLICY_HELP = "cloud|longest (aliases: bfs|dfs)"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chain Lightning math engine and seed curator")
    parser.add_argument("--config", type=str, default=None, help="Game config JSON")
    parser.add_argument("--log-level", type=str, default=LOG_LEVEL)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("curate", help="Build an RTP-balanced seed catalog")
    p.add_argument("count", type=int, nargs="?", default=CurationDefaults.COUNT)
    p.add_argument("policy", type=str, nargs="?", default=CurationDefaults.POLICY, help=POLICY_HELP)
    p.add_argument("output", type=str, nargs="?", default=CurationDefaults.OUTPUT_FILE)
    p.add_argument("--target-rtp", type=float, default=CurationDefaults.TARGET_RTP)
    p.add_argument("--max-win-pct", type=float, default=CurationDefaults.MAX_WIN_PCT)
    p.add_argument("--base-seed", type=int, default=CurationDefaults.BASE_SEED)
    p.add_argument("--max-scanned", type=int, default=None)

    p = sub.add_parser("simulate", help="Monte Carlo statistics over consecutive seeds")
    p.add_argument("--rounds", type=int, default=1_000_000)
    p.add_argument("--policy", type=str, default=CurationDefaults.POLICY, help=POLICY_HELP)
    p.add_argument("--base-seed", type=int, default=0)
    p.add_argument("--log", type=int, default=100_000, help="Snapshot interval")
    p.add_argument("--output-dir", type=str, default=None)

    p = sub.add_parser("verify", help="Replay every seed of a catalog")
    p.add_argument("catalog", type=str)
    p.add_argument("--policy", type=str, default=CurationDefaults.POLICY, help=POLICY_HELP)

    p = sub.add_parser("replay", help="Show the full round for one seed")
    p.add_argument("seed", type=int)
    p.add_argument("--policy", type=str, default=CurationDefaults.POLICY, help=POLICY_HELP)

    sub.add_parser("config", help="Print the resolved game config and warnings")
    return parser


def _load_game(path):
    return GameConfig.load(path) if path else default_game_config()


def _check_policy(policy: str) -> bool:
    if normalize_policy(policy) in POLICIES:
        return True
    console.print(f"[red]❌ Unknown policy '{policy}'. Use {POLICY_HELP}.[/red]")
    console.print("Usage: chain_cli curate <count> <cloud|longest|bfs|dfs> [output.json]")
    return False


# ═══════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════

def cmd_curate(args, game: GameConfig) -> int:
    if not _check_policy(args.policy):
        return EXIT_BAD_INPUT

    curator_cfg = CuratorConfig(**{
        **CurationDefaults.curator_kwargs(),
        "count": args.count,
        "target_rtp": args.target_rtp,
        "max_win_pct": args.max_win_pct,
        "base_seed": args.base_seed,
        "max_scanned": args.max_scanned,
    })
    for w in validate_config(game, curator_cfg):
        console.print(f"[yellow]⚠️ {w}[/yellow]")

    simulator = build_simulator(game, args.policy)
    curator = SeedCurator(simulator, curator_cfg)

    console.print(Panel(
        f"[bold]⚡ Seed Curator[/bold]\n\n"
        f"Policy: {simulator.tracer.display_name}\n"
        f"Target: {curator_cfg.count:,} seeds\n"
        f"Target RTP: {curator_cfg.target_rtp}%\n"
        f"Cap per win: {curator_cfg.max_win_count:,}\n"
        f"Base seed: {curator.base_seed}",
        title="Curation Starting", border_style="cyan",
    ))

    def _progress(accepted, count, rtp, scanned):
        console.print(f"  {accepted * 100 // count:3d}%  RTP {rtp:6.2f}%  seeds tested {scanned:,}")

    try:
        result = curator.run(on_progress=_progress)
    except NonConvergenceError as e:
        console.print(f"[red]❌ {e}[/red]")
        return EXIT_NO_CONVERGENCE

    save_catalog(result.records, args.output)
    console.print(f"[green]✅ Saved {len(result.records):,} seeds to {args.output}[/green]")
    console.print(result.summary())
    return EXIT_OK


def cmd_simulate(args, game: GameConfig) -> int:
    if not _check_policy(args.policy):
        return EXIT_BAD_INPUT

    simulator = build_simulator(game, args.policy)
    console.print(f"[cyan]Running {args.rounds:,}-round simulation "
                  f"({simulator.tracer.display_name})...[/cyan]")

    def _progress(done, total, rtp):
        console.print(f"  Progress: {done:,} / {total:,} ({done / total * 100:.1f}%) - RTP: {rtp:.2f}%")

    stats = run_simulation(
        simulator, rounds=args.rounds, base_seed=args.base_seed,
        log_interval=args.log, symbol_names=game.symbols.names, on_progress=_progress,
    )
    console.print(stats.summary())

    out_dir = Path(args.output_dir) if args.output_dir else OUTPUT_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = f"{args.base_seed}_chain_lightning"
    (out_dir / f"{stem}_out.json").write_text(stats.to_json(), encoding="utf-8")
    (out_dir / f"{stem}_log.csv").write_text(stats.trace_csv(), encoding="utf-8")
    console.print(f"[green]✅ Results written to {out_dir}[/green]")
    return EXIT_OK


def cmd_verify(args, game: GameConfig) -> int:
    if not _check_policy(args.policy):
        return EXIT_BAD_INPUT

    simulator = build_simulator(game, args.policy)
    records = load_catalog(args.catalog)
    report = verify_catalog(records, simulator)
    console.print(report.summary())

    if report.mismatches:
        table = Table(title="Mismatches")
        table.add_column("Seed", style="cyan")
        table.add_column("Catalog")
        table.add_column("Replay")
        for seed, expected, actual in report.mismatches[:20]:
            table.add_row(str(seed), str(expected), f"[red]{actual}[/red]")
        console.print(table)
    return EXIT_OK if report.ok else EXIT_VERIFY_FAILED


def cmd_replay(args, game: GameConfig) -> int:
    if not _check_policy(args.policy):
        return EXIT_BAD_INPUT

    result = replay_seed(args.seed, build_simulator(game, args.policy))
    grid_text = "\n".join(" ".join(f"{s:2d}" for s in row) for row in result.grid.to_list())
    console.print(Panel(grid_text, title=f"Seed {args.seed}", border_style="cyan"))
    console.print(json.dumps(result.to_dict(), indent=2))
    return EXIT_OK


def cmd_config(args, game: GameConfig) -> int:
    console.print(game.model_dump_json(indent=2))
    warnings = validate_config(game, CuratorConfig(**CurationDefaults.curator_kwargs()))
    if warnings:
        console.print("\n⚠️  Warnings:")
        for w in warnings:
            console.print(f"  - {w}")
    else:
        console.print(f"\n✅ Config valid | hash={game.config_hash}")
    return EXIT_OK


COMMANDS = {
    "curate": cmd_curate,
    "simulate": cmd_simulate,
    "verify": cmd_verify,
    "replay": cmd_replay,
    "config": cmd_config,
}


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        game = _load_game(args.config)
        return COMMANDS[args.command](args, game)
    except (ConfigError, ValidationError) as e:
        logger.error(f"{e}")
        console.print(f"[red]❌ {e}[/red]")
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
