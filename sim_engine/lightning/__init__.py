"""
CHAIN LIGHTNING — Math Engine

Deterministic 5×6 chain-lightning slot rounds driven by a java.util.Random
compatible PRNG, so any stored seed replays to the same grid and win.
Chains are resolved by one of two interchangeable tracing policies.

Usage:
    from config.game_schema import default_game_config
    from sim_engine.lightning import build_simulator
    sim = build_simulator(default_game_config(), policy="cloud")
    result = sim.play(seed=1718000000)
    print(result.total_win, result.wild_mode)
"""

from sim_engine.lightning.base import Chain, ChainTracer
from sim_engine.lightning.cloud import CloudTracer
from sim_engine.lightning.longest import LongestPathTracer
from sim_engine.lightning.round import RoundResult, RoundSimulator

TRACERS = {
    "cloud": CloudTracer,
    "longest": LongestPathTracer,
}

POLICY_ALIASES = {
    "bfs": "cloud",
    "dfs": "longest",
}

POLICIES = list(TRACERS.keys())


def normalize_policy(policy: str) -> str:
    key = policy.lower()
    return POLICY_ALIASES.get(key, key)


def get_tracer(policy: str) -> ChainTracer:
    """Get the chain tracer for a policy name (cloud/longest, or bfs/dfs)."""
    cls = TRACERS.get(normalize_policy(policy))
    if cls is None:
        raise ValueError(f"Unknown tracing policy: {policy}. Available: {POLICIES}")
    return cls()


def build_simulator(config, policy: str = "cloud") -> RoundSimulator:
    return RoundSimulator.from_config(config, get_tracer(policy))
