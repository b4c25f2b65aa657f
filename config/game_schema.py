"""
CHAIN LIGHTNING — Game Configuration Schema

Pydantic models for everything the round simulator and the seed curator
read: grid size, symbol weights, wild probability, strike count, length
multipliers, wild-mode rules, paytable, bet, and curation targets.

Accepts both the model's own field names and the legacy game JSON
(`wildProb`, `lightning.strikesPerSpin`, `wildMode.minWilds`, ...).

Usage:
    from config.game_schema import GameConfig, default_game_config
    cfg = GameConfig.load("config.json")
    cfg = default_game_config()
    json_str = cfg.model_dump_json(indent=2)
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from sim_engine.lightning.errors import ConfigError
from sim_engine.lightning.sampler import quantized_count

logger = logging.getLogger("chainlightning.config")

PAYTABLE_COLUMNS = 6


# ═══════════════════════════════════════════════════════════════
# Sub-Models
# ═══════════════════════════════════════════════════════════════

class GridConfig(BaseModel):
    rows: int = Field(5, gt=0)
    cols: int = Field(6, gt=0)


class SymbolConfig(BaseModel):
    """Symbol weights indexed by code; index 0 is the wild and carries no weight."""
    names: list[str] = Field(default_factory=list)
    weights: list[float] = Field(
        default_factory=lambda: [0, 7.0, 9.0, 11.0, 15.0, 17.0, 19.0, 22.0, 24.0, 26.0]
    )
    wild_prob: float = Field(0.0179, ge=0.0, lt=1.0)
    wild_symbol: int = 0

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v):
        if len(v) < 2:
            raise ValueError("weights need index 0 (wild) plus at least one symbol")
        if any(w < 0 for w in v):
            raise ValueError("weights must be non-negative")
        if not any(quantized_count(w) > 0 for w in v[1:]):
            raise ValueError("every symbol weight rounds to zero")
        return v

    @field_validator("wild_symbol")
    @classmethod
    def check_wild_symbol(cls, v):
        if v != 0:
            raise ValueError("the wild must use symbol code 0")
        return v

    @property
    def symbol_count(self) -> int:
        return len(self.weights) - 1


class LightningConfig(BaseModel):
    """Strike resolution and chain-length multipliers."""
    strikes_per_spin: int = Field(3, ge=0)
    multipliers: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
    max_start_attempts: int = Field(30, gt=0)

    @field_validator("multipliers")
    @classmethod
    def check_multipliers(cls, v):
        if not v:
            raise ValueError("multiplier table is empty")
        return v


class WildModeConfig(BaseModel):
    min_wilds: int = Field(3, ge=1)
    multiplier: int = Field(5, ge=1)


def _default_paytable() -> dict[int, list[int]]:
    return {
        1: [15, 40, 100, 200, 600, 1500],
        2: [12, 30, 80, 150, 400, 1000],
        3: [10, 25, 60, 120, 300, 750],
        4: [8, 20, 50, 100, 250, 600],
        5: [6, 15, 40, 80, 200, 500],
        6: [5, 12, 30, 60, 150, 400],
        7: [4, 10, 25, 50, 120, 300],
        8: [3, 8, 20, 40, 100, 250],
        9: [2, 6, 15, 30, 80, 200],
    }


# ═══════════════════════════════════════════════════════════════
# Main Config Models
# ═══════════════════════════════════════════════════════════════

class GameConfig(BaseModel):
    """Complete math configuration for one Chain Lightning game."""
    grid: GridConfig = Field(default_factory=GridConfig)
    symbols: SymbolConfig = Field(default_factory=SymbolConfig)
    lightning: LightningConfig = Field(default_factory=LightningConfig)
    wild_mode: WildModeConfig = Field(default_factory=WildModeConfig)
    paytable: dict[int, list[int]] = Field(default_factory=_default_paytable)
    bet: int = Field(100, gt=0)
    config_hash: str = ""                          # SHA-256 of the math for audit

    @model_validator(mode="after")
    def check_paytable(self):
        if not self.paytable:
            raise ValueError("paytable is empty")
        n = self.symbols.symbol_count
        for symbol, pays in self.paytable.items():
            if not 1 <= symbol <= n:
                raise ValueError(f"paytable symbol {symbol} outside 1..{n}")
            if len(pays) != PAYTABLE_COLUMNS:
                raise ValueError(
                    f"paytable row for symbol {symbol} has {len(pays)} entries, "
                    f"expected {PAYTABLE_COLUMNS}"
                )
            if any(p < 0 for p in pays):
                raise ValueError(f"paytable row for symbol {symbol} has a negative pay")
        return self

    def model_post_init(self, __context):
        math_json = self.model_dump_json(exclude={"config_hash": True, "symbols": {"names": True}})
        self.config_hash = hashlib.sha256(math_json.encode()).hexdigest()[:16]

    # ── Loading ───────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict) -> "GameConfig":
        """Build from either schema; raises ConfigError on bad input."""
        try:
            return cls.model_validate(_normalize_legacy(data))
        except ValidationError as e:
            raise ConfigError(f"Invalid game config: {e}") from e

    @classmethod
    def load(cls, path) -> "GameConfig":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read game config {path}: {e}") from e
        cfg = cls.from_dict(data)
        logger.info(f"Loaded game config {path} (hash={cfg.config_hash})")
        return cfg


class CuratorConfig(BaseModel):
    """RTP-targeted seed catalog parameters."""
    count: int = Field(10000, gt=0)
    target_rtp: float = Field(96.5, gt=0)
    max_win_pct: float = Field(0.01, gt=0.0, le=1.0)   # per-win-value frequency cap
    near_target: float = Field(1.0, ge=0.0)            # |rtp - target| window for the band rule
    band_width: float = Field(50.0, ge=0.0)            # accept target ± band_width inside the window
    base_seed: Optional[int] = Field(None, ge=0)
    max_scanned: Optional[int] = Field(None, gt=0)     # scan ceiling; None → count * scan_factor
    scan_factor: int = Field(2000, gt=0)

    @property
    def max_win_count(self) -> int:
        return int(self.count * self.max_win_pct)

    @property
    def scan_limit(self) -> int:
        return self.max_scanned if self.max_scanned is not None else self.count * self.scan_factor


# ═══════════════════════════════════════════════════════════════
# Legacy JSON
# ═══════════════════════════════════════════════════════════════

def _normalize_legacy(data: dict) -> dict:
    """Map the legacy camelCase game JSON onto GameConfig field names."""
    data = dict(data)
    symbols = dict(data.get("symbols", {}))
    lightning = dict(data.get("lightning", {}))

    if "wildProb" in data:
        symbols["wild_prob"] = data.pop("wildProb")
    if "wildProb" in lightning:
        symbols["wild_prob"] = lightning.pop("wildProb")
    if "wildSymbol" in data:
        symbols["wild_symbol"] = data.pop("wildSymbol")
    if "strikesPerSpin" in lightning:
        lightning["strikes_per_spin"] = lightning.pop("strikesPerSpin")
    if "wildMode" in data:
        wm = dict(data.pop("wildMode"))
        data["wild_mode"] = {
            "min_wilds": wm.get("minWilds", wm.get("min_wilds", 3)),
            "multiplier": wm.get("multiplier", 5),
        }

    # server/web sections belong to the HTTP layer
    data.pop("server", None)
    if symbols:
        data["symbols"] = symbols
    if lightning:
        data["lightning"] = lightning
    return data


def default_game_config() -> GameConfig:
    """The reference 5×6 game the catalogs are built for."""
    return GameConfig()


# ═══════════════════════════════════════════════════════════════
# Validation / Audit
# ═══════════════════════════════════════════════════════════════

def validate_config(config: GameConfig, curator: Optional[CuratorConfig] = None) -> list[str]:
    """Run sanity checks and return a list of non-fatal warnings."""
    warnings = []

    weights = config.symbols.weights
    for symbol in range(1, len(weights)):
        if quantized_count(weights[symbol]) == 0:
            warnings.append(f"Symbol {symbol} rounds to zero weight and never lands")
        if symbol not in config.paytable:
            warnings.append(f"Symbol {symbol} has no paytable row and never pays")

    if config.wild_mode.min_wilds > config.grid.rows * config.grid.cols:
        warnings.append(
            f"Wild mode needs {config.wild_mode.min_wilds} wilds but the grid has "
            f"{config.grid.rows * config.grid.cols} cells"
        )
    if config.lightning.strikes_per_spin == 0:
        warnings.append("strikes_per_spin is 0, so base mode never pays")

    if config.bet != 100:
        warnings.append(
            f"Bet {config.bet} differs from 100: the curator compares raw wins "
            f"against RTP percent, which only line up at bet 100"
        )

    if curator is not None:
        if curator.max_win_count == 0:
            warnings.append(
                f"Frequency cap floor({curator.count} × {curator.max_win_pct}) is 0; "
                f"no round can ever be accepted"
            )
        if curator.target_rtp > 200:
            warnings.append(f"Target RTP {curator.target_rtp}% is unusually high")

    return warnings


if __name__ == "__main__":
    import sys

    cfg = GameConfig.load(sys.argv[1]) if len(sys.argv) > 1 else default_game_config()
    warnings = validate_config(cfg, CuratorConfig())

    print(cfg.model_dump_json(indent=2))
    if warnings:
        print("\n⚠️  Warnings:")
        for w in warnings:
            print(f"  - {w}")
    else:
        print(f"\n✅ Config valid | hash={cfg.config_hash}")
