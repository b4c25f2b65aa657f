"""
Chain Lightning - Environment Settings

Process-level defaults read from the environment (and a local .env file).
Game math lives in config/game_schema.py; this module only holds knobs an
operator changes between runs without editing a game config.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "./output"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def _env_int(name: str, default=None):
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


class CurationDefaults:

    # --- RTP targeting ---
    TARGET_RTP   = float(os.getenv("CL_TARGET_RTP", "96.5"))
    MAX_WIN_PCT  = float(os.getenv("CL_MAX_WIN_PCT", "0.01"))   # 1% per win value
    NEAR_TARGET  = float(os.getenv("CL_NEAR_TARGET", "1.0"))
    BAND_WIDTH   = float(os.getenv("CL_BAND_WIDTH", "50"))

    # --- Seed stream ---
    # None → current unix time, as the live catalog builder always did
    BASE_SEED    = _env_int("CL_BASE_SEED")

    # --- Hardening ---
    # Scan ceiling = count × factor; the curator raises instead of looping forever
    SCAN_FACTOR  = _env_int("CL_MAX_SCANNED_FACTOR", 2000)

    # --- Defaults for the command line ---
    COUNT        = _env_int("CL_COUNT", 10000)
    POLICY       = os.getenv("CL_POLICY", "cloud")
    OUTPUT_FILE  = os.getenv("CL_OUTPUT_FILE", "cl-seeds-balanced.json")

    @classmethod
    def curator_kwargs(cls) -> dict:
        """Keyword arguments for config.game_schema.CuratorConfig."""
        return {
            "target_rtp": cls.TARGET_RTP,
            "max_win_pct": cls.MAX_WIN_PCT,
            "near_target": cls.NEAR_TARGET,
            "band_width": cls.BAND_WIDTH,
            "base_seed": cls.BASE_SEED,
            "scan_factor": cls.SCAN_FACTOR,
        }
