"""Runtime settings resolved from the environment.

Environment-first, with defaults that still work when installed as a package
or executed from arbitrary CWDs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from .policy import Difficulty

DEFAULT_AI_DELAY_MS = 700
DEFAULT_DIFFICULTY = Difficulty.HARD


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def data_dir() -> Path:
    p = os.getenv("NOUGHTS_DATA_DIR")
    return Path(p) if p else Path.cwd() / "data_raw"


@dataclass(frozen=True)
class Settings:
    ai_delay_ms: int = DEFAULT_AI_DELAY_MS
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    seed: Optional[int] = None
    data_dir: Path = Path("data_raw")

    @property
    def ai_delay_s(self) -> float:
        return self.ai_delay_ms / 1000.0

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)


def load_settings() -> Settings:
    """Order: NOUGHTS_* env vars -> built-in defaults."""
    delay = _env_int("NOUGHTS_AI_DELAY_MS")
    if delay is not None and delay < 0:
        raise ValueError(f"NOUGHTS_AI_DELAY_MS must be >= 0, got {delay}")
    raw_difficulty = os.getenv("NOUGHTS_DIFFICULTY")
    difficulty = DEFAULT_DIFFICULTY
    if raw_difficulty:
        try:
            difficulty = Difficulty.parse(raw_difficulty)
        except ValueError as exc:
            raise ValueError(f"NOUGHTS_DIFFICULTY: {exc}") from None
    return Settings(
        ai_delay_ms=DEFAULT_AI_DELAY_MS if delay is None else delay,
        difficulty=difficulty,
        seed=_env_int("NOUGHTS_SEED"),
        data_dir=data_dir(),
    )
