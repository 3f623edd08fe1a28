#!/usr/bin/env python3
from __future__ import annotations

import math
import statistics as stats
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np

from noughts.arena import ArenaArgs, run_arena
from noughts.board import empty_board
from noughts.policy import Difficulty, select_move
from noughts.tracking import log_metrics, log_params, maybe_mlflow_run


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    z = 1.96
    half = z * (s / math.sqrt(len(values)))
    return m, half


@dataclass
class Config:
    seeds: int = 10
    moves_per_seed: int = 2000
    arena_games: int = 200
    tracking: str = "none"  # or "mlflow"
    log_dir: Path = Path("runs")


def main() -> int:
    cfg = Config()
    with maybe_mlflow_run(cfg.tracking == "mlflow", run_name="benchmarks", log_dir=cfg.log_dir):
        log_params({"seeds": cfg.seeds, "moves_per_seed": cfg.moves_per_seed, "arena_games": cfg.arena_games})
        move_times: Dict[str, List[float]] = {d.value: [] for d in Difficulty}
        arena_times: List[float] = []
        board = empty_board()
        for s in range(cfg.seeds):
            rng = np.random.default_rng(s)
            for d in Difficulty:
                t0 = time.perf_counter()
                for _ in range(cfg.moves_per_seed):
                    select_move(board, d, rng=rng)
                move_times[d.value].append((time.perf_counter() - t0) / cfg.moves_per_seed)
            t1 = time.perf_counter()
            run_arena(ArenaArgs(games=cfg.arena_games, seed=s))
            arena_times.append(time.perf_counter() - t1)

        metrics: Dict[str, float] = {}
        lines = []
        for name, values in move_times.items():
            m, h = ci95(values)
            metrics[f"select_move_{name}_mean_us"] = m * 1e6
            lines.append(f"- select_move({name}): mean={m * 1e6:.2f}us ± {h * 1e6:.2f}us (95% CI)")
        m_arena, h_arena = ci95(arena_times)
        metrics["arena_mean_s"] = m_arena
        lines.append(f"- arena({cfg.arena_games} games x default pairings): mean={m_arena:.4f}s ± {h_arena:.4f}s (95% CI)")
        log_metrics(metrics)

        bench_md = Path(__file__).resolve().parents[1] / "docs" / "benchmarks.md"
        bench_md.parent.mkdir(parents=True, exist_ok=True)
        old = bench_md.read_text() if bench_md.exists() else "# Benchmarks\n\n"
        summary = f"\n## Automated summary (N={cfg.seeds})\n\n" + "\n".join(lines) + "\n\n"
        bench_md.write_text(old.rstrip() + "\n" + summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
