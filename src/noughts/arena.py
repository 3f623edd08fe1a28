"""
Arena: play seeded games between move policies and aggregate the outcomes.

A contender is either a Difficulty tier or ``None`` ("random"), a uniform
stand-in for a human. Per-game rows can be exported as CSV with a JSON
manifest; identical arguments give identical CSV bytes.
"""
from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .board import (
    Coordinate,
    Mark,
    Outcome,
    TerminalResult,
    apply_move,
    empty_board,
    evaluate,
    serialize_board,
)
from .history import MoveHistory
from .policy import Difficulty, easy_move, select_move
from .tracking import log_artifact, log_metrics, log_params, maybe_mlflow_run

RANDOM = "random"
Contender = Optional[Difficulty]

DEFAULT_PAIRINGS: Tuple[Tuple[str, str], ...] = tuple((RANDOM, d.value) for d in Difficulty)


def parse_contender(raw: "str | Difficulty | None") -> Contender:
    if raw is None or (isinstance(raw, str) and raw.strip().lower() == RANDOM):
        return None
    return Difficulty.parse(raw)


def contender_name(contender: Contender) -> str:
    return RANDOM if contender is None else contender.value


def parse_pairing(raw: str) -> Tuple[str, str]:
    """Parse ``first:second``, e.g. ``random:hard``."""
    parts = [p.strip() for p in raw.split(":")]
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Pairing must look like first:second, got {raw!r}")
    for p in parts:
        parse_contender(p)
    return parts[0].lower(), parts[1].lower()


@dataclass
class GameRecord:
    game_id: int
    first: Contender
    second: Contender
    moves: List[Coordinate]
    final_board: Tuple[int, ...]
    result: TerminalResult

    @property
    def score(self) -> int:
        """+1 First won, -1 Second won, 0 draw."""
        if self.result.outcome is not Outcome.WIN:
            return 0
        return 1 if self.result.mark is Mark.FIRST else -1

    def to_row(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "first": contender_name(self.first),
            "second": contender_name(self.second),
            "moves": " ".join(f"{r}{c}" for r, c in self.moves),
            "plies": len(self.moves),
            "final_board": serialize_board(self.final_board),
            "outcome": self.result.outcome.value,
            "winner": self.result.mark.symbol if self.result.mark is not None else "",
        }


def play_match(
    first: Contender,
    second: Contender,
    rng: np.random.Generator,
    game_id: int = 0,
) -> GameRecord:
    board = empty_board()
    history = MoveHistory()
    players = {Mark.FIRST: first, Mark.SECOND: second}
    mark = Mark.FIRST
    moves: List[Coordinate] = []
    result = evaluate(board)
    while not result.is_terminal:
        policy = players[mark]
        if policy is None:
            coord = easy_move(board, rng)
        else:
            coord = select_move(board, policy, history.snapshot(), rng=rng, mark=mark)
        history.append(board, coord, mark)
        board = apply_move(board, coord, mark)
        moves.append(coord)
        result = evaluate(board)
        mark = mark.opponent
    return GameRecord(game_id, first, second, moves, board, result)


def summarize(records: Sequence[GameRecord]) -> Dict[str, float]:
    if not records:
        return {"games": 0.0, "first_win_rate": 0.0, "second_win_rate": 0.0, "draw_rate": 0.0, "mean_plies": 0.0}
    scores = np.array([r.score for r in records])
    plies = np.array([len(r.moves) for r in records])
    return {
        "games": float(len(records)),
        "first_win_rate": float(np.mean(scores == 1)),
        "second_win_rate": float(np.mean(scores == -1)),
        "draw_rate": float(np.mean(scores == 0)),
        "mean_plies": float(np.mean(plies)),
    }


@dataclass
class ArenaArgs:
    games: int = 100
    seed: int = 42
    pairings: List[Tuple[str, str]] = field(default_factory=lambda: list(DEFAULT_PAIRINGS))
    out: Optional[Path] = None
    tracking: bool = False
    log_dir: Path = Path("runs")


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    fieldnames = list(rows[0].keys()) if rows else ["game_id"]
    with path.open("w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in rows:
            w.writerow(r)


def run_arena(args: ArenaArgs) -> Dict[str, Dict[str, float]]:
    if args.games < 1:
        raise ValueError(f"games must be >= 1, got {args.games}")
    pairings = [(parse_contender(a), parse_contender(b)) for a, b in args.pairings]
    streams = np.random.SeedSequence(args.seed).spawn(len(pairings))

    summary: Dict[str, Dict[str, float]] = {}
    rows: List[Dict[str, Any]] = []
    game_id = 0
    with maybe_mlflow_run(args.tracking, run_name="arena", log_dir=args.log_dir):
        log_params({"games": args.games, "seed": args.seed, "pairings": len(pairings)})
        for (first, second), stream in zip(pairings, streams):
            rng = np.random.default_rng(stream)
            key = f"{contender_name(first)}_vs_{contender_name(second)}"
            records = []
            for _ in range(args.games):
                records.append(play_match(first, second, rng, game_id=game_id))
                game_id += 1
            stats = summarize(records)
            summary[key] = stats
            rows.extend(r.to_row() for r in records)
            logging.info(
                "%s: first=%.3f second=%.3f draw=%.3f plies=%.2f",
                key,
                stats["first_win_rate"],
                stats["second_win_rate"],
                stats["draw_rate"],
                stats["mean_plies"],
            )
            log_metrics({f"{key}.{k}": v for k, v in stats.items() if k != "games"})

        if args.out is not None:
            args.out.mkdir(parents=True, exist_ok=True)
            games_csv = args.out / "arena_games.csv"
            _write_csv(games_csv, rows)
            manifest = {
                "created_at": datetime.now(timezone.utc).isoformat(),
                "seed": args.seed,
                "games_per_pairing": args.games,
                "pairings": [list(p) for p in args.pairings],
                "row_count": len(rows),
                "summary": summary,
                "files": {"games_csv": games_csv.name},
            }
            manifest_path = args.out / "manifest.json"
            manifest_path.write_text(json.dumps(manifest, indent=2, sort_keys=True))
            log_artifact(games_csv)
            log_artifact(manifest_path)
            logging.info("Wrote %d game rows to %s", len(rows), args.out)
    return summary
