from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .arena import DEFAULT_PAIRINGS, ArenaArgs, parse_pairing, run_arena
from .board import Outcome, evaluate, is_valid_state, parse_board, render_board, side_to_move
from .config import load_settings
from .errors import GameError
from .policy import Difficulty, select_move
from .session import GameSession, Status

DIFFICULTY_CHOICES = [d.value for d in Difficulty]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="noughts", description="Tic-tac-toe with tiered computer opponents")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument("--seed", type=int, default=None, help="Seed for the computer's random choices")

    p_eval = sub.add_parser("evaluate", help="Report win/draw/ongoing for a board (9 digits, 0=empty,1=X,2=O)")
    p_eval.add_argument("--board", required=True, help="Board string, e.g., 120120100")

    p_move = sub.add_parser("move", help="Pick the computer move for the side to move")
    p_move.add_argument("--board", required=True, help="Board string, e.g., 100020000")
    p_move.add_argument("--difficulty", choices=DIFFICULTY_CHOICES, default=None, help="Computer tier")

    p_arena = sub.add_parser("arena", help="Play seeded games between tiers and summarize outcomes")
    p_arena.add_argument("--games", type=int, default=100, help="Games per pairing (default: 100)")
    p_arena.add_argument(
        "--pairing",
        action="append",
        default=None,
        help='Pairing "first:second" (random|easy|medium|hard|adaptive); repeatable',
    )
    p_arena.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Directory for arena_games.csv + manifest.json (default: $NOUGHTS_DATA_DIR or ./data_raw)",
    )
    p_arena.add_argument(
        "--tracking",
        choices=["none", "mlflow"],
        default="none",
        help="Experiment tracking backend",
    )
    p_arena.add_argument(
        "--log-dir",
        type=Path,
        default=Path("runs"),
        help="Directory for tracking logs/artifacts (for mlflow local backend)",
    )

    p_play = sub.add_parser("play", help="Play against the computer in the terminal")
    p_play.add_argument("--difficulty", choices=DIFFICULTY_CHOICES, default=None, help="Computer tier")
    p_play.add_argument("--delay-ms", type=int, default=None, help="Computer thinking delay in ms")

    return p


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _read_board(raw: str):
    b = parse_board(raw)
    if not is_valid_state(b):
        raise ValueError("Board is not a valid reachable state.")
    return b


def _play(session: GameSession, difficulty: Optional[str]) -> int:
    session.start_ai_game(difficulty)
    print(f"You are X. Enter moves as 'row col' (0-2). Difficulty: {session.difficulty.value}")
    while session.status is Status.PLAYING:
        print(render_board(session.board))
        try:
            line = input("Your move: ")
        except EOFError:
            print()
            return 0
        parts = line.split()
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            print("Please type two numbers, e.g. '1 1'.")
            continue
        try:
            session.human_move((int(parts[0]), int(parts[1])))
        except GameError as exc:
            print(f"Illegal move: {exc}")
            continue
        if session.status is Status.PLAYING:
            pending = session.schedule_computer_move()
            pending.join()
            if pending.applied is not None:
                print(f"Computer plays {pending.applied[0]} {pending.applied[1]}")
    print(render_board(session.board))
    result = session.result
    if result.outcome is Outcome.WIN:
        print(f"Winner: {result.mark.symbol}")
    else:
        print("Draw")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if ns.version:
        try:
            from importlib.metadata import version as _ver

            print(_ver("noughts"))
        except Exception:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0

    try:
        settings = load_settings()
        if ns.seed is not None:
            settings = replace(settings, seed=ns.seed)

        if ns.cmd == "evaluate":
            b = parse_board(ns.board)
            res = evaluate(b)
            logging.info(
                "result=%s mark=%s line=%s",
                res.outcome.value,
                res.mark.symbol if res.mark is not None else "-",
                list(res.line),
            )
            return 0

        if ns.cmd == "move":
            b = _read_board(ns.board)
            if evaluate(b).is_terminal:
                logging.error("Board is already terminal.")
                return 2
            difficulty = Difficulty.parse(ns.difficulty or settings.difficulty)
            row, col = select_move(b, difficulty, rng=settings.make_rng(), mark=side_to_move(b))
            logging.info("difficulty=%s move=%d,%d", difficulty.value, row, col)
            return 0

        if ns.cmd == "arena":
            pairings = [parse_pairing(p) for p in ns.pairing] if ns.pairing else list(DEFAULT_PAIRINGS)
            run_arena(ArenaArgs(
                games=ns.games,
                seed=settings.seed if settings.seed is not None else 42,
                pairings=pairings,
                out=ns.out or settings.data_dir,
                tracking=ns.tracking == "mlflow",
                log_dir=ns.log_dir,
            ))
            return 0

        if ns.cmd == "play":
            if ns.delay_ms is not None:
                settings = replace(settings, ai_delay_ms=ns.delay_ms)
            session = GameSession(settings=settings)
            return _play(session, ns.difficulty)
    except (GameError, ValueError) as exc:
        logging.error("%s", exc)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
