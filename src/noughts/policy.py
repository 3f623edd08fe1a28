"""
Move policies for the computer side, one per difficulty tier.

Tiers:
- easy: uniform over empty cells.
- medium: win with probability 1/2, else block with probability 1/2 (two
  independent flips), else easy.
- hard: win > block > center > random corner > random empty cell.
- adaptive: win > block > counter the opponent's preferred zone > hard from
  the center step onwards.

All randomness is drawn from an injected ``numpy.random.Generator`` so runs
can be reproduced from a seed.
"""
from __future__ import annotations

import enum
import logging
from typing import Iterable, Optional, Sequence

import numpy as np

from .board import Board, Coordinate, Mark, cell_at, empty_cells, is_full, EMPTY
from .errors import NoLegalMove
from .history import MoveHistory, MoveRecord
from .tactics import CENTER, CORNERS, EDGES, Zone, available, find_winning_move, zone_counts

MEDIUM_WIN_PROB = 0.5
MEDIUM_BLOCK_PROB = 0.5
MIN_PATTERN_MOVES = 2


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    ADAPTIVE = "adaptive"

    @classmethod
    def parse(cls, raw: "str | Difficulty") -> "Difficulty":
        if isinstance(raw, Difficulty):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty {raw!r}; choose one of {choices}") from None


def _pick(rng: np.random.Generator, cells: Sequence[Coordinate]) -> Coordinate:
    return tuple(cells[int(rng.integers(len(cells)))])


def easy_move(board: Board, rng: np.random.Generator) -> Coordinate:
    return _pick(rng, empty_cells(board))


def medium_move(board: Board, mark: Mark, rng: np.random.Generator) -> Coordinate:
    win = find_winning_move(board, mark)
    if win is not None and rng.random() < MEDIUM_WIN_PROB:
        return win
    block = find_winning_move(board, mark.opponent)
    if block is not None and rng.random() < MEDIUM_BLOCK_PROB:
        return block
    return easy_move(board, rng)


def _positional_move(board: Board, rng: np.random.Generator) -> Coordinate:
    if cell_at(board, CENTER) == EMPTY:
        return CENTER
    corners = available(board, CORNERS)
    if corners:
        return _pick(rng, corners)
    return easy_move(board, rng)


def _win_or_block(board: Board, mark: Mark) -> Optional[Coordinate]:
    win = find_winning_move(board, mark)
    if win is not None:
        logging.debug("taking winning move %s", win)
        return win
    block = find_winning_move(board, mark.opponent)
    if block is not None:
        logging.debug("blocking opponent at %s", block)
    return block


def hard_move(board: Board, mark: Mark, rng: np.random.Generator) -> Coordinate:
    forced = _win_or_block(board, mark)
    if forced is not None:
        return forced
    return _positional_move(board, rng)


def counter_move(
    board: Board,
    opponent_moves: Sequence[Coordinate],
    rng: np.random.Generator,
) -> Optional[Coordinate]:
    """Counter the zone the opponent has favoured so far.

    Returns None when there is too little data, no clear preference, or none
    of the counter cells are free.
    """
    if len(opponent_moves) < MIN_PATTERN_MOVES:
        return None
    preferred, count = zone_counts(opponent_moves)[0]
    if count == 0:
        return None
    logging.debug("opponent prefers %s (%d moves)", preferred.value, count)
    center_free = cell_at(board, CENTER) == EMPTY
    if preferred is Zone.CORNER:
        if center_free:
            return CENTER
        targets = available(board, EDGES)
    elif preferred is Zone.EDGE:
        if center_free:
            return CENTER
        targets = available(board, CORNERS)
    else:
        targets = available(board, CORNERS)
    return _pick(rng, targets) if targets else None


def adaptive_move(
    board: Board,
    mark: Mark,
    history: Iterable[MoveRecord],
    rng: np.random.Generator,
) -> Coordinate:
    forced = _win_or_block(board, mark)
    if forced is not None:
        return forced
    opponent_moves = MoveHistory(history).moves_by(mark.opponent)
    countered = counter_move(board, opponent_moves, rng)
    if countered is not None:
        return countered
    return _positional_move(board, rng)


def select_move(
    board: Board,
    difficulty: "Difficulty | str",
    history: Iterable[MoveRecord] = (),
    rng: Optional[np.random.Generator] = None,
    mark: Mark = Mark.SECOND,
) -> Coordinate:
    """Choose the computer's move for ``mark`` at the given tier.

    ``history`` is only read by the adaptive tier; a tuple snapshot is taken
    before use. Raises NoLegalMove when the board has no empty cell.
    """
    if is_full(board):
        raise NoLegalMove("No empty cells left on the board")
    difficulty = Difficulty.parse(difficulty)
    mark = Mark(mark)
    if rng is None:
        rng = np.random.default_rng()

    if difficulty is Difficulty.EASY:
        move = easy_move(board, rng)
    elif difficulty is Difficulty.MEDIUM:
        move = medium_move(board, mark, rng)
    elif difficulty is Difficulty.HARD:
        move = hard_move(board, mark, rng)
    else:
        move = adaptive_move(board, mark, tuple(history), rng)
    logging.debug("%s tier chose %s for %s", difficulty.value, move, mark.symbol)
    return move
