"""
Board engine: representation, move application, terminal-state detection.

Notes:
- A board is a flat tuple of 9 cells in row-major order: 0=empty, 1=First (X),
  2=Second (O). First always starts.
- Coordinates are (row, col) pairs with both values in 0..2.
- Every function is pure; boards are never mutated in place.
"""
from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .errors import InvalidMove

Board = Tuple[int, ...]
Coordinate = Tuple[int, int]

EMPTY = 0
SIZE = 3


class Mark(enum.IntEnum):
    FIRST = 1
    SECOND = 2

    @property
    def opponent(self) -> "Mark":
        return Mark.SECOND if self is Mark.FIRST else Mark.FIRST

    @property
    def symbol(self) -> str:
        return "X" if self is Mark.FIRST else "O"


class Outcome(str, enum.Enum):
    NONE = "none"
    WIN = "win"
    DRAW = "draw"


# Scan order matters: rows, then columns, then the two diagonals.
WIN_LINES: Tuple[Tuple[Coordinate, Coordinate, Coordinate], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


@dataclass(frozen=True)
class TerminalResult:
    outcome: Outcome
    mark: Optional[Mark] = None
    line: Tuple[Coordinate, ...] = ()

    @classmethod
    def ongoing(cls) -> "TerminalResult":
        return cls(Outcome.NONE)

    @classmethod
    def win(cls, mark: Mark, line: Iterable[Coordinate]) -> "TerminalResult":
        return cls(Outcome.WIN, Mark(mark), tuple(line))

    @classmethod
    def draw(cls) -> "TerminalResult":
        return cls(Outcome.DRAW)

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not Outcome.NONE


def empty_board() -> Board:
    return (EMPTY,) * (SIZE * SIZE)


def in_range(coord: Coordinate) -> bool:
    try:
        row, col = coord
        if isinstance(row, bool) or isinstance(col, bool):
            return False
        row, col = operator.index(row), operator.index(col)
    except (TypeError, ValueError):
        return False
    return 0 <= row < SIZE and 0 <= col < SIZE


def to_index(coord: Coordinate) -> int:
    row, col = coord
    return row * SIZE + col


def to_coordinate(index: int) -> Coordinate:
    return divmod(index, SIZE)


def cell_at(board: Board, coord: Coordinate) -> int:
    return board[to_index(coord)]


def apply_move(board: Board, coord: Coordinate, mark: Mark) -> Board:
    """Return a new board with ``mark`` placed at ``coord``.

    Raises InvalidMove when the coordinate is out of range or the cell is
    already occupied. The input board is left untouched either way.
    """
    if not in_range(coord):
        raise InvalidMove(f"Coordinate out of range: {coord!r}")
    idx = to_index(coord)
    if board[idx] != EMPTY:
        raise InvalidMove(f"Cell {tuple(coord)} is already occupied")
    cells = list(board)
    cells[idx] = int(Mark(mark))
    return tuple(cells)


def evaluate(board: Board) -> TerminalResult:
    """Report the first complete line in scan order, else Draw when full, else None."""
    for line in WIN_LINES:
        a, b, c = (board[to_index(p)] for p in line)
        if a != EMPTY and a == b == c:
            return TerminalResult.win(Mark(a), line)
    if EMPTY not in board:
        return TerminalResult.draw()
    return TerminalResult.ongoing()


def empty_cells(board: Board) -> List[Coordinate]:
    return [to_coordinate(i) for i, v in enumerate(board) if v == EMPTY]


def is_full(board: Board) -> bool:
    return EMPTY not in board


def get_piece_counts(board: Board) -> Tuple[int, int]:
    return board.count(Mark.FIRST), board.count(Mark.SECOND)


def side_to_move(board: Board) -> Mark:
    first, second = get_piece_counts(board)
    return Mark.FIRST if first == second else Mark.SECOND


def is_valid_state(board: Board) -> bool:
    """True for boards reachable under strict alternation starting with First."""
    first, second = get_piece_counts(board)
    if not (first == second or first == second + 1):
        return False

    def count_wins(mark: int) -> int:
        return sum(1 for line in WIN_LINES if all(board[to_index(p)] == mark for p in line))

    wins_first = count_wins(Mark.FIRST)
    wins_second = count_wins(Mark.SECOND)
    if wins_first and wins_second:
        return False
    if wins_first and first != second + 1:
        return False
    if wins_second and first != second:
        return False
    return True


def serialize_board(board: Board) -> str:
    return "".join(str(v) for v in board)


def parse_board(raw: str) -> Board:
    raw = raw.strip()
    if len(raw) != SIZE * SIZE or any(c not in "012" for c in raw):
        raise ValueError("Invalid board string. Must be 9 chars of 0/1/2.")
    return tuple(int(c) for c in raw)


def render_board(board: Board) -> str:
    symbols = {EMPTY: " ", Mark.FIRST: "X", Mark.SECOND: "O"}
    rows = []
    for r in range(SIZE):
        rows.append(" | ".join(symbols[board[r * SIZE + c]] for c in range(SIZE)))
    return "\n---------\n".join(rows)
