"""
Move history: an append-only log of moves, read by the adaptive tier.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from .board import Board, Coordinate, Mark


@dataclass(frozen=True)
class MoveRecord:
    board: Board  # snapshot before the move
    coord: Coordinate
    mark: Mark


class MoveHistory:
    """Append-only sequence of MoveRecord owned by a single writer."""

    def __init__(self, records: Iterable[MoveRecord] = ()) -> None:
        self._records: List[MoveRecord] = list(records)

    def append(self, board: Board, coord: Coordinate, mark: Mark) -> MoveRecord:
        rec = MoveRecord(tuple(board), tuple(coord), Mark(mark))
        self._records.append(rec)
        return rec

    def clear(self) -> None:
        self._records = []

    def snapshot(self) -> Tuple[MoveRecord, ...]:
        return tuple(self._records)

    def moves_by(self, mark: Mark) -> List[Coordinate]:
        return [tuple(r.coord) for r in self._records if r.mark == mark]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MoveRecord]:
        return iter(self.snapshot())
