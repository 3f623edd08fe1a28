"""
Tactics and simple motifs: one-ply win/block probing and spatial zones.
Notes:
- Probing never looks more than one move ahead; the tiers built on top of it
  are bounded heuristics, not solvers.
"""
from __future__ import annotations

import enum
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from .board import Board, Coordinate, Mark, Outcome, apply_move, empty_cells, evaluate

CENTER: Coordinate = (1, 1)
CORNERS: Tuple[Coordinate, ...] = ((0, 0), (0, 2), (2, 0), (2, 2))
EDGES: Tuple[Coordinate, ...] = ((0, 1), (1, 0), (1, 2), (2, 1))


class Zone(str, enum.Enum):
    CORNER = "corner"
    EDGE = "edge"
    CENTER = "center"


def zone_of(coord: Coordinate) -> Zone:
    coord = tuple(coord)
    if coord == CENTER:
        return Zone.CENTER
    if coord in CORNERS:
        return Zone.CORNER
    if coord in EDGES:
        return Zone.EDGE
    raise ValueError(f"Coordinate out of range: {coord!r}")


def zone_counts(coords: Iterable[Coordinate]) -> List[Tuple[Zone, int]]:
    """Count coordinates per zone, most frequent first.

    Ties keep the order corner, edge, center.
    """
    counts = Counter(zone_of(c) for c in coords)
    ranked = [(z, counts.get(z, 0)) for z in (Zone.CORNER, Zone.EDGE, Zone.CENTER)]
    return sorted(ranked, key=lambda item: -item[1])


def wins_after(board: Board, coord: Coordinate, mark: Mark) -> bool:
    result = evaluate(apply_move(board, coord, mark))
    return result.outcome is Outcome.WIN and result.mark == mark


def immediate_winning_moves(board: Board, mark: Mark) -> List[Coordinate]:
    return [c for c in empty_cells(board) if wins_after(board, c, mark)]


def find_winning_move(board: Board, mark: Mark) -> Optional[Coordinate]:
    for coord in empty_cells(board):
        if wins_after(board, coord, mark):
            return coord
    return None


def available(board: Board, coords: Iterable[Coordinate]) -> List[Coordinate]:
    free = set(empty_cells(board))
    return [c for c in coords if c in free]
