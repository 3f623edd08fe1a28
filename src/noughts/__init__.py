"""noughts package.

Board engine, tiered computer opponents, a session controller and a small
arena for pitting tiers against each other.

Convenience imports are exposed for common workflows.
"""

from .board import Mark, TerminalResult, apply_move, empty_cells, evaluate
from .errors import InvalidMove, NoLegalMove
from .history import MoveHistory, MoveRecord
from .policy import Difficulty, select_move
from .session import GameSession
from .tactics import find_winning_move

__all__ = [
    "Mark",
    "TerminalResult",
    "apply_move",
    "empty_cells",
    "evaluate",
    "InvalidMove",
    "NoLegalMove",
    "MoveHistory",
    "MoveRecord",
    "Difficulty",
    "select_move",
    "GameSession",
    "find_winning_move",
]
