"""
Exception types raised by the board engine, move policies and session layer.
"""


class GameError(Exception):
    """Base class for recoverable game-rule violations."""


class InvalidMove(GameError, ValueError):
    """Coordinate out of range, cell already occupied, or move out of turn."""


class NoLegalMove(GameError, RuntimeError):
    """A move was requested on a board with no empty cells."""


class RoomError(GameError):
    """Relay room rejected a request (bad code, room full, unknown player)."""
