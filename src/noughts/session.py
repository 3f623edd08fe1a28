"""
Game-session controller: owns the canonical board, turn and round state.

The board engine and move policies stay pure; this module is the single
writer of board state and move history. A computer move can be scheduled
behind a "thinking" delay; the pending move is cancelled on restart/leave and
dropped if the board changed while it was waiting.
"""
from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .board import (
    Board,
    Coordinate,
    Mark,
    TerminalResult,
    apply_move,
    empty_board,
    evaluate,
)
from .config import Settings, load_settings
from .errors import InvalidMove
from .history import MoveHistory
from .policy import Difficulty, select_move


class Status(str, enum.Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


class Mode(str, enum.Enum):
    AI = "ai"
    MULTIPLAYER = "multiplayer"


@dataclass(frozen=True)
class SessionState:
    board: Board
    to_move: Mark
    status: Status
    result: TerminalResult
    mode: Optional[Mode]
    difficulty: Optional[Difficulty]
    round: int


class PendingMove:
    """Handle for a delayed computer move."""

    def __init__(self, session: "GameSession", round_no: int, board: Board, delay: float) -> None:
        self.round = round_no
        self.board = board
        self.applied: Optional[Coordinate] = None
        self._session = session
        self._cancelled = False
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True

    def start(self) -> "PendingMove":
        self._timer.start()
        return self

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def join(self, timeout: Optional[float] = None) -> None:
        self._timer.join(timeout)

    def _fire(self) -> None:
        self.applied = self._session._apply_pending(self)


class GameSession:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[np.random.Generator] = None,
        human: Mark = Mark.FIRST,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.rng = rng if rng is not None else self.settings.make_rng()
        self.human = Mark(human)
        self.computer = self.human.opponent
        self.history = MoveHistory()
        self._lock = threading.RLock()
        self._pending: Optional[PendingMove] = None
        self._round = 0
        self._reset_round(Status.WAITING)
        self.mode: Optional[Mode] = None
        self.difficulty: Optional[Difficulty] = None

    def _reset_round(self, status: Status) -> None:
        self.board: Board = empty_board()
        self.to_move = Mark.FIRST
        self.result = TerminalResult.ongoing()
        self.status = status

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            logging.debug("cancelling pending computer move for round %d", self._pending.round)
            self._pending.cancel()
            self._pending = None

    def start_ai_game(self, difficulty: "Difficulty | str | None" = None) -> SessionState:
        with self._lock:
            self._cancel_pending()
            self._round += 1
            self.mode = Mode.AI
            self.difficulty = Difficulty.parse(difficulty or self.settings.difficulty)
            self.history.clear()
            self._reset_round(Status.PLAYING)
            logging.info("started %s game against the computer", self.difficulty.value)
            return self.snapshot()

    def start_multiplayer_game(self) -> SessionState:
        with self._lock:
            self._cancel_pending()
            self._round += 1
            self.mode = Mode.MULTIPLAYER
            self.difficulty = None
            self.history.clear()
            self._reset_round(Status.PLAYING)
            return self.snapshot()

    def play(self, coord: Coordinate, mark: Mark) -> TerminalResult:
        """Apply ``mark`` at ``coord`` for whichever side is to move."""
        with self._lock:
            mark = Mark(mark)
            if self.status is not Status.PLAYING:
                raise InvalidMove("Game not in progress")
            if mark != self.to_move:
                raise InvalidMove(f"Not {mark.symbol}'s turn")
            new_board = apply_move(self.board, coord, mark)
            if self.mode is Mode.AI:
                self.history.append(self.board, coord, mark)
            self.board = new_board
            self.result = evaluate(new_board)
            self.to_move = mark.opponent
            if self.result.is_terminal:
                self.status = Status.ENDED
                logging.info("round %d ended: %s", self._round, self.result.outcome.value)
            return self.result

    def human_move(self, coord: Coordinate) -> TerminalResult:
        with self._lock:
            if self.mode is not Mode.AI:
                raise InvalidMove("No game against the computer in progress")
            return self.play(coord, self.human)

    def computer_move(self) -> Coordinate:
        with self._lock:
            if self.mode is not Mode.AI or self.status is not Status.PLAYING:
                raise InvalidMove("Game not in progress")
            if self.to_move != self.computer:
                raise InvalidMove(f"Not {self.computer.symbol}'s turn")
            coord = select_move(
                self.board,
                self.difficulty,
                self.history.snapshot(),
                rng=self.rng,
                mark=self.computer,
            )
            self.play(coord, self.computer)
            return coord

    def schedule_computer_move(self, delay: Optional[float] = None) -> PendingMove:
        with self._lock:
            self._cancel_pending()
            if delay is None:
                delay = self.settings.ai_delay_s
            self._pending = PendingMove(self, self._round, self.board, delay)
            return self._pending.start()

    def _apply_pending(self, pending: PendingMove) -> Optional[Coordinate]:
        with self._lock:
            if self._pending is pending:
                self._pending = None
            if pending.cancelled or pending.round != self._round or pending.board != self.board:
                logging.debug("dropping stale computer move scheduled for round %d", pending.round)
                return None
            if self.status is not Status.PLAYING or self.to_move != self.computer:
                return None
            return self.computer_move()

    def restart(self) -> SessionState:
        """Start a new round; adaptive sessions keep their move history."""
        with self._lock:
            self._cancel_pending()
            self._round += 1
            if not (self.mode is Mode.AI and self.difficulty is Difficulty.ADAPTIVE):
                self.history.clear()
            self._reset_round(Status.PLAYING if self.mode is not None else Status.WAITING)
            logging.debug("round %d started", self._round)
            return self.snapshot()

    def leave(self) -> SessionState:
        with self._lock:
            self._cancel_pending()
            self._round += 1
            self.mode = None
            self.difficulty = None
            self.history.clear()
            self._reset_round(Status.WAITING)
            return self.snapshot()

    def wait_for_opponent(self) -> SessionState:
        """Suspend play until the seat is filled again; the board stays as it was."""
        with self._lock:
            self._cancel_pending()
            self.status = Status.WAITING
            return self.snapshot()

    @property
    def pending(self) -> Optional[PendingMove]:
        return self._pending

    def snapshot(self) -> SessionState:
        with self._lock:
            return SessionState(
                board=self.board,
                to_move=self.to_move,
                status=self.status,
                result=self.result,
                mode=self.mode,
                difficulty=self.difficulty,
                round=self._round,
            )
