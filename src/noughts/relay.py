"""
In-process multiplayer relay: one room, two seats, state fan-out to subscribers.

Stands in for a network transport. The relay owns a GameSession and publishes
a tagged event after every state change.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from .board import Coordinate, Mark
from .errors import InvalidMove, RoomError
from .session import GameSession, SessionState, Status

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 4


@dataclass(frozen=True)
class RoomCreated:
    room_code: str
    state: SessionState


@dataclass(frozen=True)
class PlayerJoined:
    player_id: str
    mark: Mark
    state: SessionState


@dataclass(frozen=True)
class PlayerLeft:
    player_id: str
    mark: Mark
    state: SessionState


@dataclass(frozen=True)
class StateChanged:
    state: SessionState


RelayEvent = Union[RoomCreated, PlayerJoined, PlayerLeft, StateChanged]
Subscriber = Callable[[RelayEvent], None]


def generate_room_code(rng: np.random.Generator) -> str:
    idx = rng.integers(len(ROOM_CODE_ALPHABET), size=ROOM_CODE_LENGTH)
    return "".join(ROOM_CODE_ALPHABET[int(i)] for i in idx)


class LocalRelay:
    def __init__(self, session: Optional[GameSession] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.session = session if session is not None else GameSession()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.room_code: Optional[str] = None
        self.seats: Dict[Mark, Optional[str]] = {Mark.FIRST: None, Mark.SECOND: None}
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, event: RelayEvent) -> None:
        for callback in list(self._subscribers):
            callback(event)

    def mark_of(self, player_id: str) -> Optional[Mark]:
        for mark, occupant in self.seats.items():
            if occupant == player_id:
                return mark
        return None

    def create_room(self, player_id: str) -> str:
        self.room_code = generate_room_code(self.rng)
        self.seats = {Mark.FIRST: player_id, Mark.SECOND: None}
        self.session.leave()
        logging.info("room %s created by %s", self.room_code, player_id)
        self._publish(RoomCreated(self.room_code, self.session.snapshot()))
        return self.room_code

    def join(self, room_code: str, player_id: str) -> Mark:
        code = room_code.strip().upper()
        if len(code) != ROOM_CODE_LENGTH:
            raise RoomError("Invalid room code")
        # with no room created yet, the first join claims the code
        if self.room_code is not None and code != self.room_code:
            raise RoomError(f"Unknown room {code}")
        existing = self.mark_of(player_id)
        if existing is not None:
            return existing
        free = [m for m in (Mark.FIRST, Mark.SECOND) if self.seats[m] is None]
        if not free:
            raise RoomError("Room is full")
        mark = free[0]
        self.room_code = code
        self.seats[mark] = player_id
        if all(self.seats.values()) and self.session.status is Status.WAITING:
            self.session.start_multiplayer_game()
        logging.info("%s joined room %s as %s", player_id, code, mark.symbol)
        self._publish(PlayerJoined(player_id, mark, self.session.snapshot()))
        return mark

    def make_move(self, player_id: str, coord: Coordinate) -> SessionState:
        mark = self.mark_of(player_id)
        if mark is None:
            raise RoomError(f"{player_id} is not seated in this room")
        if self.session.to_move != mark:
            raise InvalidMove("Not your turn")
        self.session.play(coord, mark)
        state = self.session.snapshot()
        self._publish(StateChanged(state))
        return state

    def restart(self) -> SessionState:
        if not all(self.seats.values()):
            raise RoomError("Waiting for an opponent")
        state = self.session.restart()
        self._publish(StateChanged(state))
        return state

    def leave(self, player_id: str) -> None:
        mark = self.mark_of(player_id)
        if mark is None:
            return
        self.seats[mark] = None
        state = self.session.wait_for_opponent()
        logging.info("%s left room %s", player_id, self.room_code)
        self._publish(PlayerLeft(player_id, mark, state))
