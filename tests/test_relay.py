import numpy as np
import pytest

from noughts.board import Mark, Outcome
from noughts.errors import InvalidMove, RoomError
from noughts.relay import (
    ROOM_CODE_ALPHABET,
    LocalRelay,
    PlayerJoined,
    PlayerLeft,
    RoomCreated,
    StateChanged,
    generate_room_code,
)
from noughts.session import Status


@pytest.fixture
def relay():
    return LocalRelay(rng=np.random.default_rng(123))


def test_room_code_shape():
    code = generate_room_code(np.random.default_rng(0))
    assert len(code) == 4
    assert all(c in ROOM_CODE_ALPHABET for c in code)
    assert code == generate_room_code(np.random.default_rng(0))


def test_create_join_and_fan_out(relay):
    events = []
    unsubscribe = relay.subscribe(events.append)
    code = relay.create_room("alice")
    assert relay.session.status is Status.WAITING
    assert relay.join(code.lower(), "bob") is Mark.SECOND
    assert relay.session.status is Status.PLAYING
    relay.make_move("alice", (0, 0))
    unsubscribe()
    relay.make_move("bob", (1, 1))
    kinds = [type(e) for e in events]
    assert kinds == [RoomCreated, PlayerJoined, StateChanged]
    assert events[-1].state.to_move is Mark.SECOND


def test_join_rejections(relay):
    code = relay.create_room("alice")
    with pytest.raises(RoomError):
        relay.join("ABCDE", "bob")
    relay.join(code, "bob")
    with pytest.raises(RoomError):
        relay.join(code, "carol")
    # rejoining keeps the seat
    assert relay.join(code, "bob") is Mark.SECOND


def test_turn_and_seat_checks(relay):
    code = relay.create_room("alice")
    relay.join(code, "bob")
    with pytest.raises(InvalidMove):
        relay.make_move("bob", (0, 0))
    with pytest.raises(RoomError):
        relay.make_move("mallory", (0, 0))
    relay.make_move("alice", (0, 0))
    with pytest.raises(InvalidMove):
        relay.make_move("bob", (0, 0))


def test_full_game_restart_and_leave(relay):
    events = []
    relay.subscribe(events.append)
    code = relay.create_room("alice")
    relay.join(code, "bob")
    for player, coord in [("alice", (0, 0)), ("bob", (1, 0)), ("alice", (0, 1)),
                          ("bob", (1, 1)), ("alice", (0, 2))]:
        state = relay.make_move(player, coord)
    assert state.result.outcome is Outcome.WIN
    assert state.status is Status.ENDED
    state = relay.restart()
    assert state.status is Status.PLAYING
    relay.leave("bob")
    assert isinstance(events[-1], PlayerLeft)
    assert events[-1].mark is Mark.SECOND
    assert relay.session.status is Status.WAITING
    with pytest.raises(RoomError):
        relay.restart()


def test_leave_keeps_board_until_seat_is_refilled(relay):
    code = relay.create_room("alice")
    relay.join(code, "bob")
    relay.make_move("alice", (0, 0))
    relay.leave("bob")
    state = relay.session.snapshot()
    assert state.status is Status.WAITING
    assert state.board == (1, 0, 0, 0, 0, 0, 0, 0, 0)
    with pytest.raises(InvalidMove):
        relay.session.play((1, 1), Mark.SECOND)
    assert relay.join(code, "carol") is Mark.SECOND
    state = relay.session.snapshot()
    assert state.status is Status.PLAYING
    assert state.board == (0,) * 9


def test_first_join_claims_code_without_room(relay):
    assert relay.join("wxyz", "alice") is Mark.FIRST
    assert relay.room_code == "WXYZ"
    with pytest.raises(RoomError):
        relay.join("ABCD", "bob")
