import numpy as np
import pytest

from noughts.board import Mark, Outcome, empty_board, serialize_board
from noughts.config import Settings
from noughts.errors import InvalidMove
from noughts.policy import Difficulty
from noughts.session import GameSession, Mode, PendingMove, Status


@pytest.fixture
def session():
    return GameSession(settings=Settings(ai_delay_ms=0), rng=np.random.default_rng(0))


def test_new_session_is_waiting(session):
    state = session.snapshot()
    assert state.status is Status.WAITING
    assert state.mode is None
    with pytest.raises(InvalidMove):
        session.play((0, 0), Mark.FIRST)


def test_human_then_computer_turns(session):
    session.start_ai_game("hard")
    session.human_move((0, 0))
    assert session.to_move is Mark.SECOND
    with pytest.raises(InvalidMove):
        session.human_move((0, 1))
    coord = session.computer_move()
    assert coord == (1, 1)
    assert session.to_move is Mark.FIRST
    assert len(session.history) == 2


def test_rejected_move_leaves_state_unchanged(session):
    session.start_ai_game("easy")
    session.human_move((0, 0))
    session.computer_move()
    before = session.snapshot()
    with pytest.raises(InvalidMove):
        session.human_move((0, 0))
    with pytest.raises(InvalidMove):
        session.human_move((5, 5))
    assert session.snapshot() == before


def test_round_ends_on_win(session):
    session.start_multiplayer_game()
    for coord, mark in [((0, 0), Mark.FIRST), ((1, 0), Mark.SECOND),
                        ((0, 1), Mark.FIRST), ((1, 1), Mark.SECOND)]:
        session.play(coord, mark)
    result = session.play((0, 2), Mark.FIRST)
    assert result.outcome is Outcome.WIN
    assert result.line == ((0, 0), (0, 1), (0, 2))
    assert session.status is Status.ENDED
    with pytest.raises(InvalidMove):
        session.play((2, 2), Mark.SECOND)
    # multiplayer games do not record history
    assert len(session.history) == 0


@pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD])
def test_restart_clears_history_for_non_adaptive(session, difficulty):
    session.start_ai_game(difficulty)
    session.human_move((0, 0))
    session.computer_move()
    state = session.restart()
    assert state.board == empty_board()
    assert state.status is Status.PLAYING
    assert state.result.outcome is Outcome.NONE
    assert state.to_move is Mark.FIRST
    assert len(session.history) == 0


def test_restart_keeps_history_for_adaptive(session):
    session.start_ai_game(Difficulty.ADAPTIVE)
    session.human_move((0, 0))
    assert session.computer_move() == (1, 1)
    session.human_move((2, 2))
    recorded = session.history.snapshot()
    assert len(recorded) == 3
    state = session.restart()
    assert state.board == empty_board()
    assert state.difficulty is Difficulty.ADAPTIVE
    assert session.history.snapshot() == recorded


def test_adaptive_counters_previous_round(session):
    session.start_ai_game(Difficulty.ADAPTIVE)
    session.history.append(empty_board(), (1, 1), Mark.FIRST)
    session.history.append(empty_board(), (1, 1), Mark.FIRST)
    session.restart()
    session.human_move((0, 1))
    coord = session.computer_move()
    # center preference -> corner, even with the center still free
    assert coord in {(0, 0), (0, 2), (2, 0), (2, 2)}


def test_leave_resets_everything(session):
    session.start_ai_game(Difficulty.ADAPTIVE)
    session.human_move((0, 0))
    state = session.leave()
    assert state.status is Status.WAITING
    assert state.mode is None
    assert len(session.history) == 0


def test_scheduled_computer_move_is_applied(session):
    session.start_ai_game("hard")
    session.human_move((0, 0))
    pending = session.schedule_computer_move(delay=0.0)
    pending.join(timeout=5)
    assert pending.applied == (1, 1)
    assert session.to_move is Mark.FIRST
    assert session.pending is None


def test_restart_cancels_pending_computer_move(session):
    session.start_ai_game("hard")
    session.human_move((0, 0))
    pending = session.schedule_computer_move(delay=30.0)
    session.restart()
    assert pending.cancelled
    pending.join(timeout=5)
    assert pending.applied is None
    assert session.board == empty_board()
    assert session.to_move is Mark.FIRST


def test_cancelled_pending_move_is_dropped(session):
    session.start_ai_game("hard")
    session.human_move((0, 0))
    pending = session.schedule_computer_move(delay=30.0)
    pending.cancel()
    assert session._apply_pending(pending) is None
    assert serialize_board(session.board) == "100000000"


def test_pending_move_dropped_when_board_changed(session):
    session.start_ai_game("hard")
    session.human_move((0, 0))
    pending = session.schedule_computer_move(delay=30.0)
    assert session.computer_move() == (1, 1)
    session.human_move((2, 2))
    # same round, computer to move again, but not on the board it was scheduled for
    board_after = serialize_board(session.board)
    assert session._apply_pending(pending) is None
    assert serialize_board(session.board) == board_after
    assert session.to_move is Mark.SECOND
    pending.cancel()


def test_pending_move_dropped_when_round_changed(session):
    session.start_ai_game("hard")
    session.human_move((0, 0))
    state = session.snapshot()
    # same board, computer to move, scheduled against an earlier round
    pending = PendingMove(session, state.round - 1, session.board, 30.0)
    assert not pending.cancelled
    assert session._apply_pending(pending) is None
    assert session.snapshot() == state


def test_start_ai_game_uses_settings_default():
    s = GameSession(settings=Settings(difficulty=Difficulty.EASY), rng=np.random.default_rng(1))
    state = s.start_ai_game()
    assert state.difficulty is Difficulty.EASY
    assert state.mode is Mode.AI
