from typing import List

import numpy as np
import pytest
from hypothesis import given, strategies as st

from noughts.board import (
    EMPTY,
    WIN_LINES,
    Mark,
    Outcome,
    apply_move,
    cell_at,
    empty_cells,
    evaluate,
)
from noughts.errors import InvalidMove
from noughts.policy import Difficulty, select_move
from noughts.tactics import find_winning_move

boards = st.lists(st.integers(min_value=0, max_value=2), min_size=9, max_size=9).map(tuple)
coords = st.tuples(st.integers(min_value=0, max_value=2), st.integers(min_value=0, max_value=2))


def _collinear(line) -> bool:
    rows = {r for r, _ in line}
    cols = {c for _, c in line}
    if len(rows) == 1 or len(cols) == 1:
        return True
    return set(line) in ({(0, 0), (1, 1), (2, 2)}, {(0, 2), (1, 1), (2, 0)})


@given(boards)
def test_win_line_is_distinct_collinear_and_uniform(board):
    res = evaluate(board)
    if res.outcome is not Outcome.WIN:
        return
    assert len(set(res.line)) == 3
    assert _collinear(res.line)
    assert all(cell_at(board, p) == res.mark for p in res.line)


@given(st.lists(st.integers(min_value=1, max_value=2), min_size=9, max_size=9).map(tuple))
def test_full_board_without_line_is_draw(board):
    has_line = any(
        cell_at(board, a) == cell_at(board, b) == cell_at(board, c) for a, b, c in WIN_LINES
    )
    res = evaluate(board)
    if has_line:
        assert res.outcome is Outcome.WIN
    else:
        assert res.outcome is Outcome.DRAW


@given(boards, coords, st.sampled_from(list(Mark)))
def test_apply_move_on_occupied_cell_always_rejected(board, coord, mark):
    before = tuple(board)
    if cell_at(board, coord) == EMPTY:
        after = apply_move(board, coord, mark)
        changed = [i for i in range(9) if after[i] != before[i]]
        assert changed == [coord[0] * 3 + coord[1]]
        return
    with pytest.raises(InvalidMove):
        apply_move(board, coord, mark)
    assert board == before


@given(boards, st.sampled_from(list(Difficulty)), st.integers(min_value=0, max_value=2**32 - 1))
def test_select_move_always_returns_an_empty_cell(board, difficulty, seed):
    cells: List = empty_cells(board)
    if not cells:
        return
    move = select_move(board, difficulty, rng=np.random.default_rng(seed))
    assert move in cells


@given(boards, st.sampled_from([Difficulty.HARD, Difficulty.ADAPTIVE]), st.integers(min_value=0, max_value=1000))
def test_hard_tiers_take_wins_then_blocks(board, difficulty, seed):
    if not empty_cells(board):
        return
    move = select_move(board, difficulty, rng=np.random.default_rng(seed))
    win = find_winning_move(board, Mark.SECOND)
    if win is not None:
        res = evaluate(apply_move(board, move, Mark.SECOND))
        assert res.outcome is Outcome.WIN and res.mark is Mark.SECOND
        return
    block = find_winning_move(board, Mark.FIRST)
    if block is not None:
        assert move == block
