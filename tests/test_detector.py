"""Tests for win and draw detection."""

import random

import numpy as np
import pytest

from conftest import (DRAW_MOVES, VERTICAL_WIN_MOVES, HORIZONTAL_WIN_MOVES,
                      DIAGONAL_UP_RIGHT_WIN_MOVES, DIAGONAL_UP_LEFT_WIN_MOVES)
from puissance4.game.board import Board
from puissance4.game.detector import (has_win, find_winning_line,
                                      check_win_at_position, is_full)
from puissance4.utils import ROWS, COLS, Player


def grid_with(cells, value=Player.A.value):
    """Place value on cells, propping them up with opponent tokens."""
    grid = np.zeros((ROWS, COLS), dtype=np.int8)
    for row, col in cells:
        grid[row, col] = value
    for col in range(COLS):
        occupied = np.nonzero(grid[:, col])[0]
        if len(occupied):
            below = grid[occupied[0]:, col]
            below[below == 0] = -value
    return Board(grid)


class TestHasWin:
    """Test the full board scan."""

    def test_empty_board(self):
        board = Board()
        assert not has_win(board, Player.A)
        assert not has_win(board, Player.B)

    @pytest.mark.parametrize("moves", [
        VERTICAL_WIN_MOVES,
        HORIZONTAL_WIN_MOVES,
        DIAGONAL_UP_RIGHT_WIN_MOVES,
        DIAGONAL_UP_LEFT_WIN_MOVES,
    ], ids=["vertical", "horizontal", "diagonal-up-right", "diagonal-up-left"])
    def test_each_direction(self, moves):
        board = Board.from_moves(moves)
        assert has_win(board, Player.A)
        assert not has_win(board, Player.B)

    def test_win_needs_the_fourth_token(self):
        board = Board.from_moves(VERTICAL_WIN_MOVES[:-1])
        assert not has_win(board, Player.A)

    def test_three_in_a_row_is_not_a_win(self):
        board = Board.from_moves([0, 0, 1, 1, 2, 2])
        assert not has_win(board, Player.A)
        assert not has_win(board, Player.B)

    def test_five_in_a_row_is_a_win(self):
        board = grid_with([(5, c) for c in range(5)])
        assert has_win(board, Player.A)

    def test_gap_breaks_the_run(self):
        board = grid_with([(5, 0), (5, 1), (5, 3), (5, 4)])
        assert not has_win(board, Player.A)

    def test_runs_against_the_edges(self):
        assert has_win(grid_with([(0, c) for c in range(3, 7)]), Player.A)
        assert has_win(grid_with([(r, 6) for r in range(4)]), Player.A)
        assert has_win(grid_with([(i, 6 - i) for i in range(4)]), Player.A)
        assert has_win(grid_with([(2 + i, 3 + i) for i in range(4)]), Player.A)

    def test_runs_do_not_wrap(self):
        # Row 0 cols 5-6 and row 1 cols 0-1 are consecutive in memory only
        board = grid_with([(0, 5), (0, 6), (1, 0), (1, 1)])
        assert not has_win(board, Player.A)

    def test_owner_matters(self):
        board = grid_with([(5, c) for c in range(4)], value=Player.B.value)
        assert has_win(board, Player.B)
        assert not has_win(board, Player.A)

    def test_empty_player_never_wins(self):
        assert not has_win(Board(), Player.EMPTY)

    def test_draw_board_has_no_win(self):
        board = Board.from_moves(DRAW_MOVES)
        assert is_full(board)
        assert not has_win(board, Player.A)
        assert not has_win(board, Player.B)


class TestFindWinningLine:
    """Test winning line lookup."""

    def test_vertical_line(self):
        line = find_winning_line(Board.from_moves(VERTICAL_WIN_MOVES), Player.A)
        assert sorted(line) == [(2, 3), (3, 3), (4, 3), (5, 3)]

    def test_diagonal_line(self):
        line = find_winning_line(Board.from_moves(DIAGONAL_UP_RIGHT_WIN_MOVES), Player.A)
        assert sorted(line) == [(2, 3), (3, 2), (4, 1), (5, 0)]

    def test_no_line(self):
        assert find_winning_line(Board.from_moves([0, 1]), Player.A) == []


class TestCheckWinAtPosition:
    """Test the last-move check against the full scan."""

    def test_empty_cell(self):
        assert not check_win_at_position(Board().grid, 5, 0)

    @pytest.mark.parametrize("seed", range(20))
    def test_agrees_with_full_scan(self, seed):
        rng = random.Random(seed)
        board = Board()
        player = Player.A

        while not board.is_full():
            col = rng.choice(board.legal_columns())
            row = board.drop(col, player)

            assert check_win_at_position(board.grid, row, col) == has_win(board, player)
            if has_win(board, player):
                break
            player = player.other()
