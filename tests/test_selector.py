"""Tests for move selection from policy scores."""

import random
from collections import Counter

import pytest

from conftest import DRAW_MOVES
from puissance4.ai.selector import MoveSelector, rank_columns, random_policy
from puissance4.exceptions import NoLegalMoves
from puissance4.game.board import Board
from puissance4.utils import COLS, ROWS, Player

SCORES = [0.05, 0.1, 0.2, 0.4, 0.15, 0.05, 0.05]  # best 3, then 2


class TestRankColumns:
    """Test column ordering."""

    def test_descending(self):
        assert rank_columns(range(COLS), SCORES)[:3] == [3, 2, 4]

    def test_ties_keep_lower_column_first(self):
        assert rank_columns([6, 0, 5], [1.0] * COLS) == [0, 5, 6]


class TestSelectMove:
    """Test the randomized top-two choice."""

    def test_distribution_between_best_and_second(self):
        selector = MoveSelector(rng=random.Random(7))
        board = Board()
        counts = Counter(selector.select_move(board, Player.A, SCORES) for _ in range(4000))

        assert set(counts) == {2, 3}
        assert counts[3] / 4000 == pytest.approx(0.7, abs=0.03)
        assert counts[2] / 4000 == pytest.approx(0.3, abs=0.03)

    def test_full_columns_are_skipped(self):
        selector = MoveSelector(rng=random.Random(0))
        board = Board.from_moves([3] * ROWS)
        moves = {selector.select_move(board, Player.A, SCORES) for _ in range(200)}

        assert moves == {2, 4}

    def test_single_legal_column_always_chosen(self):
        selector = MoveSelector(rng=random.Random(0))
        board = Board.from_moves(DRAW_MOVES[:-1])
        assert board.legal_columns() == [DRAW_MOVES[-1]]

        for _ in range(50):
            assert selector.select_move(board, Player.B, SCORES) == DRAW_MOVES[-1]

    def test_full_board_raises(self):
        with pytest.raises(NoLegalMoves):
            MoveSelector().select_move(Board.from_moves(DRAW_MOVES), Player.A, SCORES)

    def test_wrong_score_count_raises(self):
        with pytest.raises(ValueError):
            MoveSelector().select_move(Board(), Player.A, [1.0] * (COLS - 1))

    def test_full_board_checked_before_score_count(self):
        with pytest.raises(NoLegalMoves):
            MoveSelector().select_move(Board.from_moves(DRAW_MOVES), Player.A, [1.0])

    def test_nan_scores_rank_last(self):
        nan = float('nan')
        scores = [nan, 0.1, nan, 0.9, 0.2, nan, 0.3]
        assert rank_columns(range(COLS), scores) == [3, 6, 4, 1, 0, 2, 5]

        selector = MoveSelector(rank_probabilities=(1.0,), rng=random.Random(0))
        assert selector.select_move(Board(), Player.A, [nan] * (COLS - 1) + [0.0]) == COLS - 1

    def test_board_not_modified(self):
        board = Board.from_moves([0, 1])
        before = board.copy()
        MoveSelector().select_move(board, Player.A, SCORES)
        assert board == before

    def test_greedy_table(self):
        selector = MoveSelector(rank_probabilities=(1.0,), rng=random.Random(0))
        assert all(selector(Board(), Player.A, SCORES) == 3 for _ in range(100))

    @pytest.mark.parametrize("table", [(), (-0.5, 1.5), (0.0, 0.0)])
    def test_invalid_table_rejected(self, table):
        with pytest.raises(ValueError):
            MoveSelector(rank_probabilities=table)

    def test_random_policy_scores_every_column(self):
        scores = random_policy(random.Random(3))(Board().to_vector())
        assert len(scores) == COLS
        assert all(0.0 <= s < 1.0 for s in scores)
