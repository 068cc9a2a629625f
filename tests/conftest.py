"""Shared fixtures and move sequences for the puissance4 tests."""

import random

import pytest

from puissance4.utils import COLS

# Six rows of A A B B A A B / B B A A B B A: 42 moves, nobody connects four
DRAW_MOVES = [0, 2, 1, 3, 4, 6, 5] * 6

# A stacks column 3 while B answers in column 0
VERTICAL_WIN_MOVES = [3, 0, 3, 0, 3, 0, 3]

# A fills the bottom row of columns 0-3, B stacks on top of 0-2
HORIZONTAL_WIN_MOVES = [0, 0, 1, 1, 2, 2, 3]

# A finishes (col 0, h0) (1, h1) (2, h2) (3, h3)
DIAGONAL_UP_RIGHT_WIN_MOVES = [0, 1, 1, 2, 2, 3, 2, 3, 3, 6, 3]

# Mirror image of the above
DIAGONAL_UP_LEFT_WIN_MOVES = [COLS - 1 - col for col in DIAGONAL_UP_RIGHT_WIN_MOVES]


def constant_policy(scores):
    """Policy that ignores the board and always returns the same scores."""
    def policy(vector):
        return list(scores)
    return policy


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")
