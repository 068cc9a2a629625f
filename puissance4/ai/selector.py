"""
selector.py - Move selection from policy scores

A policy scores every column; the selector keeps the legal ones, ranks
them, and draws a rank from a probability table. With the default table
the best column is played 70% of the time and the runner-up 30% of the
time, which keeps self-play games from repeating the same trajectory.
"""

import random
from typing import Callable, List, Optional, Sequence

import numpy as np

from puissance4.debug import debug
from puissance4.exceptions import NoLegalMoves
from puissance4.game.board import Board
from puissance4.utils import COLS, Player, DEFAULT_RANK_PROBABILITIES

# Board vector in, one score per column out
Policy = Callable[[np.ndarray], Sequence[float]]


def rank_columns(columns: Sequence[int], scores: Sequence[float]) -> List[int]:
    """
    Order columns by score, highest first.

    Ties keep the lower column first. NaN scores rank last.
    """
    values = np.asarray(scores, dtype=np.float64)
    values = np.where(np.isnan(values), -np.inf, values)
    return sorted(columns, key=lambda col: (-float(values[col]), col))


class MoveSelector:
    """Pick a legal column from a policy's raw output."""

    def __init__(self, rank_probabilities: Sequence[float] = DEFAULT_RANK_PROBABILITIES,
                 rng: Optional[random.Random] = None):
        """
        Args:
            rank_probabilities: Probability of choosing the best, second
                best, ... legal column. Renormalized over the ranks that
                exist on a given board.
            rng: Random source (a fresh random.Random if None)
        """
        probabilities = [float(p) for p in rank_probabilities]
        if not probabilities or any(p < 0 for p in probabilities) or sum(probabilities) <= 0:
            raise ValueError(f"Invalid rank probabilities: {rank_probabilities!r}")

        self.rank_probabilities = tuple(probabilities)
        self.rng = rng if rng is not None else random.Random()

    def select_move(self, board: Board, player: Player, policy_output: Sequence[float]) -> int:
        """
        Choose the column to play.

        Args:
            board: Current board (not modified)
            player: Player to move
            policy_output: One score per column

        Returns:
            A legal column index

        Raises:
            NoLegalMoves: the board is full
            ValueError: policy_output does not have one score per column
        """
        legal = board.legal_columns()
        if not legal:
            raise NoLegalMoves("No legal columns left on the board")

        scores = np.asarray(policy_output, dtype=np.float64).reshape(-1)
        if scores.shape != (COLS,):
            raise ValueError(f"Policy output must have {COLS} scores, got {scores.shape[0]}")

        ranked = rank_columns(legal, scores)
        weights = self.rank_probabilities[:len(ranked)]
        if sum(weights) <= 0:
            rank = 0
        else:
            rank = self.rng.choices(range(len(weights)), weights=weights)[0]

        move = ranked[rank]
        debug.trace(f"{player} ranked {ranked}, picked rank {rank} -> column {move}", "ai")
        return move

    def __call__(self, board: Board, player: Player, policy_output: Sequence[float]) -> int:
        return self.select_move(board, player, policy_output)


def random_policy(rng: Optional[random.Random] = None) -> Policy:
    """Policy that gives every column a uniform random score."""
    rng = rng if rng is not None else random.Random()

    def policy(vector):
        return [rng.random() for _ in range(COLS)]

    return policy
