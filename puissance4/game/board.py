"""
board.py - Board representation for Connect Four

This module implements the Board class: a 6x7 grid filled bottom-up,
token placement with legality checks, and the flat vector form used as
policy input and training data.
"""

import numpy as np
from typing import Iterable, List, Optional

from puissance4.debug import debug, DebugLevel
from puissance4.exceptions import ColumnOutOfRange, ColumnFull
from puissance4.utils import (ROWS, COLS, NUM_CELLS, Player, grid_to_vector,
                              vector_to_grid, is_valid_column, render_board_ascii)


class Board:
    """
    Represents a Connect Four board.

    The grid is a (ROWS, COLS) numpy array with row 0 at the top. Cells hold
    Player values: 1 for A, -1 for B, 0 when empty. A board is mutated in
    place by drop() and is meant to be owned by a single game session;
    use copy() to explore a candidate position.
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        if grid is None:
            self.grid = np.zeros((ROWS, COLS), dtype=np.int8)
        else:
            grid = np.asarray(grid, dtype=np.int8)
            if grid.shape != (ROWS, COLS):
                raise ValueError(f"Board grid must have shape {(ROWS, COLS)}, got {grid.shape}")
            if not np.isin(grid, (-1, 0, 1)).all():
                raise ValueError("Board cells must be -1, 0 or 1")
            occupied = grid != 0
            floating = occupied[:-1] & ~occupied[1:]
            if floating.any():
                rows, cols = np.nonzero(floating)
                raise ValueError(f"Token at row {rows[0]}, column {cols[0]} has an empty cell below it")
            self.grid = grid.copy()

    @classmethod
    def create_empty(cls) -> 'Board':
        """Create a board with every cell empty."""
        return cls()

    @classmethod
    def from_vector(cls, vector) -> 'Board':
        """Rebuild a board from the output of to_vector()."""
        return cls(vector_to_grid(vector))

    @classmethod
    def from_moves(cls, moves: Iterable[int], first: Player = Player.A) -> 'Board':
        """
        Build a board by dropping tokens for alternating players.

        Args:
            moves: Columns in play order
            first: Player making the first move

        Returns:
            The resulting board
        """
        board = cls()
        player = first
        for col in moves:
            board.drop(col, player)
            player = player.other()
        return board

    def reset(self):
        """Empty every cell."""
        debug.debug("Resetting board", "board")
        self.grid.fill(Player.EMPTY.value)

    def copy(self) -> 'Board':
        """
        Create a deep copy of the board.

        Returns:
            A new Board with its own grid
        """
        debug.trace("Creating board copy", "board")
        return Board(self.grid)

    def cell(self, row: int, col: int) -> Player:
        return Player(int(self.grid[row, col]))

    def column_height(self, col: int) -> int:
        """Number of tokens in a column."""
        return int(np.count_nonzero(self.grid[:, col]))

    def is_column_full(self, col: int) -> bool:
        return self.grid[0, col] != Player.EMPTY.value

    def legal_columns(self) -> List[int]:
        """
        Columns that can still receive a token.

        Returns:
            Column indices whose top cell is empty, in ascending order
        """
        return [col for col in range(COLS) if not self.is_column_full(col)]

    def drop(self, col: int, player: Player) -> int:
        """
        Place a token for player in the lowest empty cell of col.

        Args:
            col: Target column (0-indexed)
            player: Player.A or Player.B

        Returns:
            Row index where the token landed

        Raises:
            ColumnOutOfRange: col is outside [0, COLS)
            ColumnFull: col has no empty cell
        """
        if not is_valid_column(col):
            debug.debug(f"Invalid move: column {col} out of range", "board")
            raise ColumnOutOfRange(col)

        if player == Player.EMPTY:
            raise ValueError("Cannot drop a token for Player.EMPTY")

        if self.is_column_full(col):
            debug.debug(f"Invalid move: column {col} is full", "board")
            raise ColumnFull(col)

        row = ROWS - 1 - self.column_height(col)
        self.grid[row, col] = player.value
        debug.trace(f"Placed {player} at ({row}, {col})", "board")
        return row

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def is_full(self) -> bool:
        """True when every cell of every column is occupied."""
        return self.occupied_count() == NUM_CELLS

    def is_empty(self) -> bool:
        return self.occupied_count() == 0

    def to_vector(self) -> np.ndarray:
        """
        Flatten the board for a policy or the training corpus.

        Returns:
            int8 vector of length ROWS * COLS, column by column, each column
            top to bottom, with 1 for A, -1 for B and 0 for empty
        """
        return grid_to_vector(self.grid)

    def get_state(self) -> np.ndarray:
        """
        Get a copy of the grid.

        Returns:
            2D numpy array representing the board
        """
        return self.grid.copy()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self.grid, other.grid)

    def __repr__(self) -> str:
        return f"Board(occupied={self.occupied_count()})"

    def __str__(self) -> str:
        return self.render()


if __name__ == "__main__":
    debug.configure(level=DebugLevel.TRACE)

    board = Board()
    for col in [3, 2, 4, 2, 5, 2]:
        player = Player.A if board.occupied_count() % 2 == 0 else Player.B
        board.drop(col, player)
    print(board)
    print(f"Legal columns: {board.legal_columns()}")
    print(f"Vector: {board.to_vector().tolist()}")
