"""
utils.py - Constants, enumerations and helpers shared across puissance4

This module holds the board geometry, the player and game-state enums,
the direction vectors used by win detection and the ASCII renderer.
"""

from enum import Enum, auto
import os

import numpy as np

# Board geometry
ROWS = 6
COLS = 7
CONNECT_N = 4  # pieces in a row needed to win
NUM_CELLS = ROWS * COLS

# Move selection: probability of playing the best, second best, ... legal column
DEFAULT_RANK_PROBABILITIES = (0.7, 0.3)

# Seconds between a turn change and the scheduled AI move
AI_MOVE_DELAY = 0.5

DATA_DIR_ENV_VAR = "PUISSANCE4_DATA_DIR"


class Player(Enum):
    """Players, and the value each one writes into a cell."""
    EMPTY = 0
    A = 1     # moves first
    B = -1

    def other(self) -> 'Player':
        """Get the opponent."""
        if self == Player.A:
            return Player.B
        elif self == Player.B:
            return Player.A
        return Player.EMPTY

    def __str__(self):
        if self == Player.EMPTY:
            return " "
        elif self == Player.A:
            return "X"
        else:
            return "O"


class SessionState(Enum):
    """Lifecycle of a game session."""
    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    FINISHED = auto()


class GameResult(Enum):
    """Outcome of a finished game."""
    PLAYER_A_WIN = auto()
    PLAYER_B_WIN = auto()
    DRAW = auto()

    @classmethod
    def win_for(cls, player: Player) -> 'GameResult':
        if player == Player.A:
            return cls.PLAYER_A_WIN
        if player == Player.B:
            return cls.PLAYER_B_WIN
        raise ValueError(f"No win result for {player!r}")

    @property
    def winner(self):
        if self == GameResult.PLAYER_A_WIN:
            return Player.A
        if self == GameResult.PLAYER_B_WIN:
            return Player.B
        return None


class Direction(Enum):
    """Directions scanned for four in a row."""
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_DOWN_RIGHT = auto()
    DIAGONAL_DOWN_LEFT = auto()


# (row, col) step for each direction; row 0 is the top of the board
DIRECTION_VECTORS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN_RIGHT: (1, 1),
    Direction.DIAGONAL_DOWN_LEFT: (1, -1),
}


def is_valid_position(row: int, col: int) -> bool:
    """Check if (row, col) lies on the board."""
    return 0 <= row < ROWS and 0 <= col < COLS


def is_valid_column(col) -> bool:
    """Check if col is an integer column index on the board."""
    return isinstance(col, (int, np.integer)) and not isinstance(col, bool) and 0 <= col < COLS


def grid_to_vector(grid: np.ndarray) -> np.ndarray:
    """
    Flatten a (ROWS, COLS) grid column by column, each column top to bottom.

    This ordering is shared by every board vector fed to a policy and
    stored in the training corpus.
    """
    return np.asarray(grid, dtype=np.int8).T.flatten()


def vector_to_grid(vector) -> np.ndarray:
    """Inverse of grid_to_vector."""
    array = np.asarray(vector, dtype=np.int8)
    if array.shape != (NUM_CELLS,):
        raise ValueError(f"Board vector must have {NUM_CELLS} entries, got shape {array.shape}")
    return array.reshape(COLS, ROWS).T.copy()


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render the board as ASCII art.

    Args:
        grid: The (ROWS, COLS) board grid

    Returns:
        Multi-line string with X for player A, O for player B
    """
    symbols = {Player.EMPTY.value: " ", Player.A.value: "X", Player.B.value: "O"}
    border = "|" + "-" * (COLS * 2 - 1) + "|"

    lines = [border]
    for row in range(ROWS):
        lines.append("|" + " ".join(symbols[int(cell)] for cell in grid[row]) + "|")
    lines.append(border)
    lines.append("|" + " ".join(str(col) for col in range(COLS)) + "|")

    return "\n".join(lines)


def default_data_dir() -> str:
    """Directory for corpus files and model checkpoints."""
    return os.path.abspath(os.environ.get(DATA_DIR_ENV_VAR, 'data'))
