"""
detector.py - Win and draw detection for Connect Four

has_win() scans every cell in the four direction families. The
check_win_at_position() variant only looks through the last placed token
and is used by the game session after each move.
"""

import numpy as np
from typing import List, Tuple

from puissance4.debug import debug
from puissance4.game.board import Board
from puissance4.utils import (ROWS, COLS, CONNECT_N, Player, DIRECTION_VECTORS,
                              is_valid_position)


def _run_from(grid: np.ndarray, row: int, col: int, dr: int, dc: int,
              value: int) -> bool:
    """True if the CONNECT_N cells starting at (row, col) all hold value."""
    for i in range(CONNECT_N):
        r, c = row + i * dr, col + i * dc
        if not is_valid_position(r, c) or grid[r, c] != value:
            return False
    return True


def find_winning_line(board: Board, player: Player) -> List[Tuple[int, int]]:
    """
    Find the first run of four tokens belonging to player.

    Args:
        board: The board to scan
        player: Player.A or Player.B

    Returns:
        The (row, col) cells of the run in scan order, or an empty list
    """
    if player == Player.EMPTY:
        return []

    grid = board.grid
    value = player.value
    for col in range(COLS):
        for row in range(ROWS):
            if grid[row, col] != value:
                continue
            for direction, (dr, dc) in DIRECTION_VECTORS.items():
                if _run_from(grid, row, col, dr, dc, value):
                    debug.trace(f"{player} wins {direction.name.lower()} from ({row}, {col})", "board")
                    return [(row + i * dr, col + i * dc) for i in range(CONNECT_N)]
    return []


def has_win(board: Board, player: Player) -> bool:
    """True if player has four in a row anywhere on the board."""
    return bool(find_winning_line(board, player))


def check_win_at_position(grid: np.ndarray, row: int, col: int) -> bool:
    """
    Check if the token at (row, col) is part of four in a row.

    Args:
        grid: The board grid
        row: Row of the token just placed
        col: Column of the token just placed

    Returns:
        True if the token completes a run, False otherwise
    """
    value = grid[row, col]
    if value == Player.EMPTY.value:
        return False

    for dr, dc in DIRECTION_VECTORS.values():
        count = 1

        r, c = row + dr, col + dc
        while is_valid_position(r, c) and grid[r, c] == value:
            count += 1
            r += dr
            c += dc

        r, c = row - dr, col - dc
        while is_valid_position(r, c) and grid[r, c] == value:
            count += 1
            r -= dr
            c -= dc

        if count >= CONNECT_N:
            return True

    return False


def is_full(board: Board) -> bool:
    """True when the board has no empty cell left."""
    return board.is_full()
