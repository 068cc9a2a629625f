"""
puissance4.game - Core game mechanics for Connect Four

Board representation, win and draw detection, and the game session state
machine.
"""

from puissance4.game.board import Board
from puissance4.game.detector import has_win, find_winning_line, is_full
from puissance4.game.rules import GameSession, GameRecord, ConnectFourEnv

__all__ = ['Board', 'has_win', 'find_winning_line', 'is_full',
           'GameSession', 'GameRecord', 'ConnectFourEnv']
