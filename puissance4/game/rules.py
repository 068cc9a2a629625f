"""
rules.py - Game sessions and Gymnasium environment for Connect Four

This module provides:
1. GameSession, the turn-taking state machine that records every move
2. GameRecord, the frozen move history handed off when a game ends
3. ConnectFourEnv, a gymnasium-compatible wrapper around a session
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from puissance4.debug import debug, DebugLevel
from puissance4.exceptions import Connect4Error, GameAlreadyOver, GameNotStarted
from puissance4.game.board import Board
from puissance4.game.detector import check_win_at_position, find_winning_line
from puissance4.utils import COLS, NUM_CELLS, Player, SessionState, GameResult


@dataclass(frozen=True, eq=False)
class GameRecord:
    """
    Move history of one game.

    boards[i] is the board vector the mover saw before playing moves[i].
    """

    boards: Tuple[np.ndarray, ...] = ()
    moves: Tuple[int, ...] = ()
    result: Optional[GameResult] = None

    def __post_init__(self):
        if len(self.boards) != len(self.moves):
            raise ValueError(
                f"GameRecord needs one board per move, got {len(self.boards)} boards "
                f"and {len(self.moves)} moves"
            )

    def __len__(self) -> int:
        return len(self.moves)

    def __eq__(self, other) -> bool:
        if not isinstance(other, GameRecord):
            return NotImplemented
        return (self.moves == other.moves and self.result == other.result
                and all(np.array_equal(a, b) for a, b in zip(self.boards, other.boards)))

    __hash__ = None

    def pairs(self) -> List[Tuple[np.ndarray, int]]:
        return list(zip(self.boards, self.moves))

    @property
    def winner(self) -> Optional[Player]:
        return self.result.winner if self.result is not None else None

    def movers(self) -> List[Player]:
        """Player who made each move, in order."""
        return [Player.A if i % 2 == 0 else Player.B for i in range(len(self.moves))]


class GameSession:
    """
    One game of Connect Four.

    States go NOT_STARTED -> IN_PROGRESS -> FINISHED. Player A always moves
    first and turns strictly alternate. Each applied move is recorded with
    the board vector seen by the mover before the token was placed.
    """

    def __init__(self):
        debug.debug("Initializing GameSession", "game")
        self.board = Board()
        self.state = SessionState.NOT_STARTED
        self.current_player = Player.A
        self.result: Optional[GameResult] = None
        self.last_move: Optional[Tuple[int, int]] = None
        self.generation = 0
        self._boards: List[np.ndarray] = []
        self._moves: List[int] = []

    def start(self) -> 'GameSession':
        """Begin a new game on an empty board with player A to move."""
        self._clear()
        self.state = SessionState.IN_PROGRESS
        debug.debug(f"Game started (generation {self.generation})", "game")
        return self

    def reset(self):
        """Abandon the current game and return to NOT_STARTED."""
        self._clear()
        self.state = SessionState.NOT_STARTED
        debug.debug(f"Game reset (generation {self.generation})", "game")

    def _clear(self):
        self.board.reset()
        self.current_player = Player.A
        self.result = None
        self.last_move = None
        self._boards = []
        self._moves = []
        self.generation += 1

    def apply_move(self, col: int) -> Optional[GameResult]:
        """
        Play col for the current player.

        Args:
            col: Column to place a piece (0-indexed)

        Returns:
            The game result if this move ended the game, None otherwise

        Raises:
            GameNotStarted: start() has not been called
            GameAlreadyOver: the game has already finished
            ColumnOutOfRange, ColumnFull: the move is illegal; the session is unchanged
        """
        if self.state == SessionState.NOT_STARTED:
            raise GameNotStarted("Call start() before playing a move")
        if self.state == SessionState.FINISHED:
            raise GameAlreadyOver(f"Game already finished with {self.result.name}")

        player = self.current_player
        before = self.board.to_vector()
        row = self.board.drop(col, player)

        self._boards.append(before)
        self._moves.append(int(col))
        self.last_move = (row, int(col))
        debug.debug(f"{player} played column {col} (move {len(self._moves)})", "game")

        if check_win_at_position(self.board.grid, row, col):
            self._finish(GameResult.win_for(player))
        elif self.board.is_full():
            self._finish(GameResult.DRAW)
        else:
            self.current_player = player.other()

        return self.result

    def play_intent(self, col: int) -> bool:
        """
        Apply a move coming from a user interface.

        Illegal moves are logged and ignored instead of raised.

        Returns:
            True if the move was applied
        """
        try:
            self.apply_move(col)
        except Connect4Error as e:
            debug.warning(f"Rejected move {col!r}: {e}", "game")
            return False
        return True

    def _finish(self, result: GameResult):
        self.result = result
        self.state = SessionState.FINISHED
        debug.info(f"Game over after {len(self._moves)} moves: {result.name}", "game")

    @property
    def is_over(self) -> bool:
        return self.state == SessionState.FINISHED

    @property
    def winner(self) -> Optional[Player]:
        return self.result.winner if self.result is not None else None

    @property
    def move_count(self) -> int:
        return len(self._moves)

    @property
    def moves(self) -> List[int]:
        return list(self._moves)

    @property
    def record(self) -> GameRecord:
        """Frozen copy of the moves played so far."""
        boards = []
        for vector in self._boards:
            frozen = vector.copy()
            frozen.flags.writeable = False
            boards.append(frozen)
        return GameRecord(tuple(boards), tuple(self._moves), self.result)

    def legal_columns(self) -> List[int]:
        if self.state != SessionState.IN_PROGRESS:
            return []
        return self.board.legal_columns()

    def winning_line(self) -> List[Tuple[int, int]]:
        if self.winner is None:
            return []
        return find_winning_line(self.board, self.winner)

    def snapshot(self) -> Dict[str, Any]:
        """
        Plain-data view of the session for rendering.

        Returns:
            Dictionary with the cells (rows top to bottom), the player to
            move, state, result, winning line and legal columns
        """
        return {
            'cells': self.board.grid.tolist(),
            'current_player': self.current_player.name,
            'state': self.state.name,
            'result': self.result.name if self.result is not None else None,
            'winner': self.winner.name if self.winner is not None else None,
            'winning_line': self.winning_line(),
            'legal_columns': self.legal_columns(),
            'move_count': self.move_count,
            'generation': self.generation,
        }

    def render(self) -> str:
        return self.board.render()


class ConnectFourEnv(gym.Env):
    """
    Connect Four environment following the Gymnasium interface.

    Both players act through step(); rewards are given to the player who
    just moved. Observations are board vectors as produced by
    Board.to_vector().
    """

    metadata = {'render_modes': ['ansi', 'human'], 'render_fps': 4}

    def __init__(self, render_mode: Optional[str] = None):
        debug.debug("Initializing ConnectFourEnv", "env")

        self.action_space = spaces.Discrete(COLS)
        self.observation_space = spaces.Box(low=-1, high=1, shape=(NUM_CELLS,), dtype=np.int8)

        self.session = GameSession()
        self.render_mode = render_mode

        self.reward_win = 1.0
        self.reward_draw = 0.0
        self.reward_step = 0.0
        self.reward_invalid_move = -1.0

    def reset(self, seed: Optional[int] = None,
              options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        super().reset(seed=seed)
        self.session.start()

        if self.render_mode == "human":
            self.render()

        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Play action for the player to move.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        action = int(action)
        if self.session.state == SessionState.IN_PROGRESS and action not in self.session.legal_columns():
            debug.warning(f"Invalid action: {action}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, True, info

        result = self.session.apply_move(action)

        reward = self.reward_step
        terminated = result is not None
        if result == GameResult.DRAW:
            reward = self.reward_draw
        elif result is not None:
            reward = self.reward_win

        if self.render_mode == "human":
            self.render()

        return self._get_observation(), reward, terminated, False, self._get_info()

    def render(self) -> Optional[Union[str, np.ndarray]]:
        if self.render_mode == "ansi":
            return self.session.render()
        if self.render_mode == "human":
            print(self.session.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.session.board.to_vector()

    def _get_info(self) -> Dict:
        snapshot = self.session.snapshot()
        return {
            'valid_moves': snapshot['legal_columns'],
            'current_player': self.session.current_player.value,
            'game_result': snapshot['result'],
            'moves_made': snapshot['move_count'],
            'winning_line': snapshot['winning_line'],
            'last_move': self.session.last_move,
        }

    def close(self):
        pass


if __name__ == "__main__":
    debug.configure(level=DebugLevel.INFO)

    env = ConnectFourEnv(render_mode="human")
    observation, info = env.reset(seed=0)

    done = False
    while not done:
        action = int(env.np_random.choice(info['valid_moves']))
        observation, reward, terminated, truncated, info = env.step(action)
        done = terminated or truncated
        print(f"Action: {action}, reward: {reward}, done: {done}")
