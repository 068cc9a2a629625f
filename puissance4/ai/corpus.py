"""
corpus.py - Training corpus for supervised self-play learning

The corpus collects (board vector, move) pairs from finished games. It is
append-only: entries are never evicted, and it only shrinks through clear().
"""

import numpy as np
from typing import Dict, Iterable, List, Any

from puissance4.debug import debug
from puissance4.exceptions import CorpusDeserializationFailure
from puissance4.game.rules import GameRecord
from puissance4.utils import COLS, NUM_CELLS


class TrainingCorpus:
    """
    Store (board, move) pairs gathered across many games.

    Boards are the flat vectors produced by Board.to_vector(); moves are the
    columns played from those boards and serve as the training labels.
    """

    def __init__(self):
        debug.debug("Initializing TrainingCorpus", "ai")
        self.boards: List[np.ndarray] = []
        self.moves: List[int] = []
        self.games = 0

    def add_record(self, record: GameRecord):
        """Append every move of a finished game."""
        for board, move in record.pairs():
            self.boards.append(np.array(board, dtype=np.int8))
            self.moves.append(int(move))
        self.games += 1
        debug.trace(f"Added game of {len(record)} moves, corpus size {len(self)}", "ai")

    def extend(self, records: Iterable[GameRecord]):
        for record in records:
            self.add_record(record)

    def merge(self, other: 'TrainingCorpus'):
        """Append all pairs of another corpus."""
        self.boards.extend(b.copy() for b in other.boards)
        self.moves.extend(other.moves)
        self.games += other.games

    def __len__(self) -> int:
        return len(self.moves)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TrainingCorpus):
            return NotImplemented
        return (self.moves == other.moves and len(self.boards) == len(other.boards)
                and all(np.array_equal(a, b) for a, b in zip(self.boards, other.boards)))

    __hash__ = None

    def clear(self) -> None:
        debug.debug("Clearing training corpus", "ai")
        self.boards.clear()
        self.moves.clear()
        self.games = 0

    def to_arrays(self):
        """
        Inputs and one-hot targets for a supervised fit.

        Returns:
            Tuple of (inputs float32 [n, ROWS*COLS], targets float32 [n, COLS])
        """
        return records_to_arrays(self.boards, self.moves)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable {'boards': [...], 'moves': [...]}."""
        return {
            'boards': [board.astype(int).tolist() for board in self.boards],
            'moves': list(self.moves),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrainingCorpus':
        """
        Rebuild a corpus from to_dict() output.

        Raises:
            CorpusDeserializationFailure: the data does not have the expected shape
        """
        if not isinstance(data, dict) or 'boards' not in data or 'moves' not in data:
            raise CorpusDeserializationFailure("Corpus data must contain 'boards' and 'moves'")

        boards, moves = data['boards'], data['moves']
        if not isinstance(boards, list) or not isinstance(moves, list):
            raise CorpusDeserializationFailure("'boards' and 'moves' must be lists")
        if len(boards) != len(moves):
            raise CorpusDeserializationFailure(
                f"Corpus has {len(boards)} boards but {len(moves)} moves"
            )

        corpus = cls()
        for i, (board, move) in enumerate(zip(boards, moves)):
            try:
                raw = np.asarray(board)
            except (TypeError, ValueError) as e:
                raise CorpusDeserializationFailure(f"Board {i} is not numeric: {e}") from e
            if not np.issubdtype(raw.dtype, np.integer):
                raise CorpusDeserializationFailure(f"Board {i} must hold integers, got {raw.dtype}")
            if raw.shape != (NUM_CELLS,) or not np.isin(raw, (-1, 0, 1)).all():
                raise CorpusDeserializationFailure(f"Board {i} is not a valid board vector")
            vector = raw.astype(np.int8)
            if isinstance(move, bool) or not isinstance(move, int) or not 0 <= move < COLS:
                raise CorpusDeserializationFailure(f"Move {i} is not a column index: {move!r}")
            corpus.boards.append(vector)
            corpus.moves.append(move)

        return corpus


def records_to_arrays(boards, moves):
    """
    Stack board vectors and one-hot encode moves.

    Args:
        boards: Sequence of board vectors
        moves: Sequence of column indices, one per board

    Returns:
        Tuple of (inputs float32 [n, ROWS*COLS], targets float32 [n, COLS])
    """
    n = len(moves)
    inputs = np.zeros((n, NUM_CELLS), dtype=np.float32)
    targets = np.zeros((n, COLS), dtype=np.float32)
    for i, (board, move) in enumerate(zip(boards, moves)):
        inputs[i] = board
        targets[i, move] = 1.0
    return inputs, targets
