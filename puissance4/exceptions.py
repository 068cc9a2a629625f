"""
exceptions.py - Error taxonomy for the puissance4 engine
"""


class Connect4Error(Exception):
    """Base exception for all puissance4 errors."""
    pass


class InvalidMove(Connect4Error):
    """Raised when a move cannot be placed on the board."""

    def __init__(self, column, message: str = None):
        self.column = column
        super().__init__(message or f"Invalid move in column {column}")


class ColumnOutOfRange(InvalidMove):
    """Raised when a move targets a column outside the grid."""

    def __init__(self, column):
        super().__init__(column, f"Column {column} is out of range")


class ColumnFull(InvalidMove):
    """Raised when a move targets a column with no empty cell."""

    def __init__(self, column):
        super().__init__(column, f"Column {column} is full")


class NoLegalMoves(Connect4Error):
    """Raised when a move is requested on a full board."""
    pass


class InvalidGameState(Connect4Error):
    """Raised when a move is applied outside of a running game."""
    pass


class GameAlreadyOver(InvalidGameState):
    """Raised when a move is attempted after the game has finished."""
    pass


class GameNotStarted(InvalidGameState):
    """Raised when a move is attempted before the game has started."""
    pass


class CorpusDeserializationFailure(Connect4Error):
    """Raised when persisted training data is malformed."""
    pass
