"""
Exceptions shared across layers.

Rule rejections (illegal move, wrong side moving) are NOT exceptions: they are reported as a
`MoveResult` with `accepted=False`. Exceptions here signal misuse of the engine or invalid input
arriving at the boundary.
"""


class GameError(Exception):
    """Base class of all errors raised by this application"""


# --- CONTRACT VIOLATIONS ---
class ContractViolationError(GameError):
    """A caller broke the engine's calling discipline. Never expected with correct usage."""


class InvalidPositionError(ContractViolationError):
    """Coordinates outside of the 8x8 grid"""


class EmptySquareError(ContractViolationError):
    """Asked for the moves of (or tried to move) a piece on an empty square"""


class MissingKingError(ContractViolationError):
    """A board without a king for the side being evaluated"""


class NoLegalMovesError(ContractViolationError):
    """Asked for the best move in a position where the side to move cannot move at all"""


# --- STATE / INPUT ERRORS ---
class GameStateError(GameError):
    """The requested action does not fit the current state of the game"""


class InvalidFENError(GameError):
    """Malformed piece placement string"""


class InvalidRequestError(GameError, ValueError):
    """Request data from the presentation layer that cannot be interpreted"""
