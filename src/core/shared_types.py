"""
Type definitions used across layers
"""

from enum import StrEnum


class GameStatus(StrEnum):
    """Status of a position, relative to the side to move"""

    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


# --- NOTE: the engine uses its own Color / PieceType enums (src/engine/pieces.py).
# --- These string versions are what the API layer exposes. Convert by member name.


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
