"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, GameStatus, PieceType

PROMOTION_CHOICES = (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN)


# --- REQUEST MODELS ---
class MoveRequest(BaseModel):
    """A drag-and-drop of a piece from one square to another"""

    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        def _is_algebraic_notation(value: str) -> bool:
            if len(value) != 2:
                return False

            file_character = value[0]
            rank_character = value[1]
            return file_character in "abcdefgh" and rank_character in "12345678"

        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value is not None and value not in PROMOTION_CHOICES:
            raise InvalidRequestError(f"A pawn cannot promote to a {value}.")
        return value


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    """Snapshot of the session. The board is the piece placement part of a FEN string."""

    fen: str
    side_to_move: Color
    status: GameStatus
    message: Optional[str]
    game_over: bool
    thinking: bool
    winner: Optional[Color]
    clock: dict[Color, int]
    move_history: list[str]
    captured: dict[Color, list[str]]


class MoveResponse(BaseModel):
    accepted: bool
    reason: Optional[str]
    game: GameResponse
