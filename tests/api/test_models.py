"""Unit tests for src/api/models.py"""

import pytest
from pydantic import ValidationError

from src.api.models import GameResponse, MoveRequest, MoveResponse
from src.core.shared_types import Color, GameStatus, PieceType


@pytest.mark.parametrize("from_square, to_square", [("e2", "e4"), ("a1", "h8"), ("g8", "f6")])
def test_valid_move_request(from_square: str, to_square: str) -> None:
    request = MoveRequest(from_square=from_square, to_square=to_square)
    assert request.from_square == from_square
    assert request.to_square == to_square
    assert request.promote_to is None


@pytest.mark.parametrize("square", ["e9", "i2", "e", "e22", "22", "E2", ""])
def test_invalid_square_names(square: str) -> None:
    """InvalidRequestError is a ValueError, which pydantic reports as a ValidationError"""
    with pytest.raises(ValidationError):
        MoveRequest(from_square=square, to_square="e4")
    with pytest.raises(ValidationError):
        MoveRequest(from_square="e2", to_square=square)


@pytest.mark.parametrize(
    "piece_type", [PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT]
)
def test_promotion_choices(piece_type: PieceType) -> None:
    request = MoveRequest(from_square="b7", to_square="b8", promote_to=piece_type)
    assert request.promote_to == piece_type


@pytest.mark.parametrize("piece_type", ["king", "pawn", "dragon"])
def test_invalid_promotion(piece_type: str) -> None:
    with pytest.raises(ValidationError):
        MoveRequest(from_square="b7", to_square="b8", promote_to=piece_type)


def test_move_response_serialises_to_plain_data() -> None:
    game = GameResponse(
        fen="8/8/8/8/8/8/8/8",
        side_to_move=Color.WHITE,
        status=GameStatus.PLAYING,
        message=None,
        game_over=False,
        thinking=False,
        winner=None,
        clock={Color.WHITE: 600, Color.BLACK: 600},
        move_history=["e2e4"],
        captured={Color.WHITE: [], Color.BLACK: ["P"]},
    )
    response = MoveResponse(accepted=True, reason=None, game=game)
    data = response.model_dump(mode="json")
    assert data["game"]["status"] == "playing"
    assert data["game"]["clock"] == {"white": 600, "black": 600}
    assert data["game"]["captured"]["black"] == ["P"]
