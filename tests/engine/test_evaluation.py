"""Unit tests for /src/engine/evaluation.py"""

import pytest

from src.engine.board import Board
from src.engine.evaluation import PIECE_SQUARE_TABLES, PIECE_VALUES, evaluate
from src.engine.pieces import Color, PieceType


def test_starting_position_is_balanced() -> None:
    board = Board.initial()
    assert evaluate(board, Color.WHITE) == 0
    assert evaluate(board, Color.BLACK) == 0


def test_score_is_from_the_requested_point_of_view() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/Q3K3")
    assert evaluate(board, Color.WHITE) > 800
    assert evaluate(board, Color.BLACK) == -evaluate(board, Color.WHITE)


def test_mirrored_positions_score_the_same() -> None:
    """A white knight on f3 is worth exactly as much to white as a black knight on f6 is to black"""
    white = Board.from_fen("4k3/8/8/8/8/5N2/8/4K3")
    black = Board.from_fen("4k3/8/5n2/8/8/8/8/4K3")
    assert evaluate(white, Color.WHITE) == evaluate(black, Color.BLACK)


def test_central_knight_beats_knight_on_the_rim() -> None:
    center = Board.from_fen("4k3/8/8/8/3N4/8/8/4K3")
    rim = Board.from_fen("4k3/8/8/8/N7/8/8/4K3")
    assert evaluate(center, Color.WHITE) > evaluate(rim, Color.WHITE)


@pytest.mark.parametrize("piece_type", list(PIECE_SQUARE_TABLES.keys()))
def test_tables_cover_the_board(piece_type: PieceType) -> None:
    table = PIECE_SQUARE_TABLES[piece_type]
    assert len(table) == 8
    assert all(len(row) == 8 for row in table)
    assert piece_type in PIECE_VALUES
