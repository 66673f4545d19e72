"""Unit tests for /src/engine/position.py"""

import pytest

from src.core.exceptions import InvalidPositionError
from src.engine.position import BOARD_DIMENSIONS, Position, is_within_bounds


@pytest.mark.parametrize(
    "square_name, row, col",
    [
        ("a8", 0, 0),
        ("h8", 0, 7),
        ("a1", 7, 0),
        ("h1", 7, 7),
        ("e2", 6, 4),
        ("d5", 3, 3),
    ],
)
def test_from_algebraic(square_name: str, row: int, col: int) -> None:
    """Row 0 is black's back rank (rank 8), column 0 is the a-file"""
    assert Position.from_algebraic(square_name) == Position(row, col)


@pytest.mark.parametrize("square_name", ["a8", "h1", "e4", "c6"])
def test_to_algebraic(square_name: str) -> None:
    assert Position.from_algebraic(square_name).to_algebraic() == square_name


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (8, 0), (0, 8), (10, 10)])
def test_out_of_bounds_is_a_contract_violation(row: int, col: int) -> None:
    assert not is_within_bounds(row, col)
    with pytest.raises(InvalidPositionError):
        Position(row, col)


@pytest.mark.parametrize("square_name", ["i1", "a9", "a0", "e", "e22", "44"])
def test_invalid_square_names(square_name: str) -> None:
    with pytest.raises(InvalidPositionError):
        Position.from_algebraic(square_name)


def test_offset_stays_on_board() -> None:
    e2 = Position.from_algebraic("e2")
    assert e2.offset(-1, 0) == Position.from_algebraic("e3")
    assert e2.offset(-2, 1) == Position.from_algebraic("f4")


def test_offset_off_the_board_is_none() -> None:
    corner = Position(BOARD_DIMENSIONS[0] - 1, 0)
    assert corner.offset(1, 0) is None
    assert corner.offset(0, -1) is None


def test_positions_are_hashable_values() -> None:
    assert {Position(1, 2), Position(1, 2)} == {Position(1, 2)}
