"""
A coordinate on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import InvalidPositionError

# Chess board is always 8x8. Rows run from black's back rank (row 0) down to white's back rank (row 7)
BOARD_DIMENSIONS = (8, 8)
FILES = "abcdefgh"


def is_within_bounds(row: int, col: int) -> bool:
    """Check a pair of coordinates BEFORE building a Position (move generation steps off the board all the time)"""
    return 0 <= row < BOARD_DIMENSIONS[0] and 0 <= col < BOARD_DIMENSIONS[1]


@dataclass(frozen=True, slots=True)
class Position:
    row: int
    col: int

    def __post_init__(self) -> None:
        if not is_within_bounds(self.row, self.col):
            raise InvalidPositionError(
                f"Position ({self.row}, {self.col}) is outside of the {BOARD_DIMENSIONS[0]}x{BOARD_DIMENSIONS[1]} board"
            )

    @classmethod
    def from_algebraic(cls, square: str) -> Position:
        """Algebraic notation: 'a8' is (0, 0), 'h1' is (7, 7)"""
        if len(square) != 2 or square[0] not in FILES or not square[1].isdigit():
            raise InvalidPositionError(f"Cannot interpret {square!r} as a square name")
        col = FILES.index(square[0])
        row = BOARD_DIMENSIONS[0] - int(square[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{FILES[self.col]}{BOARD_DIMENSIONS[0] - self.row}"

    def offset(self, d_row: int, d_col: int) -> Position | None:
        """Neighbouring position along a vector, or None when that would leave the board"""
        row, col = self.row + d_row, self.col + d_col
        if not is_within_bounds(row, col):
            return None
        return Position(row, col)
