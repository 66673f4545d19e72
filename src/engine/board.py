"""The Board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)

A Board is a value. Every operation that changes the position hands back a NEW Board and leaves the
original untouched, so the rows are stored as tuples: nothing can be shared and then mutated behind
another Board's back.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Self

from src.core.exceptions import EmptySquareError, InvalidFENError, MissingKingError
from src.engine.moves import (
    ATTACK_RULES,
    DEFAULT_PROMOTION,
    MOVEMENT_RULES,
    CandidateMovesFn,
    Move,
    is_promotion_square,
)
from src.engine.pieces import Color, Piece, PieceType
from src.engine.position import BOARD_DIMENSIONS, Position

Row = tuple[Optional[Piece], ...]
Grid = tuple[Row, ...]

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass(frozen=True)
class Board:
    grid: Grid

    def __post_init__(self) -> None:
        rows, cols = BOARD_DIMENSIONS
        if len(self.grid) != rows or any(len(row) != cols for row in self.grid):
            raise InvalidFENError(f"A board must be a {rows}x{cols} grid")

    @classmethod
    def initial(cls) -> Self:
        """The standard starting arrangement"""
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def empty(cls) -> Self:
        rows, cols = BOARD_DIMENSIONS
        return cls(tuple((None,) * cols for _ in range(rows)))

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) are the white pieces.
        """
        fen_by_rows = fen_str.split("/")
        if len(fen_by_rows) != BOARD_DIMENSIONS[0]:
            raise InvalidFENError(
                f"Expected {BOARD_DIMENSIONS[0]} ranks separated by '/', got {fen_str!r}"
            )

        grid: list[Row] = []
        for fen_one_row in fen_by_rows:
            row: list[Optional[Piece]] = []
            for character in fen_one_row:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    row.extend([None] * int(character))
                else:
                    row.append(Piece.from_fen(character))
            if len(row) != BOARD_DIMENSIONS[1]:
                raise InvalidFENError(
                    f"Rank {fen_one_row!r} does not describe {BOARD_DIMENSIONS[1]} squares"
                )
            grid.append(tuple(row))
        return cls(tuple(grid))

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in self.grid)

    def _row_to_fen(self, row: Row) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in row:
            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def __str__(self) -> str:
        return "\n".join(
            " ".join(piece.to_fen() if piece else "." for piece in row)
            for row in self.grid
        )

    # --- QUERIES ---
    def piece_at(self, position: Position) -> Optional[Piece]:
        return self.grid[position.row][position.col]

    def squares(self) -> Iterator[tuple[Position, Optional[Piece]]]:
        """Walk the board row-major: a8, b8, ..., h8, a7, ..., h1"""
        for row_idx, row in enumerate(self.grid):
            for col_idx, piece in enumerate(row):
                yield Position(row_idx, col_idx), piece

    def locate_color(self, color: Color) -> list[Position]:
        return [
            position
            for position, piece in self.squares()
            if piece is not None and piece.color == color
        ]

    def locate_pieces(self, piece: Piece) -> list[Position]:
        return [position for position, found in self.squares() if found == piece]

    def find_king(self, color: Color) -> Position:
        """A board without a king is not a chess position. Fail loudly."""
        kings = self.locate_pieces(Piece(PieceType.KING, color))
        if not kings:
            raise MissingKingError(f"There is no {color.name.lower()} king on the board")
        return kings[0]

    def pseudo_legal_moves(self, position: Position) -> set[Position]:
        """
        Destinations following the movement pattern of the piece on `position`, respecting blockers and capture rules,
        but NOT checking whether the move leaves your own king in check (src/engine/rules.py takes care of that).
        """
        return set(self.candidate_destinations(position))

    def candidate_destinations(self, position: Position) -> list[Position]:
        """Same as `pseudo_legal_moves`, but keeps the order the movement rule produced them in."""
        piece = self.piece_at(position)
        if piece is None:
            raise EmptySquareError(f"No piece on {position.to_algebraic()}")
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
        return movement_rule(position, self)

    def is_attacked(self, position: Position, by_color: Color) -> bool:
        """Could any piece of `by_color` capture on `position`?"""
        return any(
            is_attacked_fn(position, by_color, self) for is_attacked_fn in ATTACK_RULES
        )

    def is_check(self, color: Color) -> bool:
        """Is the king of `color` under attack?"""
        return self.is_attacked(self.find_king(color), color.opponent)

    # --- NEW BOARDS ---
    def apply_move(self, move: Move) -> Self:
        """
        Copy-on-write update of the position.

        The origin gets emptied and whatever stood on the target square is captured.
        A pawn reaching the far end of the board is promoted (to a queen, unless the move says otherwise).
        Legality is NOT checked here.
        """
        piece_that_moved = self.piece_at(move.from_square)
        if piece_that_moved is None:
            raise EmptySquareError(
                f"Cannot move from {move.from_square.to_algebraic()}: the square is empty"
            )

        if is_promotion_square(piece_that_moved, move.to_square):
            piece_that_moved = piece_that_moved.promoted_to(
                move.promote_to or DEFAULT_PROMOTION
            )

        grid = [list(row) for row in self.grid]
        grid[move.from_square.row][move.from_square.col] = None
        grid[move.to_square.row][move.to_square.col] = piece_that_moved
        return type(self)(tuple(tuple(row) for row in grid))

    def apply_moves(self, moves: list[Move]) -> Self:
        """convenience method to apply multiple moves (if you quickly want a board in a given position reached after some moves)"""
        board = self
        for move in moves:
            board = board.apply_move(move)
        return board

    # --- COMPARISON / BOOKKEEPING ---
    def changed_squares(self, other: "Board") -> set[Position]:
        """Squares whose content differs between the two boards"""
        return {
            position
            for (position, piece), (_, other_piece) in zip(self.squares(), other.squares())
            if piece != other_piece
        }

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def _count_material_player(self, color: Color) -> int:
        """Tally the points of material for a specific player"""
        return sum(
            piece.points
            for _, piece in self.squares()
            if piece is not None and piece.color == color
        )
