"""
Move legality & game status
----

The only rules-aware gate between the raw geometric movement (src/engine/moves.py) and the rest of the application.

Legality is checked by simulation: make the candidate move on a new board and reject it if the mover's king is attacked there.
None of these functions care whose turn it is. Turn order is the caller's business (see src/engine/game.py).
"""

from typing import Iterator, Optional

from src.core.shared_types import GameStatus
from src.engine.board import Board
from src.engine.moves import DEFAULT_PROMOTION, Move, is_promotion_square
from src.engine.pieces import Color, PieceType
from src.engine.position import Position


def is_legal_move(board: Board, from_square: Position, to_square: Position) -> bool:
    """
    1. there must be a piece on the starting square
    2. the target square must be one of its pseudo-legal destinations
    3. after the move, the mover's own king must not be under attack
    """
    piece = board.piece_at(from_square)
    if piece is None:
        return False

    if to_square not in board.pseudo_legal_moves(from_square):
        return False

    return not _leaves_king_in_check(board, Move(from_square, to_square), piece.color)


def make_move(
    board: Board,
    from_square: Position,
    to_square: Position,
    promote_to: Optional[PieceType] = None,
) -> Board:
    """
    Apply a move that already passed `is_legal_move`.

    NOTE: like Board.apply_move, this trusts the caller and does not validate again.
    """
    return board.apply_move(Move(from_square, to_square, promote_to))


def legal_moves(board: Board, color: Color) -> Iterator[Move]:
    """
    Lazily enumerate the legal moves of `color`
    ----

    Order is fixed (pieces row-major from a8 to h1, destinations in the order the movement rule finds them),
    which the opponent's tie-break relies on. Pawn moves onto the last rank are promotions to a queen.
    """
    for from_square in board.locate_color(color):
        piece = board.piece_at(from_square)
        # locate_color only returns occupied squares
        assert piece is not None
        for to_square in board.candidate_destinations(from_square):
            promote_to = (
                DEFAULT_PROMOTION if is_promotion_square(piece, to_square) else None
            )
            move = Move(from_square, to_square, promote_to)
            if not _leaves_king_in_check(board, move, color):
                yield move


def has_legal_move(board: Board, color: Color) -> bool:
    """Stops at the first legal move found. Only proving that there is NO legal move needs the full scan."""
    return next(legal_moves(board, color), None) is not None


def is_in_check(board: Board, color: Color) -> bool:
    return board.is_check(color)


def get_game_status(board: Board, side: Color) -> GameStatus:
    """
    Classify the position for the side to move
    ----

    | has a legal move | in check | status    |
    |------------------|----------|-----------|
    | no               | yes      | checkmate |
    | no               | no       | stalemate |
    | yes              | yes      | check     |
    | yes              | no       | playing   |
    """
    in_check = is_in_check(board, side)
    can_move = has_legal_move(board, side)

    if not can_move:
        return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
    return GameStatus.CHECK if in_check else GameStatus.PLAYING


# -- PRIVATE HELPERS ---
def _leaves_king_in_check(board: Board, move: Move, color: Color) -> bool:
    """
    plan:
    1. make the candidate move on a new board (the original stays as it is)
    2. determine if own king is in check on the new board
    """
    return board.apply_move(move).is_check(color)
