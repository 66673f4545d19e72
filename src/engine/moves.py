"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the pseudo-legal destination sets for each piece type.
Whether a move leaves your own king in check is checked later (see src/engine/rules.py).

All vectors are (d_row, d_col). Row 0 is black's back rank, so white pawns move to LOWER row numbers.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.core.exceptions import EmptySquareError, InvalidRequestError
from src.engine.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Color, Piece, PieceType
from src.engine.position import BOARD_DIMENSIONS, Position


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece_at(self, position: Position) -> Optional[Piece]: ...


Vector = tuple[int, int]

DIAGONALS: list[Vector] = [(-1, 1), (-1, -1), (1, 1), (1, -1)]
STRAIGHTS: list[Vector] = [(-1, 0), (1, 0), (0, 1), (0, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (-2, 1),
    (-2, -1),
    (2, 1),
    (2, -1),
    (-1, 2),
    (-1, -2),
    (1, 2),
    (1, -2),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS

# white moves UP the board (towards row 0), black moves DOWN
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}
PAWN_START_ROW: dict[Color, int] = {Color.WHITE: BOARD_DIMENSIONS[0] - 2, Color.BLACK: 1}
PROMOTION_ROW: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: BOARD_DIMENSIONS[0] - 1}

PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]
DEFAULT_PROMOTION = PieceType.QUEEN


@dataclass(frozen=True, slots=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Position
    to_square: Position
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        if len(uci) not in (4, 5):
            raise InvalidRequestError(f"Cannot interpret {uci!r} as a UCI move")
        from_sq = Position.from_algebraic(uci[:2])
        to_sq = Position.from_algebraic(uci[2:4])
        promote_to = None
        if len(uci) == 5:
            promote_to = FEN_TO_PIECE.get(uci[4])
            if promote_to not in PROMOTION_OPTIONS:
                raise InvalidRequestError(f"Cannot promote to {uci[4]!r}")
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


def _moving_piece(square: Position, board: Board) -> Piece:
    piece = board.piece_at(square)
    if piece is None:
        raise EmptySquareError(f"No piece on {square.to_algebraic()}")
    return piece


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Position, board: Board, directions: list[Vector]
) -> list[Position]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    player_color = _moving_piece(square, board).color

    destinations: list[Position] = []
    for d_row, d_col in directions:
        target = square.offset(d_row, d_col)
        while target is not None:
            blocker = board.piece_at(target)
            if blocker is not None:
                # only the first occupied square counts, and only if the opponent's: then it can be captured.
                if blocker.color != player_color:
                    destinations.append(target)
                break

            destinations.append(target)
            target = target.offset(d_row, d_col)
    return destinations


def single_step_move(
    square: Position, board: Board, deltas: list[Vector]
) -> list[Position]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = _moving_piece(square, board).color

    destinations: list[Position] = []
    for d_row, d_col in deltas:
        target = square.offset(d_row, d_col)
        if target is None:
            continue

        occupant = board.piece_at(target)
        if occupant is None or occupant.color != player_color:
            destinations.append(target)
    return destinations


def candidate_pawn_moves(square: Position, board: Board) -> list[Position]:
    """
    A pawn:
    - moves by a single square forward, only onto an empty square.
    - It can move by two in their first move (so when on their starting row), if both squares are empty
    - takes diagonally, only onto a square holding an enemy piece

    NOTE: no en passant (needs the previous move, and the board carries no history)
    """
    player_color = _moving_piece(square, board).color
    direction = PAWN_DIRECTION[player_color]

    destinations: list[Position] = []
    one_step = square.offset(direction, 0)
    if one_step is not None and board.piece_at(one_step) is None:
        destinations.append(one_step)

        two_steps = one_step.offset(direction, 0)
        on_start_row = square.row == PAWN_START_ROW[player_color]
        if on_start_row and two_steps is not None and board.piece_at(two_steps) is None:
            destinations.append(two_steps)

    for d_col in (-1, 1):
        target = square.offset(direction, d_col)
        if target is None:
            continue
        occupant = board.piece_at(target)
        if occupant is not None and occupant.color != player_color:
            destinations.append(target)
    return destinations


def candidate_knight_moves(square: Position, board: Board) -> list[Position]:
    """Knights always move such that |delta_row| + |delta_col| = 3, jumping over anything in between"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Position, board: Board) -> list[Position]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Position, board: Board) -> list[Position]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Position, board: Board) -> list[Position]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    horizontal_and_vertical_moves = candidate_rook_moves(square, board)
    diagonal_moves = candidate_bishop_moves(square, board)
    return horizontal_and_vertical_moves + diagonal_moves


def candidate_king_moves(square: Position, board: Board) -> list[Position]:
    """
    The king can move by a single square at the time.

    NOTE: no castling (needs to know whether king and rook moved before)
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Position, Board], list[Position]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Position,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_


    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered along any direction is one of the attacking types.
    """
    for d_row, d_col in directions:
        target = square.offset(d_row, d_col)
        while target is not None:
            piece_found = board.piece_at(target)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target = target.offset(d_row, d_col)
    return False


def single_step_attack(
    square: Position,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.
    Hence, they also can only attack along a single direction.
    """
    for d_row, d_col in deltas:
        target = square.offset(d_row, d_col)
        if target is None:
            continue

        piece_found = board.piece_at(target)
        if piece_found == Piece(by_piece_type, by_color):
            return True
    return False


def is_attacked_by_pawn(square: Position, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square -->
    look one row further DOWN the board (where the white pawn would be coming from).
    Hence, the vectors are exactly opposite to the ones used in `candidate_pawn_moves()`
    """
    backwards = -PAWN_DIRECTION[by_color]
    inverse_pawn_take_deltas: list[Vector] = [(backwards, 1), (backwards, -1)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_diagonal_slider(square: Position, by_color: Color, board: Board) -> bool:
    """Bishops and the queen share the diagonal rays"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_by_straight_slider(square: Position, by_color: Color, board: Board) -> bool:
    """Rooks and the queen share the horizontal / vertical rays"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Position, Color, Board], bool]
ATTACK_RULES: list[IsAttackedFn] = [
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_by_diagonal_slider,
    is_attacked_by_straight_slider,
    is_attacked_by_king,
]


# -- PAWN PROMOTION --
def is_promotion_square(piece: Piece, target: Position) -> bool:
    """check if the piece is a pawn that reaches the far end of the board"""
    return piece.type == PieceType.PAWN and target.row == PROMOTION_ROW[piece.color]
