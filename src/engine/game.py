"""
The entrypoint into the domain layer for the service layer.
----

* Stateless boundary functions: `validate_and_apply`, `evaluate_status`, `request_opponent_move`.
  The presentation layer calls these with a board snapshot and gets plain values back.
* `GameSession`: everything one game against the computer needs to remember (turn, clocks, message, game over flag,
  history). It only ever changes through the outputs of the stateless functions above.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.exceptions import GameStateError
from src.core.shared_types import GameStatus
from src.engine.board import Board
from src.engine.moves import PROMOTION_OPTIONS, Move
from src.engine.pieces import Color, Piece, PieceType
from src.engine.position import Position
from src.engine.rules import get_game_status, is_legal_move, make_move
from src.engine.search import get_best_move

logger = logging.getLogger(__name__)

INITIAL_TIME_SECONDS = 10 * 60

# user facing messages
GAME_OVER_MESSAGE = "Game is over! Start a new game."
INVALID_MOVE_MESSAGE = "Invalid move!"
STALEMATE_MESSAGE = "Stalemate! Game is drawn."
NOTHING_TO_UNDO_MESSAGE = "Nothing to undo."
DECIDED_ON_TIME_MESSAGE = "The game was decided on time. Start a new game."


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a move attempt. A rejected move is a normal result, not an error."""

    accepted: bool
    new_board: Optional[Board] = None
    reason: Optional[str] = None

    @classmethod
    def rejected(cls, reason: str) -> Self:
        return cls(accepted=False, reason=reason)


# --- STATELESS ENGINE BOUNDARY ---
def validate_and_apply(
    board: Board,
    from_square: Position,
    to_square: Position,
    side_to_move: Color,
    promote_to: Optional[PieceType] = None,
) -> MoveResult:
    """
    Turn order lives here, not in the rules: `is_legal_move` only checks geometry and king safety.

    1. is there a piece of the side to move? (an empty square gets the same answer as an enemy piece)
    2. is the promotion choice a piece a pawn can become?
    3. is the move legal?
    """
    piece = board.piece_at(from_square)
    if piece is None or piece.color != side_to_move:
        return MoveResult.rejected(_turn_message(side_to_move))

    if promote_to is not None and promote_to not in PROMOTION_OPTIONS:
        return MoveResult.rejected(f"A pawn cannot promote to a {promote_to.name.lower()}.")

    if not is_legal_move(board, from_square, to_square):
        return MoveResult.rejected(INVALID_MOVE_MESSAGE)

    return MoveResult(
        accepted=True, new_board=make_move(board, from_square, to_square, promote_to)
    )


def evaluate_status(board: Board, side: Color) -> GameStatus:
    return get_game_status(board, side)


def request_opponent_move(
    board: Board, side: Color, time_limit_ms: Optional[int] = None
) -> Move:
    """Only valid while `side` can still move. Asking in a finished position is a programming error."""
    status = get_game_status(board, side)
    if status not in (GameStatus.PLAYING, GameStatus.CHECK):
        raise GameStateError(
            f"Cannot search a move for {side.name.lower()}: the position is a {status}"
        )
    return get_best_move(board, side, time_limit_ms)


# --- GAME SESSION ---
@dataclass
class GameSession:
    board: Board
    side_to_move: Color
    status: GameStatus
    clock: dict[Color, int]
    initial_time_seconds: int = INITIAL_TIME_SECONDS
    message: Optional[str] = None
    game_over: bool = False
    thinking: bool = False
    winner: Optional[Color] = None
    moves: list[Move] = field(default_factory=list)
    history: list[Board] = field(default_factory=list)  # board BEFORE each move
    captured: dict[Color, list[Piece]] = field(
        default_factory=lambda: {Color.WHITE: [], Color.BLACK: []}
    )  # pieces captured BY each color

    @classmethod
    def new(cls, initial_time_seconds: int = INITIAL_TIME_SECONDS) -> Self:
        """White to move from the standard starting position, both clocks full."""
        return cls(
            board=Board.initial(),
            side_to_move=Color.WHITE,
            status=GameStatus.PLAYING,
            clock={Color.WHITE: initial_time_seconds, Color.BLACK: initial_time_seconds},
            initial_time_seconds=initial_time_seconds,
        )

    def reset(self) -> None:
        """Start over (the "New Game" button)"""
        fresh = type(self).new(self.initial_time_seconds)
        for name in self.__dataclass_fields__:
            setattr(self, name, getattr(fresh, name))

    def play_move(
        self,
        from_square: Position,
        to_square: Position,
        promote_to: Optional[PieceType] = None,
    ) -> MoveResult:
        """
        Attempt a move for the side to move
        -----

        1. refuse if the game has ended
        2. validate (turn, legality) and get the new board
        3. record captured piece, move, history snapshot
        4. hand the turn over and update status / message
        """
        if self.game_over:
            self.message = GAME_OVER_MESSAGE
            return MoveResult.rejected(GAME_OVER_MESSAGE)

        result = validate_and_apply(
            self.board, from_square, to_square, self.side_to_move, promote_to
        )
        if not result.accepted:
            self.message = result.reason
            return result

        assert result.new_board is not None
        move = self._recorded_move(from_square, to_square, result.new_board)
        self._record_capture(to_square)
        self.history.append(self.board)
        self.moves.append(move)
        self.board = result.new_board
        logger.info("%s played %s", self.side_to_move.name.lower(), move.to_uci())

        self.side_to_move = self.side_to_move.opponent
        self._update_game_status()
        return result

    def play_opponent_move(self, time_limit_ms: Optional[int] = None) -> Move:
        """Let the engine pick the move for the side to move and play it."""
        if self.game_over:
            raise GameStateError(f"Game is over. status: {self.status}")

        move = request_opponent_move(self.board, self.side_to_move, time_limit_ms)
        result = self.play_move(move.from_square, move.to_square, move.promote_to)
        # the engine only hands out legal moves
        assert result.accepted
        return move

    def tick(self, seconds: int = 1) -> None:
        """Run the clock of the side to move. When a flag falls, the game is lost on time."""
        if self.game_over:
            return

        self.clock[self.side_to_move] = max(0, self.clock[self.side_to_move] - seconds)
        if self.clock[self.side_to_move] == 0:
            self.winner = self.side_to_move.opponent
            self.game_over = True
            self.message = f"{_color_name(self.winner)} wins on time!"
            logger.info("%s ran out of time", self.side_to_move.name.lower())

    def undo(self) -> bool:
        """
        Take back the last move (boards are snapshots, so this is just popping one). Clocks keep running as they were.

        A game lost on time stays lost: the fallen flag is not part of any snapshot.
        """
        if self.game_over and 0 in self.clock.values():
            self.message = DECIDED_ON_TIME_MESSAGE
            return False

        if not self.history:
            self.message = NOTHING_TO_UNDO_MESSAGE
            return False

        last_move = self.moves.pop()
        previous_board = self.history.pop()
        captured_piece = previous_board.piece_at(last_move.to_square)
        self.side_to_move = self.side_to_move.opponent
        if captured_piece is not None:
            self.captured[self.side_to_move].pop()

        self.board = previous_board
        self.winner = None
        self.game_over = False
        self._update_game_status()
        return True

    # -- PRIVATE HELPERS ---
    def _recorded_move(
        self, from_square: Position, to_square: Position, new_board: Board
    ) -> Move:
        """Fill in the promotion piece that was actually chosen, so the move history tells the whole story."""
        before = self.board.piece_at(from_square)
        after = new_board.piece_at(to_square)
        promote_to = after.type if before != after and after is not None else None
        return Move(from_square, to_square, promote_to)

    def _record_capture(self, to_square: Position) -> None:
        captured_piece = self.board.piece_at(to_square)
        if captured_piece is not None:
            self.captured[self.side_to_move].append(captured_piece)

    def _update_game_status(self) -> None:
        """NOTE the turn has already been handed over: the side to move is the opponent of the player who just moved."""
        self.status = evaluate_status(self.board, self.side_to_move)
        if self.status == GameStatus.CHECK:
            self.message = f"{_color_name(self.side_to_move)} is in check!"
        elif self.status == GameStatus.CHECKMATE:
            self.winner = self.side_to_move.opponent
            self.game_over = True
            self.message = f"Checkmate! {_color_name(self.winner)} wins!"
        elif self.status == GameStatus.STALEMATE:
            self.game_over = True
            self.message = STALEMATE_MESSAGE
        else:
            self.message = None

        if self.game_over:
            logger.info("Game over: %s", self.message)


def _color_name(color: Color) -> str:
    return color.name.capitalize()


def _turn_message(color: Color) -> str:
    return f"It's {color.name.lower()}'s turn!"
