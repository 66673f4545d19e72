"""Orchestration of communication from the presentation layer to the engine (and the reverse direction)."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from time import sleep
from typing import Optional, Self

from src.api.models import GameResponse, MoveRequest, MoveResponse
from src.core.config import Settings, configure_logging
from src.core.exceptions import GameStateError
from src.core.shared_types import Color as ColorName
from src.core.shared_types import PieceType as PieceTypeName
from src.engine.game import GameSession, MoveResult
from src.engine.pieces import Color, PieceType
from src.engine.position import Position

logger = logging.getLogger(__name__)

THINKING_MESSAGE = "Computer is thinking..."


class ChessService:
    """
    One game of a human against the computer.
    ----

    The computer's reply runs on a single background worker, so the caller's (UI) thread never blocks on the search.
    Only ONE search can be pending: human moves are refused until the reply has been played.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.computer_color = Color[self.settings.computer_color.name]
        self.session = GameSession.new(self.settings.initial_time_seconds)
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="chess-opponent"
        )
        self._pending: Optional[Future[GameResponse]] = None
        with self._lock:
            if self._is_computer_turn():
                self._submit_opponent_move()

    @classmethod
    def from_env(cls) -> Self:
        """Application entry point: settings from the environment, logging set up accordingly."""
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        return cls(settings)

    # -- presentation layer entry points ---
    def new_game(self) -> GameResponse:
        """Start over. Refused while the computer is still thinking."""
        with self._lock:
            self._assert_not_thinking()
            self.session.reset()
            logger.info("New game started")
            if self._is_computer_turn():
                self._submit_opponent_move()
            return self._create_game_response()

    def get_game_state(self) -> GameResponse:
        with self._lock:
            return self._create_game_response()

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """
        The human tries a move.

        On acceptance, and if the game goes on, the computer's reply gets scheduled right away.
        Use `pending_opponent_move` to wait for it.
        """
        with self._lock:
            if self.session.thinking:
                result = MoveResult.rejected(THINKING_MESSAGE)
            elif self.session.side_to_move == self.computer_color and not self.session.game_over:
                # the human tried to play for the computer
                result = MoveResult.rejected(
                    f"It's {self.session.side_to_move.name.lower()}'s turn!"
                )
            else:
                result = self.session.play_move(
                    Position.from_algebraic(request.from_square),
                    Position.from_algebraic(request.to_square),
                    _to_engine_piece_type(request.promote_to),
                )

            if not result.accepted:
                logger.debug(
                    "Rejected %s%s: %s",
                    request.from_square,
                    request.to_square,
                    result.reason,
                )
            elif self._is_computer_turn():
                self._submit_opponent_move()

            return MoveResponse(
                accepted=result.accepted,
                reason=result.reason,
                game=self._create_game_response(),
            )

    def schedule_opponent_move(self) -> Future[GameResponse]:
        """Hand the computer's move to the background worker. Returns the (single) pending request."""
        with self._lock:
            if self._pending is not None and not self._pending.done():
                return self._pending
            if not self._is_computer_turn():
                raise GameStateError("It is not the computer's turn to move.")
            return self._submit_opponent_move()

    @property
    def pending_opponent_move(self) -> Optional[Future[GameResponse]]:
        return self._pending

    def tick(self, seconds: int = 1) -> GameResponse:
        """Called by the UI timer, once per second."""
        with self._lock:
            self.session.tick(seconds)
            return self._create_game_response()

    def undo(self) -> GameResponse:
        """
        Take back the last full turn (the computer's reply AND the human move before it).

        When the computer's opening move is the only move there is, taking it back makes the computer move again.
        """
        with self._lock:
            self._assert_not_thinking()
            if self.session.undo() and self.session.side_to_move == self.computer_color:
                self.session.undo()
            if self._is_computer_turn():
                self._submit_opponent_move()
            return self._create_game_response()

    def shutdown(self) -> None:
        """Stop the worker. A reply that has not started yet is dropped."""
        self._executor.shutdown(wait=True, cancel_futures=True)
        with self._lock:
            if self._pending is not None and self._pending.cancelled():
                self.session.thinking = False

    # -- Internal helpers --
    def _submit_opponent_move(self) -> Future[GameResponse]:
        """NOTE must be called while holding the lock"""
        self.session.thinking = True
        self._pending = self._executor.submit(self._play_opponent_move)
        return self._pending

    def _play_opponent_move(self) -> GameResponse:
        """Runs on the worker thread."""
        # the pause is for the user, the search itself is done in well under a second
        sleep(self.settings.opponent_delay_ms / 1000)
        with self._lock:
            # nobody sees the flag before the lock is released again
            self.session.thinking = False
            if not self._is_computer_turn():
                # the computer's flag fell during the pause
                logger.info("Computer reply dropped: %s", self.session.message)
                return self._create_game_response()
            try:
                move = self.session.play_opponent_move(
                    self.settings.search_time_limit_ms
                )
            except Exception:
                logger.exception("Computer reply failed")
                raise
            logger.info("Computer played %s", move.to_uci())
            return self._create_game_response()

    def _is_computer_turn(self) -> bool:
        return (
            not self.session.game_over
            and self.session.side_to_move == self.computer_color
        )

    def _assert_not_thinking(self) -> None:
        if self.session.thinking:
            raise GameStateError(THINKING_MESSAGE)

    def _create_game_response(self) -> GameResponse:
        """Convert the session into a GameResponse"""
        session = self.session
        return GameResponse(
            fen=session.board.to_fen(),
            side_to_move=ColorName[session.side_to_move.name],
            status=session.status,
            message=session.message,
            game_over=session.game_over,
            thinking=session.thinking,
            winner=ColorName[session.winner.name] if session.winner else None,
            clock={ColorName[color.name]: seconds for color, seconds in session.clock.items()},
            move_history=[move.to_uci() for move in session.moves],
            captured={
                ColorName[color.name]: [piece.to_fen() for piece in pieces]
                for color, pieces in session.captured.items()
            },
        )


def _to_engine_piece_type(piece_type: Optional[PieceTypeName]) -> Optional[PieceType]:
    return PieceType[piece_type.name] if piece_type is not None else None
