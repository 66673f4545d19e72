"""Unit tests for src/services/chess_service.py"""

import threading

import pytest

from src.core.config import Settings
from src.core.exceptions import GameStateError
from src.core.shared_types import Color, GameStatus
from src.engine.board import Board
from src.services.chess_service import (
    THINKING_MESSAGE,
    ChessService,
    GameResponse,
    MoveRequest,
    MoveResponse,
)

FUTURE_TIMEOUT = 60


def test_initial_game_state(chess_service: ChessService) -> None:
    response = chess_service.get_game_state()
    assert isinstance(response, GameResponse)
    assert response.fen == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
    assert response.side_to_move == Color.WHITE
    assert response.status == GameStatus.PLAYING
    assert response.clock == {Color.WHITE: 600, Color.BLACK: 600}
    assert response.move_history == []
    assert not response.thinking


def test_human_move_triggers_computer_reply(chess_service: ChessService) -> None:
    response = chess_service.make_move(MoveRequest(from_square="e2", to_square="e4"))
    assert isinstance(response, MoveResponse)
    assert response.accepted
    assert response.game.move_history == ["e2e4"]
    assert response.game.side_to_move == Color.BLACK
    assert response.game.thinking

    pending = chess_service.pending_opponent_move
    assert pending is not None
    after_reply = pending.result(timeout=FUTURE_TIMEOUT)
    assert after_reply.side_to_move == Color.WHITE
    assert len(after_reply.move_history) == 2
    assert not after_reply.thinking
    assert chess_service.get_game_state() == after_reply


def test_human_move_rejected_while_computer_thinks(chess_service: ChessService) -> None:
    chess_service.session.thinking = True
    response = chess_service.make_move(MoveRequest(from_square="e2", to_square="e4"))
    assert not response.accepted
    assert response.reason == THINKING_MESSAGE
    assert response.game.move_history == []


def test_illegal_move_is_rejected_without_reply(chess_service: ChessService) -> None:
    response = chess_service.make_move(MoveRequest(from_square="e2", to_square="e5"))
    assert not response.accepted
    assert response.reason == "Invalid move!"
    assert response.game.message == "Invalid move!"
    assert chess_service.pending_opponent_move is None


def test_cannot_move_the_computers_pieces(chess_service: ChessService) -> None:
    response = chess_service.make_move(MoveRequest(from_square="e7", to_square="e5"))
    assert not response.accepted
    assert response.reason == "It's white's turn!"


def test_cannot_schedule_when_it_is_the_humans_turn(chess_service: ChessService) -> None:
    with pytest.raises(GameStateError):
        chess_service.schedule_opponent_move()


def test_computer_playing_white_moves_first() -> None:
    service = ChessService(
        Settings(opponent_delay_ms=0, search_time_limit_ms=None, computer_color=Color.WHITE)
    )
    try:
        # the reply is scheduled on construction
        pending = service.pending_opponent_move
        assert pending is not None
        response = pending.result(timeout=FUTURE_TIMEOUT)
        assert response.side_to_move == Color.BLACK
        assert len(response.move_history) == 1
    finally:
        service.shutdown()


def test_no_reply_after_game_ends(chess_service: ChessService) -> None:
    """The human delivers mate: nothing is scheduled afterwards"""
    chess_service.session.board = Board.from_fen("6k1/5ppp/8/8/8/8/5PPP/R5K1")
    response = chess_service.make_move(MoveRequest(from_square="a1", to_square="a8"))

    assert response.accepted
    assert response.game.status == GameStatus.CHECKMATE
    assert response.game.game_over
    assert response.game.winner == Color.WHITE
    assert response.game.message == "Checkmate! White wins!"
    assert chess_service.pending_opponent_move is None

    after = chess_service.make_move(MoveRequest(from_square="g1", to_square="f1"))
    assert not after.accepted
    assert after.reason == "Game is over! Start a new game."


def test_tick(chess_service: ChessService) -> None:
    response = chess_service.tick(10)
    assert response.clock == {Color.WHITE: 590, Color.BLACK: 600}


def test_undo_takes_back_a_full_turn(chess_service: ChessService) -> None:
    chess_service.make_move(MoveRequest(from_square="e2", to_square="e4"))
    chess_service.pending_opponent_move.result(timeout=FUTURE_TIMEOUT)

    response = chess_service.undo()
    assert response.move_history == []
    assert response.side_to_move == Color.WHITE


def test_new_game_resets(chess_service: ChessService) -> None:
    chess_service.make_move(MoveRequest(from_square="e2", to_square="e4"))
    chess_service.pending_opponent_move.result(timeout=FUTURE_TIMEOUT)

    response = chess_service.new_game()
    assert response.move_history == []
    assert response.fen == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


def test_new_game_refused_while_thinking(chess_service: ChessService) -> None:
    chess_service.session.thinking = True
    with pytest.raises(GameStateError):
        chess_service.new_game()


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHESS_OPPONENT_DELAY_MS", "0")
    monkeypatch.setenv("CHESS_COMPUTER_COLOR", "white")
    monkeypatch.setenv("CHESS_LOG_LEVEL", "debug")
    service = ChessService.from_env()
    try:
        assert service.settings.opponent_delay_ms == 0
        assert service.settings.log_level == "DEBUG"
        assert service.computer_color.name == "WHITE"
    finally:
        service.shutdown()


def test_undoing_the_computers_opening_move_makes_it_move_again() -> None:
    service = ChessService(
        Settings(opponent_delay_ms=0, search_time_limit_ms=None, computer_color=Color.WHITE)
    )
    try:
        first = service.pending_opponent_move.result(timeout=FUTURE_TIMEOUT)
        assert len(first.move_history) == 1

        response = service.undo()
        assert response.move_history == []
        assert response.thinking

        pending = service.pending_opponent_move
        assert pending is not None
        again = pending.result(timeout=FUTURE_TIMEOUT)
        assert again.move_history == first.move_history
        assert again.side_to_move == Color.BLACK
    finally:
        service.shutdown()


def test_flag_falls_while_the_computer_thinks() -> None:
    """The reply is dropped, the finished game is reported instead of an error"""
    service = ChessService(
        Settings(initial_time_seconds=5, opponent_delay_ms=500, search_time_limit_ms=None)
    )
    try:
        service.make_move(MoveRequest(from_square="e2", to_square="e4"))
        service.tick(5)

        response = service.pending_opponent_move.result(timeout=FUTURE_TIMEOUT)
        assert response.game_over
        assert response.winner == Color.WHITE
        assert response.message == "White wins on time!"
        assert response.move_history == ["e2e4"]
        assert not response.thinking
    finally:
        service.shutdown()


def test_shutdown_drops_a_reply_that_never_started(chess_service: ChessService) -> None:
    # occupy the single worker so the reply stays queued
    release = threading.Event()
    chess_service._executor.submit(release.wait)
    chess_service.make_move(MoveRequest(from_square="e2", to_square="e4"))
    assert chess_service.session.thinking

    threading.Timer(0.5, release.set).start()
    chess_service.shutdown()

    assert chess_service.pending_opponent_move.cancelled()
    assert not chess_service.session.thinking
    assert not chess_service.get_game_state().thinking
