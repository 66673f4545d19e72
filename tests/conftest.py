"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest

from src.core.config import Settings
from src.engine.board import Board
from src.engine.moves import Move
from src.services.chess_service import ChessService

EMPTY_FEN = "/".join(["8"] * 8)
FOOLS_MATE_UCI = ["f2f3", "e7e5", "g2g4", "d8h4"]


@pytest.fixture
def board_after() -> Callable[[list[str]], Board]:
    """Call the inner function with a list of UCI moves played from the starting position"""

    def _play(moves_uci: list[str]) -> Board:
        return Board.initial().apply_moves([Move.from_uci(uci) for uci in moves_uci])

    return _play


@pytest.fixture
def fast_settings() -> Settings:
    """No thinking pause and no search deadline: makes the computer's reply quick and reproducible."""
    return Settings(opponent_delay_ms=0, search_time_limit_ms=None)


@pytest.fixture
def chess_service(fast_settings: Settings) -> Generator[ChessService, None, None]:
    """The worker thread is shut down at teardown."""
    service = ChessService(fast_settings)
    try:
        yield service
    finally:
        service.shutdown()
