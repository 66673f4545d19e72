"""
Opponent move selection
----

Negamax with alpha-beta pruning, searched with iterative deepening up to a fixed depth.

* Scores come from `evaluate()` and are always from the point of view of the side to move at that node.
* A checkmate found at `ply` half-moves from the root scores -(MATE_SCORE - ply): quicker mates are preferred.
* Ties at the root go to the move found FIRST in `legal_moves()` enumeration order, so results are reproducible.
* An optional deadline cuts deeper iterations short. Depth 1 always completes, so there is always a move to play.
"""

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Optional

from src.core.exceptions import NoLegalMovesError
from src.engine.board import Board
from src.engine.evaluation import PIECE_VALUES, evaluate
from src.engine.moves import Move
from src.engine.pieces import Color
from src.engine.rules import is_in_check, legal_moves

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DEPTH = 2
MATE_SCORE = 100_000
INF_SCORE = 1_000_000


@dataclass(frozen=True)
class SearchResult:
    move: Move
    score: int
    depth: int
    nodes: int


class _SearchTimeout(Exception):
    """Raised inside the tree walk when the deadline passed. Never leaves this module."""


class _Searcher:
    """Per-call search state (node counter, deadline). Not shared between calls."""

    def __init__(self, deadline: Optional[float]) -> None:
        self.deadline = deadline
        self.nodes = 0
        # the first iteration must always finish
        self.enforce_deadline = False

    def search_root(self, board: Board, color: Color, depth: int) -> tuple[Move, int]:
        best_move: Optional[Move] = None
        best_score = -INF_SCORE
        alpha = -INF_SCORE

        for move in legal_moves(board, color):
            score = -self.negamax(
                board.apply_move(move), color.opponent, depth - 1, 1, -INF_SCORE, -alpha
            )
            # strictly better only: equal scores keep the earlier move
            if best_move is None or score > best_score:
                best_move, best_score = move, score
                alpha = max(alpha, score)

        if best_move is None:
            raise NoLegalMovesError(
                f"{color.name.lower()} has no legal moves in this position"
            )
        return best_move, best_score

    def negamax(
        self, board: Board, color: Color, depth: int, ply: int, alpha: int, beta: int
    ) -> int:
        self.nodes += 1
        self._check_deadline()

        if depth == 0:
            return evaluate(board, color)

        moves = _order_moves(board, list(legal_moves(board, color)))
        if not moves:
            # checkmate or stalemate
            return -(MATE_SCORE - ply) if is_in_check(board, color) else 0

        best_score = -INF_SCORE
        for move in moves:
            score = -self.negamax(
                board.apply_move(move), color.opponent, depth - 1, ply + 1, -beta, -alpha
            )
            best_score = max(best_score, score)
            alpha = max(alpha, score)
            if alpha >= beta:
                break
        return best_score

    def _check_deadline(self) -> None:
        if (
            self.enforce_deadline
            and self.deadline is not None
            and perf_counter() >= self.deadline
        ):
            raise _SearchTimeout


def _order_moves(board: Board, moves: list[Move]) -> list[Move]:
    """
    Captures first, most valuable victim first (only inside the tree, never at the root).
    sorted() is stable, so quiet moves keep their enumeration order.
    """

    def capture_value(move: Move) -> int:
        victim = board.piece_at(move.to_square)
        return PIECE_VALUES[victim.type] if victim is not None else -1

    return sorted(moves, key=capture_value, reverse=True)


def search(
    board: Board,
    color: Color,
    depth: int = DEFAULT_SEARCH_DEPTH,
    time_limit_ms: Optional[int] = None,
) -> SearchResult:
    """
    Iterative deepening: search depth 1, 2, ... up to `depth`.
    When the deadline hits during an iteration, the result of the last COMPLETED iteration is returned.
    """
    if depth < 1:
        raise ValueError(f"Search depth must be >= 1, got {depth}")

    started = perf_counter()
    deadline = started + time_limit_ms / 1000 if time_limit_ms is not None else None
    searcher = _Searcher(deadline)

    result: Optional[SearchResult] = None
    for current_depth in range(1, depth + 1):
        try:
            move, score = searcher.search_root(board, color, current_depth)
        except _SearchTimeout:
            logger.debug(
                "Deadline reached during depth %d, keeping depth %d result",
                current_depth,
                current_depth - 1,
            )
            break
        result = SearchResult(move, score, current_depth, searcher.nodes)
        logger.debug(
            "depth=%d move=%s score=%d nodes=%d elapsed=%.3fs",
            current_depth,
            move.to_uci(),
            score,
            searcher.nodes,
            perf_counter() - started,
        )
        searcher.enforce_deadline = True

    # depth 1 never times out, so there is always a result here
    assert result is not None
    return result


def get_best_move(
    board: Board,
    side: Color,
    time_limit_ms: Optional[int] = None,
) -> Move:
    """
    The move the computer plays for `side`.

    Callers must only ask when `side` can move (status playing or check). Otherwise: NoLegalMovesError.
    """
    result = search(board, side, DEFAULT_SEARCH_DEPTH, time_limit_ms)
    logger.info(
        "Best move for %s: %s (score %d, depth %d, %d nodes)",
        side.name.lower(),
        result.move.to_uci(),
        result.score,
        result.depth,
        result.nodes,
    )
    return result.move
