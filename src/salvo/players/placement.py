"""Fleet placement searches built on Board.place_ship / Board.remove_ship."""

from __future__ import annotations

import logging
import random

from salvo.engine.board import Board
from salvo.engine.geometry import Orientation, Point
from salvo.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.players.placement")

RANDOM_ATTEMPTS_PER_SHIP = 50
BLOCKED_BOARD_ATTEMPTS = 50
# Placement calls allowed per blocked board before giving up on it.
EXHAUSTIVE_SEARCH_BUDGET = 20_000


def place_randomly(board: Board, rng: random.Random) -> bool:
    """Place the whole fleet at random positions, backtracking when a ship cannot fit.

    Each ship gets a fixed number of random anchors; if none of them leads to a
    complete fleet the previous ship is moved.
    """
    with tracer.start_as_current_span("placement.random") as span:
        span.set_attribute("board.owner", board.owner)
        placed = _place_random_from(board, rng, 0)
        span.set_attribute("placement.success", placed)
        if not placed:
            logger.warning("random_placement_failed", extra={"owner": board.owner})
        return placed


def _place_random_from(board: Board, rng: random.Random, ship_id: int) -> bool:
    if ship_id == len(board.catalog):
        return True

    length = board.catalog.length(ship_id)
    for _ in range(RANDOM_ATTEMPTS_PER_SHIP):
        # Shifting the anchor back by the length spreads ships towards the top and left.
        anchor = Point(
            rng.randrange(board.rows) - length + 1,
            rng.randrange(board.cols) - length + 1,
        )
        orientation = rng.choice((Orientation.VERTICAL, Orientation.HORIZONTAL))
        if not board.place_ship(anchor, ship_id, orientation):
            continue
        if _place_random_from(board, rng, ship_id + 1):
            return True
        board.remove_ship(anchor, ship_id, orientation)
    return False


def place_exhaustively(board: Board, rng: random.Random) -> bool:
    """Search every layout, row-major, on boards with half their cells blocked at random.

    Up to ``BLOCKED_BOARD_ATTEMPTS`` differently blocked boards are tried. The
    board is always unblocked before returning.
    """
    with tracer.start_as_current_span("placement.exhaustive") as span:
        span.set_attribute("board.owner", board.owner)
        for attempt in range(1, BLOCKED_BOARD_ATTEMPTS + 1):
            board.block(rng)
            try:
                placed = _place_exhaustive_from(board, 0, [EXHAUSTIVE_SEARCH_BUDGET])
            finally:
                board.unblock()
            if placed:
                span.set_attribute("placement.attempts", attempt)
                logger.debug(
                    "exhaustive_placement_succeeded",
                    extra={"owner": board.owner, "attempts": attempt},
                )
                return True
        logger.warning("exhaustive_placement_failed", extra={"owner": board.owner})
        return False


def _place_exhaustive_from(board: Board, ship_id: int, budget: list[int]) -> bool:
    if ship_id == len(board.catalog):
        return True

    for anchor in board.catalog.points():
        for orientation in (Orientation.HORIZONTAL, Orientation.VERTICAL):
            if budget[0] <= 0:
                return False
            budget[0] -= 1
            if not board.place_ship(anchor, ship_id, orientation):
                continue
            if _place_exhaustive_from(board, ship_id + 1, budget):
                return True
            board.remove_ship(anchor, ship_id, orientation)
    return False
