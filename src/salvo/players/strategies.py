"""Computer player strategies and the factory that builds them by name."""

from __future__ import annotations

import logging
import random

from salvo.engine.board import AttackResult, Board
from salvo.engine.catalog import ShipCatalog
from salvo.engine.errors import UnknownPlayerError
from salvo.engine.geometry import Orientation, Point

from .base import Player
from .placement import place_exhaustively, place_randomly
from .targeting import TargetingEngine

logger = logging.getLogger(__name__)

CROSSHAIR_REACH = 4
# Crosshair fixation only makes sense when every ship fits inside the reach.
CROSSHAIR_MAX_SHIP_LENGTH = 5


class ProbabilityPlayer(Player):
    """Random placement; shots chosen by the hunt/target heat map."""

    kind = "good"

    def __init__(self, name: str, catalog: ShipCatalog, rng: random.Random | None = None) -> None:
        super().__init__(name, catalog, rng)
        self.engine = TargetingEngine(catalog)

    def place_ships(self, board: Board) -> bool:
        return place_randomly(board, self.rng)

    def recommend_attack(self) -> Point:
        return self.engine.compute_next_attack()

    def record_attack_result(self, point: Point, result: AttackResult) -> None:
        self.engine.record_result(point, result.valid, result.hit, result.sunk, result.ship_id)


class MediocrePlayer(Player):
    """Random shots until a hit, then random shots around that hit until a sink."""

    kind = "mediocre"

    def __init__(self, name: str, catalog: ShipCatalog, rng: random.Random | None = None) -> None:
        super().__init__(name, catalog, rng)
        self.chasing: Point | None = None
        self._chosen: set[Point] = set()

    def place_ships(self, board: Board) -> bool:
        return place_exhaustively(board, self.rng)

    def recommend_attack(self) -> Point:
        point = self._crosshair_choice(self.chasing) if self.chasing is not None else None
        if point is None:
            self.chasing = None
            point = self._random_choice()
        self._chosen.add(point)
        return point

    def _random_choice(self) -> Point:
        unchosen = [point for point in self.catalog.points() if point not in self._chosen]
        if not unchosen:
            # Everything has been fired at; any further shot is wasted anyway.
            return self.catalog.random_point(self.rng)
        return self.rng.choice(unchosen)

    def _crosshair_choice(self, center: Point) -> Point | None:
        if any(ship.length > CROSSHAIR_MAX_SHIP_LENGTH for ship in self.catalog):
            return None
        candidates = []
        for offset in range(-CROSSHAIR_REACH, CROSSHAIR_REACH + 1):
            for point in (
                Point(center.row + offset, center.col),
                Point(center.row, center.col + offset),
            ):
                if self.catalog.is_valid(point) and point not in self._chosen:
                    candidates.append(point)
        if not candidates:
            return None
        return self.rng.choice(candidates)

    def record_attack_result(self, point: Point, result: AttackResult) -> None:
        if self.chasing is None and result.hit and not result.sunk:
            self.chasing = point
        elif self.chasing is not None and result.sunk:
            self.chasing = None


class AwfulPlayer(Player):
    """Ships stacked in the top-left corner; shots walk backwards through the grid."""

    kind = "awful"

    def __init__(self, name: str, catalog: ShipCatalog, rng: random.Random | None = None) -> None:
        super().__init__(name, catalog, rng)
        self._last = Point(0, 0)

    def place_ships(self, board: Board) -> bool:
        return all(
            board.place_ship(Point(ship.ship_id, 0), ship.ship_id, Orientation.HORIZONTAL)
            for ship in self.catalog
        )

    def recommend_attack(self) -> Point:
        row, col = self._last.row, self._last.col
        if col > 0:
            col -= 1
        else:
            col = self.catalog.cols - 1
            row = row - 1 if row > 0 else self.catalog.rows - 1
        self._last = Point(row, col)
        return self._last


PLAYER_TYPES: dict[str, type[Player]] = {
    player_type.kind: player_type for player_type in (ProbabilityPlayer, MediocrePlayer, AwfulPlayer)
}


def create_player(
    kind: str, name: str, catalog: ShipCatalog, rng: random.Random | None = None
) -> Player:
    """Build a player strategy by its registered name."""
    try:
        player_type = PLAYER_TYPES[kind]
    except KeyError as exc:
        raise UnknownPlayerError(
            f"Unknown player type {kind!r}; choose from {sorted(PLAYER_TYPES)}."
        ) from exc
    logger.debug("player_created", extra={"kind": kind, "player_name": name})
    return player_type(name, catalog, rng)
