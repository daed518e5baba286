"""Player strategy interface consumed by the game loop."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod

from salvo.engine.board import AttackResult, Board
from salvo.engine.catalog import ShipCatalog
from salvo.engine.geometry import Point


class Player(ABC):
    """One side of a game: places a fleet, picks shots and learns from results."""

    kind = "abstract"

    def __init__(self, name: str, catalog: ShipCatalog, rng: random.Random | None = None) -> None:
        self.name = name
        self.catalog = catalog
        self.rng = rng or random.Random()

    @abstractmethod
    def place_ships(self, board: Board) -> bool:
        """Place every ship in the catalog on ``board``; False if the fleet does not fit."""

    @abstractmethod
    def recommend_attack(self) -> Point:
        """Return the next cell to fire at."""

    def record_attack_result(self, point: Point, result: AttackResult) -> None:
        """Learn from the outcome of this player's own shot."""

    def record_opponent_attack(self, point: Point) -> None:
        """Learn from a shot the opponent fired at this player's board."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
