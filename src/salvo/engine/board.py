"""Single-player board: the authoritative grid for one fleet."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

from salvo.telemetry import get_meter, get_tracer

from .catalog import EMPTY_SYMBOL, HIT_SYMBOL, MISS_SYMBOL, ShipCatalog
from .geometry import Orientation, Point, segment

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.board")
meter = get_meter("salvo.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "salvo_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "salvo_engine_shots",
    unit="1",
    description="Shots received by a board",
)


class CellState(Enum):
    """State of one grid cell.

    ``HIT`` doubles as the blocked marker used while searching for a placement.
    """

    EMPTY = "empty"
    OCCUPIED = "occupied"
    MISS = "miss"
    HIT = "hit"


@dataclass(frozen=True)
class ShipInstance:
    """A placed ship; ``anchor`` is its top or left end."""

    ship_id: int
    anchor: Point
    orientation: Orientation


@dataclass(frozen=True)
class AttackResult:
    """Outcome of :meth:`Board.attack`."""

    valid: bool
    hit: bool = False
    sunk: bool = False
    ship_id: int | None = None


INVALID_ATTACK = AttackResult(valid=False)


class Board:
    """Grid state for one player plus the ships placed on it."""

    def __init__(self, catalog: ShipCatalog, owner: str = "unknown") -> None:
        self.catalog = catalog
        self.owner = owner
        self._cells: list[list[CellState]] = [
            [CellState.EMPTY] * catalog.cols for _ in range(catalog.rows)
        ]
        self._occupant: list[list[int | None]] = [
            [None] * catalog.cols for _ in range(catalog.rows)
        ]
        self._instances: list[ShipInstance] = []

    @property
    def rows(self) -> int:
        return self.catalog.rows

    @property
    def cols(self) -> int:
        return self.catalog.cols

    @property
    def ships(self) -> tuple[ShipInstance, ...]:
        return tuple(self._instances)

    def cell(self, point: Point) -> CellState:
        """Return the state of an in-bounds cell."""
        return self._cells[point.row][point.col]

    def occupant(self, point: Point) -> int | None:
        """Return the id of the ship covering ``point``, hit or not."""
        return self._occupant[point.row][point.col]

    def place_ship(self, anchor: Point, ship_id: int, orientation: Orientation) -> bool:
        """Place ship ``ship_id`` at ``anchor``; returns False and changes nothing if illegal."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.id", ship_id)
            span.set_attribute("ship.anchor.row", anchor.row)
            span.set_attribute("ship.anchor.col", anchor.col)
            span.set_attribute("board.owner", self.owner)
            reason = self._placement_rejection(anchor, ship_id, orientation)
            if reason is not None:
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.debug(
                    "ship_placement_failed",
                    extra={
                        "owner": self.owner,
                        "ship_id": ship_id,
                        "orientation": orientation.name,
                        "row": anchor.row,
                        "col": anchor.col,
                        "reason": reason,
                    },
                )
                return False

            for point in segment(anchor, self.catalog.length(ship_id), orientation):
                self._cells[point.row][point.col] = CellState.OCCUPIED
                self._occupant[point.row][point.col] = ship_id
            self._instances.append(ShipInstance(ship_id, anchor, orientation))
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.debug(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "ship_id": ship_id,
                    "orientation": orientation.name,
                    "row": anchor.row,
                    "col": anchor.col,
                },
            )
            return True

    def _placement_rejection(
        self, anchor: Point, ship_id: int, orientation: Orientation
    ) -> str | None:
        if not self.catalog.has_ship(ship_id):
            return "unknown_ship"
        if any(instance.ship_id == ship_id for instance in self._instances):
            return "already_placed"
        for point in segment(anchor, self.catalog.length(ship_id), orientation):
            if not self.catalog.is_valid(point):
                return "out_of_bounds"
            if self.cell(point) is not CellState.EMPTY:
                return "occupied"
        return None

    def remove_ship(self, anchor: Point, ship_id: int, orientation: Orientation) -> bool:
        """Undo a placement; only an exact (anchor, id, orientation) match is removed."""
        wanted = ShipInstance(ship_id, anchor, orientation)
        if wanted not in self._instances:
            return False
        for point in segment(anchor, self.catalog.length(ship_id), orientation):
            self._cells[point.row][point.col] = CellState.EMPTY
            self._occupant[point.row][point.col] = None
        self._instances.remove(wanted)
        logger.debug(
            "ship_removed",
            extra={"owner": self.owner, "ship_id": ship_id, "row": anchor.row, "col": anchor.col},
        )
        return True

    def block(self, rng: random.Random) -> None:
        """Mark half the cells unavailable so placement searches explore a random layout.

        Must be paired with :meth:`unblock` before any attack is made.
        """
        empty = [point for point in self.catalog.points() if self.cell(point) is CellState.EMPTY]
        count = min((self.rows * self.cols) // 2, len(empty))
        for point in rng.sample(empty, count):
            self._cells[point.row][point.col] = CellState.HIT

    def unblock(self) -> None:
        """Revert every blocked cell to empty."""
        for row in range(self.rows):
            for col in range(self.cols):
                if self._cells[row][col] is CellState.HIT and self._occupant[row][col] is None:
                    self._cells[row][col] = CellState.EMPTY

    def attack(self, point: Point) -> AttackResult:
        """Fire at ``point``; out-of-bounds or repeated shots come back with ``valid=False``."""
        with tracer.start_as_current_span("board.attack") as span:
            span.set_attribute("shot.row", point.row)
            span.set_attribute("shot.col", point.col)
            span.set_attribute("board.owner", self.owner)
            if not self.catalog.is_valid(point) or self.cell(point) in (
                CellState.HIT,
                CellState.MISS,
            ):
                span.set_attribute("shot.outcome", "invalid")
                SHOT_COUNTER.add(1, attributes={"outcome": "invalid", "owner": self.owner})
                logger.warning(
                    "shot_invalid",
                    extra={"row": point.row, "col": point.col, "owner": self.owner},
                )
                return INVALID_ATTACK

            if self.cell(point) is CellState.EMPTY:
                self._cells[point.row][point.col] = CellState.MISS
                span.set_attribute("shot.outcome", "miss")
                SHOT_COUNTER.add(1, attributes={"outcome": "miss", "owner": self.owner})
                logger.debug(
                    "shot_miss", extra={"row": point.row, "col": point.col, "owner": self.owner}
                )
                return AttackResult(valid=True)

            self._cells[point.row][point.col] = CellState.HIT
            ship_id = self.occupant(point)
            if ship_id is None:
                raise RuntimeError(f"Occupied cell {point} has no ship recorded.")
            sunk = self._is_sunk(self._instance_for(ship_id))
            outcome = "sunk" if sunk else "hit"
            span.set_attribute("shot.outcome", outcome)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome, "owner": self.owner})
            logger.info(
                "shot_" + outcome,
                extra={
                    "row": point.row,
                    "col": point.col,
                    "ship_name": self.catalog.name(ship_id),
                    "owner": self.owner,
                },
            )
            return AttackResult(valid=True, hit=True, sunk=sunk, ship_id=ship_id)

    def _instance_for(self, ship_id: int) -> ShipInstance:
        return next(instance for instance in self._instances if instance.ship_id == ship_id)

    def _is_sunk(self, instance: ShipInstance) -> bool:
        cells = segment(instance.anchor, self.catalog.length(instance.ship_id), instance.orientation)
        return all(self.cell(point) is CellState.HIT for point in cells)

    def all_sunk(self) -> bool:
        """Check whether every placed ship has been sunk."""
        return all(self._is_sunk(instance) for instance in self._instances)

    def symbol_at(self, point: Point, shots_only: bool = False) -> str:
        state = self.cell(point)
        if state is CellState.HIT:
            return HIT_SYMBOL
        if state is CellState.MISS:
            return MISS_SYMBOL
        if state is CellState.OCCUPIED and not shots_only:
            return self.catalog.symbol(self.occupant(point))  # type: ignore[arg-type]
        return EMPTY_SYMBOL

    def render(self, shots_only: bool = False) -> str:
        """Text view of the grid; ``shots_only`` hides ships that have not been hit."""
        header = "  " + "".join(str(col) for col in range(self.cols))
        lines = [header]
        for row in range(self.rows):
            symbols = "".join(
                self.symbol_at(Point(row, col), shots_only) for col in range(self.cols)
            )
            lines.append(f"{row} {symbols}")
        return "\n".join(lines)
