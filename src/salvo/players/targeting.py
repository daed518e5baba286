"""Probability-driven targeting for the strongest computer player.

The engine never looks at the opponent's board. It keeps its own record of
misses and unresolved hits, and before every shot counts how many legal ship
placements cover each cell. In HUNT mode the count runs over the whole grid;
in TARGET mode it is restricted to the row and column through the hit that
started the chase. When a ship is reported sunk, the cells it must have
occupied are taken from the unbroken line of unresolved hits through the
sinking shot.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
import numpy.typing as npt

from salvo.engine.catalog import ShipCatalog, ShipDefinition
from salvo.engine.errors import FleetDestroyedError, TargetingProtocolError
from salvo.engine.geometry import Orientation, Point, segment
from salvo.telemetry import get_meter, get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.players.targeting")
meter = get_meter("salvo.players.targeting")

MODE_COUNTER = meter.create_counter(
    "salvo_targeting_mode_changes",
    unit="1",
    description="Transitions between hunt and target mode",
)

HeatMap = npt.NDArray[np.int64]

# Weighting applied along a line of two or more hits.
LINE_WEIGHT = 2
PROXIMITY_WEIGHT = 10


class AttackMode(Enum):
    """Whether the engine is searching or chasing a known hit."""

    HUNT = "hunt"
    TARGET = "target"


class TargetingEngine:
    """Hunt/target heat-map attacker working only from reported results."""

    def __init__(self, catalog: ShipCatalog) -> None:
        self.catalog = catalog
        self.mode = AttackMode.HUNT
        self._missed: set[Point] = set()
        self._pending: list[Point] = []
        self._fired: set[Point] = set()
        self._alive: list[ShipDefinition] = list(catalog)

    @property
    def missed(self) -> frozenset[Point]:
        """Cells that cannot hold an unsunk ship: misses and cells of sunk ships."""
        return frozenset(self._missed)

    @property
    def pending_hits(self) -> tuple[Point, ...]:
        """Hits whose ship has not been reported sunk, oldest first."""
        return tuple(self._pending)

    @property
    def alive(self) -> tuple[ShipDefinition, ...]:
        return tuple(self._alive)

    def _open(self, point: Point) -> bool:
        return self.catalog.is_valid(point) and point not in self._missed

    def _fits(self, anchor: Point, length: int, orientation: Orientation) -> bool:
        return all(self._open(point) for point in segment(anchor, length, orientation))

    def heat_map(self) -> HeatMap:
        """Return the per-cell weights for the current mode."""
        if not self._alive:
            raise FleetDestroyedError("Every opposing ship has already been sunk.")
        if self.mode is AttackMode.HUNT:
            return self._hunt_map()
        return self._target_map()

    def _hunt_map(self) -> HeatMap:
        heat: HeatMap = np.zeros((self.catalog.rows, self.catalog.cols), dtype=np.int64)
        for ship in self._alive:
            for orientation in Orientation:
                for anchor in self.catalog.points():
                    if not self._fits(anchor, ship.length, orientation):
                        continue
                    for point in segment(anchor, ship.length, orientation):
                        heat[point.row, point.col] += 1

        # Every ship at least `smallest` long crosses a cell of this diagonal class.
        smallest = min(ship.length for ship in self._alive)
        rows, cols = np.indices(heat.shape)
        heat[rows % smallest != cols % smallest] = 0
        for point in self._pending:
            heat[point.row, point.col] = 0
        return heat

    def _target_map(self) -> HeatMap:
        for index, anchor in enumerate(self._pending):
            following = self._pending[index + 1] if index + 1 < len(self._pending) else None
            heat = self._chase_map(anchor, following)
            if heat.any():
                if index:
                    logger.warning(
                        "target_anchor_skipped",
                        extra={"row": anchor.row, "col": anchor.col, "skipped": index},
                    )
                return heat
        logger.warning("target_map_exhausted", extra={"pending": len(self._pending)})
        return self._hunt_map()

    def _chase_map(self, anchor: Point, following: Point | None) -> HeatMap:
        heat: HeatMap = np.zeros((self.catalog.rows, self.catalog.cols), dtype=np.int64)
        for ship in self._alive:
            for orientation in Orientation:
                for offset in range(ship.length):
                    start = anchor.shifted(orientation, -offset)
                    if not self._fits(start, ship.length, orientation):
                        continue
                    for point in segment(start, ship.length, orientation):
                        heat[point.row, point.col] += 1

        if following is not None:
            if following.row == anchor.row:
                heat[anchor.row, :] *= self._line_factors(self.catalog.cols, anchor.col)
            if following.col == anchor.col:
                heat[:, anchor.col] *= self._line_factors(self.catalog.rows, anchor.row)

        for point in self._pending:
            heat[point.row, point.col] = 0
        return heat

    @staticmethod
    def _line_factors(size: int, origin: int) -> npt.NDArray[np.int64]:
        distance = np.abs(np.arange(size) - origin)
        factors = np.maximum(1, PROXIMITY_WEIGHT // np.maximum(distance, 1))
        factors[origin] = 1
        return factors * LINE_WEIGHT

    def compute_next_attack(self) -> Point:
        """Return the highest-weighted cell, taking the first in row-major order on ties."""
        with tracer.start_as_current_span("targeting.compute_next_attack") as span:
            span.set_attribute("targeting.mode", self.mode.value)
            heat = self.heat_map()
            best = int(np.argmax(heat))
            if heat.flat[best] > 0:
                point = Point(*divmod(best, self.catalog.cols))
            else:
                point = self._first_unexplored()
                logger.warning(
                    "heat_map_exhausted",
                    extra={"mode": self.mode.value, "row": point.row, "col": point.col},
                )
            span.set_attribute("shot.row", point.row)
            span.set_attribute("shot.col", point.col)
            return point

    def _first_unexplored(self) -> Point:
        for point in self.catalog.points():
            if point not in self._fired:
                return point
        raise TargetingProtocolError("Every cell has been fired at but ships are still afloat.")

    def record_result(
        self, point: Point, valid: bool, hit: bool, sunk: bool, ship_id: int | None
    ) -> None:
        """Fold one attack result into the history and update the mode."""
        if not self._alive:
            logger.debug("result_ignored_fleet_destroyed", extra={"row": point.row, "col": point.col})
            return

        self._fired.add(point)
        if not hit:
            self._missed.add(point)
        else:
            self._pending.append(point)

        if sunk:
            self._resolve_sink(point, hit, ship_id)

        mode = AttackMode.TARGET if self._pending else AttackMode.HUNT
        if mode is not self.mode:
            self._switch(mode, point)

    def _resolve_sink(self, point: Point, hit: bool, ship_id: int | None) -> None:
        if not hit or ship_id is None:
            raise TargetingProtocolError(f"Sink reported at {point} without a hit on a known ship.")

        self._retire(ship_id)
        for cell in self._reconstruct(point, self.catalog.length(ship_id)):
            self._missed.add(cell)
            self._pending = [pending for pending in self._pending if pending != cell]
        logger.info(
            "ship_sunk",
            extra={
                "ship_name": self.catalog.name(ship_id),
                "row": point.row,
                "col": point.col,
                "alive": len(self._alive),
                "pending": len(self._pending),
            },
        )

    def _retire(self, ship_id: int) -> None:
        for index, ship in enumerate(self._alive):
            if ship.ship_id == ship_id:
                del self._alive[index]
                return
        raise TargetingProtocolError(f"Ship {ship_id} was reported sunk twice.")

    def _reconstruct(self, point: Point, length: int) -> list[Point]:
        """Return the cells of the ship sunk at ``point``.

        Every cell of a sunk ship was hit before the sinking shot, so the ship
        lies inside the unbroken run of unresolved hits through ``point``. When
        the run is longer than the ship (two ships touching end to end) the
        ship is taken to extend towards the oldest in-line hit, which started
        the chase.
        """
        if length == 1:
            return [point]

        reference = self._reference_hit(point)
        orientations = list(Orientation)
        if reference is not None and reference.col == point.col:
            orientations.reverse()
        for orientation in orientations:
            start = self._sunk_start(point, length, orientation, reference)
            if start is not None:
                return segment(start, length, orientation)

        logger.warning(
            "sunk_span_unresolved",
            extra={"row": point.row, "col": point.col, "length": length},
        )
        return [point]

    def _sunk_start(
        self, point: Point, length: int, orientation: Orientation, reference: Point | None
    ) -> Point | None:
        hits = set(self._pending)
        behind = 0
        while behind < length - 1 and point.shifted(orientation, -(behind + 1)) in hits:
            behind += 1
        ahead = 0
        while ahead < length - 1 and point.shifted(orientation, ahead + 1) in hits:
            ahead += 1
        if behind + ahead + 1 < length:
            return None

        earliest = -behind
        latest = min(0, ahead - (length - 1))
        if orientation is Orientation.HORIZONTAL:
            towards_reference = reference is not None and reference.col > point.col
        else:
            towards_reference = reference is not None and reference.row > point.row
        return point.shifted(orientation, latest if towards_reference else earliest)

    def _reference_hit(self, point: Point) -> Point | None:
        for pending in self._pending:
            if pending != point and (pending.row == point.row or pending.col == point.col):
                return pending
        return None

    def _switch(self, mode: AttackMode, point: Point) -> None:
        MODE_COUNTER.add(1, attributes={"mode": mode.value})
        logger.debug(
            "targeting_mode_changed",
            extra={"mode": mode.value, "row": point.row, "col": point.col},
        )
        self.mode = mode
