"""Ship catalog: the ordered set of ship classes in play."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterator

from pydantic import BaseModel, Field

from .errors import GridSizeError, InvalidFleetError
from .geometry import Point

logger = logging.getLogger(__name__)

MAX_ROWS = 10
MAX_COLS = 10

EMPTY_SYMBOL = "."
MISS_SYMBOL = "o"
HIT_SYMBOL = "X"
RESERVED_SYMBOLS = frozenset({EMPTY_SYMBOL, MISS_SYMBOL, HIT_SYMBOL})


@dataclass(frozen=True)
class ShipDefinition:
    """One ship class; ``ship_id`` is its index in the catalog."""

    ship_id: int
    length: int
    symbol: str
    name: str


class ShipCatalog:
    """Grid dimensions plus the validated, ordered list of ship classes."""

    def __init__(self, rows: int, cols: int) -> None:
        if not 1 <= rows <= MAX_ROWS:
            raise GridSizeError(f"Number of rows must be >= 1 and <= {MAX_ROWS}, got {rows}.")
        if not 1 <= cols <= MAX_COLS:
            raise GridSizeError(f"Number of columns must be >= 1 and <= {MAX_COLS}, got {cols}.")
        self.rows = rows
        self.cols = cols
        self._ships: list[ShipDefinition] = []

    @classmethod
    def standard(cls, rows: int = MAX_ROWS, cols: int = MAX_COLS) -> ShipCatalog:
        """Return the classic five-ship fleet."""
        return FleetConfig.standard(rows=rows, cols=cols).to_catalog()

    def add_ship(self, length: int, symbol: str, name: str) -> bool:
        """Register a ship class; returns False (and logs why) if it is rejected."""
        reason = self._rejection_reason(length, symbol, name)
        if reason is not None:
            logger.warning(
                "ship_definition_rejected",
                extra={"length": length, "symbol": symbol, "ship_name": name, "reason": reason},
            )
            return False
        self._ships.append(ShipDefinition(len(self._ships), length, symbol, name))
        return True

    def _rejection_reason(self, length: int, symbol: str, name: str) -> str | None:
        if length < 1:
            return "length must be >= 1"
        if length > self.rows and length > self.cols:
            return "ship will not fit on the board"
        if len(symbol) != 1 or not symbol.isascii() or not symbol.isprintable():
            return "symbol must be one printable ASCII character"
        if symbol in RESERVED_SYMBOLS:
            return "symbol is reserved"
        if any(ship.symbol == symbol for ship in self._ships):
            return "symbol already used"
        if any(ship.name == name for ship in self._ships):
            return "name already used"
        if self.total_length() + length > self.rows * self.cols:
            return "board is too small to fit all ships"
        return None

    def total_length(self) -> int:
        return sum(ship.length for ship in self._ships)

    def definition(self, ship_id: int) -> ShipDefinition:
        return self._ships[ship_id]

    def length(self, ship_id: int) -> int:
        return self._ships[ship_id].length

    def symbol(self, ship_id: int) -> str:
        return self._ships[ship_id].symbol

    def name(self, ship_id: int) -> str:
        return self._ships[ship_id].name

    def has_ship(self, ship_id: int) -> bool:
        return 0 <= ship_id < len(self._ships)

    def is_valid(self, point: Point) -> bool:
        """Check whether a point lies inside the grid."""
        return 0 <= point.row < self.rows and 0 <= point.col < self.cols

    def random_point(self, rng: random.Random) -> Point:
        return Point(rng.randrange(self.rows), rng.randrange(self.cols))

    def points(self) -> Iterator[Point]:
        """Yield every cell in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield Point(row, col)

    def __len__(self) -> int:
        return len(self._ships)

    def __iter__(self) -> Iterator[ShipDefinition]:
        return iter(self._ships)

    def __repr__(self) -> str:
        return f"ShipCatalog(rows={self.rows}, cols={self.cols}, ships={len(self)})"


class ShipSpec(BaseModel):
    """Declarative description of one ship class."""

    length: int
    symbol: str
    name: str


class FleetConfig(BaseModel):
    """Declarative fleet configuration that builds a :class:`ShipCatalog`."""

    rows: int = MAX_ROWS
    cols: int = MAX_COLS
    ships: list[ShipSpec] = Field(default_factory=list)

    @classmethod
    def standard(cls, rows: int = MAX_ROWS, cols: int = MAX_COLS) -> FleetConfig:
        return cls(
            rows=rows,
            cols=cols,
            ships=[
                ShipSpec(length=5, symbol="A", name="aircraft carrier"),
                ShipSpec(length=4, symbol="B", name="battleship"),
                ShipSpec(length=3, symbol="D", name="destroyer"),
                ShipSpec(length=3, symbol="S", name="submarine"),
                ShipSpec(length=2, symbol="P", name="patrol boat"),
            ],
        )

    def to_catalog(self) -> ShipCatalog:
        """Validate every ship and return the resulting catalog."""
        catalog = ShipCatalog(self.rows, self.cols)
        for spec in self.ships:
            if not catalog.add_ship(spec.length, spec.symbol, spec.name):
                raise InvalidFleetError(f"Ship {spec.name!r} cannot be added to the fleet.")
        if not len(catalog):
            raise InvalidFleetError("A fleet needs at least one ship.")
        return catalog
