"""Grid geometry shared by boards and players."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Point:
    """Immutable grid coordinate."""

    row: int
    col: int

    def shifted(self, orientation: Orientation, steps: int) -> Point:
        """Return the point ``steps`` cells away along ``orientation``."""
        delta_row, delta_col = orientation.delta
        return Point(self.row + delta_row * steps, self.col + delta_col * steps)

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def delta(self) -> tuple[int, int]:
        """Unit step from a ship's anchor towards its far end."""
        if self is Orientation.HORIZONTAL:
            return 0, 1
        return 1, 0


def segment(anchor: Point, length: int, orientation: Orientation) -> list[Point]:
    """Return the ``length`` cells starting at ``anchor`` and running right or down."""
    return [anchor.shifted(orientation, offset) for offset in range(length)]
