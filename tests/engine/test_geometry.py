"""Tests for grid points and ship segments."""

from salvo.engine.geometry import Orientation, Point, segment


def test_segment_runs_right_or_down() -> None:
    assert segment(Point(2, 3), 3, Orientation.HORIZONTAL) == [
        Point(2, 3),
        Point(2, 4),
        Point(2, 5),
    ]
    assert segment(Point(2, 3), 2, Orientation.VERTICAL) == [Point(2, 3), Point(3, 3)]


def test_single_cell_segment() -> None:
    assert segment(Point(0, 0), 1, Orientation.VERTICAL) == [Point(0, 0)]


def test_shifted_moves_along_orientation() -> None:
    origin = Point(4, 4)
    assert origin.shifted(Orientation.HORIZONTAL, -2) == Point(4, 2)
    assert origin.shifted(Orientation.VERTICAL, 3) == Point(7, 4)


def test_points_are_hashable_values() -> None:
    assert {Point(1, 2), Point(1, 2)} == {Point(1, 2)}
    assert str(Point(1, 2)) == "(1,2)"
