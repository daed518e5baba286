"""Tests for the hunt/target heat-map engine."""

import random

import numpy as np
import pytest
from salvo.engine.board import Board
from salvo.engine.catalog import ShipCatalog
from salvo.engine.errors import FleetDestroyedError, TargetingProtocolError
from salvo.engine.geometry import Point
from salvo.players.placement import place_randomly
from salvo.players.targeting import AttackMode, TargetingEngine


def make_catalog(rows: int, cols: int, *lengths: int) -> ShipCatalog:
    catalog = ShipCatalog(rows, cols)
    for ship_id, length in enumerate(lengths):
        assert catalog.add_ship(length, "ABCDEFGHIJ"[ship_id], f"ship {ship_id}")
    return catalog


def miss(engine: TargetingEngine, point: Point) -> None:
    engine.record_result(point, True, False, False, None)


def hit(engine: TargetingEngine, point: Point, ship_id: int = 0, sunk: bool = False) -> None:
    engine.record_result(point, True, True, sunk, ship_id)


def test_hunt_map_applies_parity() -> None:
    engine = TargetingEngine(make_catalog(2, 3, 2))
    assert engine.mode is AttackMode.HUNT
    assert engine.heat_map().tolist() == [[2, 0, 2], [0, 3, 0]]
    assert engine.compute_next_attack() == Point(1, 1)


def test_hunt_map_skips_missed_cells() -> None:
    engine = TargetingEngine(make_catalog(1, 4, 2))
    miss(engine, Point(0, 1))
    # Only the span (0, 2)-(0, 3) is still possible; parity keeps even columns.
    assert engine.heat_map().tolist() == [[0, 0, 1, 0]]


def test_chase_on_small_board() -> None:
    engine = TargetingEngine(make_catalog(2, 3, 2))

    hit(engine, Point(1, 1))
    assert engine.mode is AttackMode.TARGET
    assert engine.pending_hits == (Point(1, 1),)
    assert engine.heat_map().tolist() == [[0, 1, 0], [1, 0, 1]]
    assert engine.compute_next_attack() == Point(0, 1)

    miss(engine, Point(0, 1))
    assert engine.mode is AttackMode.TARGET
    assert engine.compute_next_attack() == Point(1, 0)

    hit(engine, Point(1, 0), sunk=True)
    assert engine.mode is AttackMode.HUNT
    assert engine.pending_hits == ()
    assert engine.alive == ()
    assert {Point(1, 0), Point(1, 1)} <= engine.missed
    with pytest.raises(FleetDestroyedError):
        engine.compute_next_attack()


def test_line_of_hits_is_amplified() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 3))
    hit(engine, Point(4, 4))
    hit(engine, Point(4, 5))

    heat = engine.heat_map()
    assert heat[4, 3] == 40
    assert heat[4, 2] == 10
    assert heat[3, 4] == 2
    assert heat[4, 4] == 0
    assert heat[4, 5] == 0
    assert engine.compute_next_attack() == Point(4, 3)


def test_ties_go_to_first_cell_in_row_major_order() -> None:
    engine = TargetingEngine(make_catalog(3, 3, 1))
    heat = engine.heat_map()
    assert np.all(heat == heat[0, 0])
    assert engine.compute_next_attack() == Point(0, 0)


def test_falls_back_to_unfired_cell_when_heat_is_exhausted() -> None:
    engine = TargetingEngine(make_catalog(1, 3, 2))
    miss(engine, Point(0, 1))
    assert not engine.heat_map().any()
    assert engine.compute_next_attack() == Point(0, 0)


def test_sink_keeps_target_mode_while_hits_remain() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 2, 3))
    hit(engine, Point(3, 3), ship_id=1)
    hit(engine, Point(3, 4), ship_id=0)
    hit(engine, Point(3, 5), ship_id=0, sunk=True)

    assert engine.mode is AttackMode.TARGET
    assert engine.pending_hits == (Point(3, 3),)
    assert {Point(3, 4), Point(3, 5)} <= engine.missed
    assert Point(3, 3) not in engine.missed
    assert [ship.length for ship in engine.alive] == [3]


def test_vertical_span_extends_towards_first_hit() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 3))
    hit(engine, Point(5, 2))
    hit(engine, Point(4, 2))
    hit(engine, Point(3, 2), sunk=True)

    assert engine.pending_hits == ()
    assert engine.missed == frozenset({Point(3, 2), Point(4, 2), Point(5, 2)})
    assert engine.mode is AttackMode.HUNT


def test_horizontal_span_behind_sinking_shot() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 4, 2))
    hit(engine, Point(6, 3))
    hit(engine, Point(6, 4))
    hit(engine, Point(6, 5))
    hit(engine, Point(6, 6), sunk=True)

    assert engine.missed == frozenset({Point(6, 3), Point(6, 4), Point(6, 5), Point(6, 6)})
    assert engine.pending_hits == ()


def test_hit_that_sinks_leaves_mode_unchanged() -> None:
    engine = TargetingEngine(make_catalog(3, 3, 1, 2))
    hit(engine, Point(0, 0), sunk=True)
    assert engine.mode is AttackMode.HUNT
    assert engine.missed == frozenset({Point(0, 0)})
    assert [ship.length for ship in engine.alive] == [2]


def test_sink_between_two_hits_retires_whole_ship() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 3, 2))
    hit(engine, Point(4, 7))
    hit(engine, Point(2, 7))
    hit(engine, Point(3, 7), sunk=True)

    assert engine.pending_hits == ()
    assert engine.mode is AttackMode.HUNT
    assert engine.missed == frozenset({Point(2, 7), Point(3, 7), Point(4, 7)})
    assert Point(5, 7) not in engine.missed


def test_touching_ships_retire_only_the_sunk_one() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 2, 3))
    hit(engine, Point(5, 2), ship_id=1)
    hit(engine, Point(5, 1), ship_id=0)
    hit(engine, Point(5, 3), ship_id=1)
    hit(engine, Point(5, 0), ship_id=0, sunk=True)

    assert engine.missed == frozenset({Point(5, 0), Point(5, 1)})
    assert engine.pending_hits == (Point(5, 2), Point(5, 3))
    assert engine.mode is AttackMode.TARGET


def boxed_in_engine() -> TargetingEngine:
    engine = TargetingEngine(make_catalog(4, 4, 2, 3))
    hit(engine, Point(1, 1))
    for point in (Point(0, 1), Point(2, 1), Point(1, 0), Point(1, 2)):
        miss(engine, point)
    return engine


def test_target_map_moves_past_boxed_in_hit() -> None:
    engine = boxed_in_engine()
    hit(engine, Point(3, 3), ship_id=1)

    heat = engine.heat_map()
    assert heat[3, 2] == 2
    assert heat[2, 3] == 2
    assert heat[1, 1] == 0
    assert engine.compute_next_attack() == Point(2, 3)


def test_target_map_falls_back_to_hunt_map() -> None:
    engine = boxed_in_engine()
    assert engine.mode is AttackMode.TARGET

    heat = engine.heat_map()
    assert heat.max() > 0
    assert heat[1, 1] == 0
    assert engine.compute_next_attack() not in engine.missed


def test_unresolvable_sink_retires_only_the_sinking_cell() -> None:
    engine = TargetingEngine(make_catalog(10, 10, 3, 2))
    hit(engine, Point(7, 7), ship_id=0, sunk=True)
    assert engine.missed == frozenset({Point(7, 7)})
    assert engine.pending_hits == ()


def test_sink_without_hit_is_a_protocol_error() -> None:
    engine = TargetingEngine(make_catalog(3, 3, 2))
    with pytest.raises(TargetingProtocolError):
        engine.record_result(Point(0, 0), True, False, True, 0)


def test_double_sink_is_a_protocol_error() -> None:
    engine = TargetingEngine(make_catalog(3, 3, 1, 2))
    hit(engine, Point(0, 0), sunk=True)
    with pytest.raises(TargetingProtocolError):
        hit(engine, Point(2, 2), sunk=True)


def test_results_after_fleet_destroyed_are_ignored() -> None:
    engine = TargetingEngine(make_catalog(2, 2, 1))
    hit(engine, Point(0, 0), sunk=True)
    miss(engine, Point(1, 1))
    assert engine.missed == frozenset({Point(0, 0)})


def test_invalid_shot_counts_as_explored() -> None:
    engine = TargetingEngine(make_catalog(3, 3, 2))
    engine.record_result(Point(1, 1), False, False, False, None)
    assert Point(1, 1) in engine.missed
    assert engine.heat_map()[1, 1] == 0


@pytest.mark.parametrize("seed", range(50))
def test_engine_sinks_random_fleet_without_wasting_shots(seed: int) -> None:
    catalog = ShipCatalog.standard()
    board = Board(catalog)
    assert place_randomly(board, random.Random(seed))
    engine = TargetingEngine(catalog)

    shots = 0
    while not board.all_sunk():
        assert engine.heat_map().max() > 0
        point = engine.compute_next_attack()
        result = board.attack(point)
        assert result.valid
        engine.record_result(point, result.valid, result.hit, result.sunk, result.ship_id)
        shots += 1
        assert shots <= 100

    assert engine.alive == ()
