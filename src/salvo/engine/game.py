"""Two-player game loop and multi-game matches."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum

from salvo.players.base import Player
from salvo.players.strategies import create_player
from salvo.telemetry import get_tracer, record_game_metric

from .board import Board
from .catalog import ShipCatalog
from .errors import GameStalledError

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.game")

# Shots each side may fire, as a multiple of the cell count, before a game is abandoned.
SHOT_LIMIT_FACTOR = 4


class GamePhase(Enum):
    """High-level lifecycle of a game."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Seat(Enum):
    """The two sides of a game, in turn order."""

    PLAYER1 = "player1"
    PLAYER2 = "player2"

    def opponent(self) -> Seat:
        """Return the opposing seat."""
        return Seat.PLAYER2 if self is Seat.PLAYER1 else Seat.PLAYER1


@dataclass
class PlayerStats:
    """Shot tally for one side of a game."""

    shots: int = 0
    hits: int = 0
    misses: int = 0
    wasted: int = 0
    sinks: int = 0


@dataclass
class GameRecord:
    """Outcome of one game."""

    winner: Seat | None = None
    winner_name: str | None = None
    stats: dict[Seat, PlayerStats] = field(
        default_factory=lambda: {seat: PlayerStats() for seat in Seat}
    )
    duration_s: float = 0.0
    boards: dict[Seat, str] = field(default_factory=dict)


class Game:
    """Runs one game between two players on two fresh boards."""

    def __init__(self, catalog: ShipCatalog, shot_limit: int | None = None) -> None:
        self.catalog = catalog
        self.shot_limit = shot_limit or SHOT_LIMIT_FACTOR * catalog.rows * catalog.cols
        self.phase = GamePhase.SETUP
        self.boards: dict[Seat, Board] = {}
        self.record = GameRecord()

    def play(self, player1: Player, player2: Player) -> Player | None:
        """Play until one fleet is sunk; None if either player cannot place a fleet."""
        players = {Seat.PLAYER1: player1, Seat.PLAYER2: player2}
        self.boards = {seat: Board(self.catalog, owner=player.name) for seat, player in players.items()}
        self.record = GameRecord()
        self.phase = GamePhase.SETUP
        started = time.perf_counter()

        with tracer.start_as_current_span("game.play") as span:
            span.set_attribute("player1", player1.name)
            span.set_attribute("player2", player2.name)
            for seat, player in players.items():
                if not player.place_ships(self.boards[seat]):
                    logger.error(
                        "fleet_placement_failed",
                        extra={"player": player.name, "seat": seat.value},
                    )
                    span.set_attribute("game.aborted", True)
                    return None

            self.phase = GamePhase.IN_PROGRESS
            seat = Seat.PLAYER1
            while True:
                if self._take_turn(seat, players[seat], players[seat.opponent()]):
                    break
                seat = seat.opponent()

            self.phase = GamePhase.FINISHED
            winner = players[seat]
            self.record.winner = seat
            self.record.winner_name = winner.name
            self.record.duration_s = time.perf_counter() - started
            self.record.boards = {seat: board.render() for seat, board in self.boards.items()}
            span.set_attribute("game.winner", winner.name)
            record_game_metric("salvo_games_completed_total", 1, {"winner_kind": winner.kind})
            logger.info(
                "game_finished",
                extra={
                    "winner": winner.name,
                    "shots": self.record.stats[seat].shots,
                    "duration_s": round(self.record.duration_s, 3),
                },
            )
            return winner

    def _take_turn(self, seat: Seat, attacker: Player, defender: Player) -> bool:
        """Fire one shot for ``seat``; True if it sank the last opposing ship."""
        stats = self.record.stats[seat]
        if stats.shots >= self.shot_limit:
            raise GameStalledError(
                f"{attacker.name} fired {stats.shots} shots without sinking the fleet."
            )
        target_board = self.boards[seat.opponent()]

        with tracer.start_as_current_span("game.attack") as span:
            span.set_attribute("player", attacker.name)
            point = attacker.recommend_attack()
            result = target_board.attack(point)
            if result.sunk and result.ship_id is None:
                raise RuntimeError(f"Sinking shot at {point} did not name the ship.")
            attacker.record_attack_result(point, result)
            defender.record_opponent_attack(point)

            stats.shots += 1
            if not result.valid:
                stats.wasted += 1
                outcome = "wasted"
            elif not result.hit:
                stats.misses += 1
                outcome = "miss"
            else:
                stats.hits += 1
                stats.sinks += int(result.sunk)
                outcome = "sunk" if result.sunk else "hit"
            span.set_attribute("shot.outcome", outcome)
            record_game_metric("salvo_shots_total", 1, {"kind": attacker.kind, "result": outcome})

            if outcome == "sunk":
                logger.info(
                    "attack_sank_ship",
                    extra={
                        "player": attacker.name,
                        "row": point.row,
                        "col": point.col,
                        "ship_name": self.catalog.name(result.ship_id),
                    },
                )
            else:
                logger.debug(
                    "attack_resolved",
                    extra={
                        "player": attacker.name,
                        "row": point.row,
                        "col": point.col,
                        "outcome": outcome,
                    },
                )
            return target_board.all_sunk()


@dataclass
class MatchSummary:
    """Results of a series of games between the same two strategies."""

    names: tuple[str, str]
    wins: dict[str, int]
    records: list[GameRecord] = field(default_factory=list)

    @property
    def games(self) -> int:
        return len(self.records)

    def leader(self) -> str | None:
        """Name of the player with more wins, or None on a tie."""
        first, second = self.names
        if self.wins[first] == self.wins[second]:
            return None
        return first if self.wins[first] > self.wins[second] else second


def play_match(
    kind1: str,
    kind2: str,
    games: int,
    catalog: ShipCatalog | None = None,
    seed: int | None = None,
    names: tuple[str, str] | None = None,
) -> MatchSummary:
    """Play ``games`` games, alternating who moves first, with fresh players each game."""
    catalog = catalog or ShipCatalog.standard()
    rng = random.Random(seed)
    name1, name2 = names or (f"{kind1}-1", f"{kind2}-2")
    summary = MatchSummary(names=(name1, name2), wins={name1: 0, name2: 0})

    with tracer.start_as_current_span("game.match") as span:
        span.set_attribute("match.games", games)
        for number in range(1, games + 1):
            player1 = create_player(kind1, name1, catalog, random.Random(rng.getrandbits(32)))
            player2 = create_player(kind2, name2, catalog, random.Random(rng.getrandbits(32)))
            order = (player1, player2) if number % 2 == 1 else (player2, player1)
            game = Game(catalog)
            winner = game.play(*order)
            summary.records.append(game.record)
            if winner is not None:
                summary.wins[winner.name] += 1
            logger.info(
                "match_game_complete",
                extra={"game": number, "winner": winner.name if winner else None},
            )
    return summary
