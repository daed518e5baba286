"""Command-line driver for computer-versus-computer matches."""

from __future__ import annotations

import argparse
from typing import Sequence

from salvo.engine.catalog import MAX_COLS, MAX_ROWS, ShipCatalog
from salvo.engine.errors import SalvoError
from salvo.engine.game import GameRecord, MatchSummary, Seat, play_match
from salvo.players import PLAYER_TYPES
from salvo.telemetry import configure_console_logging, init_telemetry, shutdown_telemetry


def _describe_game(number: int, record: GameRecord) -> str:
    if record.winner is None:
        return f"Game {number}: no winner (a fleet could not be placed)"
    stats = record.stats[record.winner]
    return (
        f"Game {number}: {record.winner_name} wins in {stats.shots} shots "
        f"({stats.hits} hits, {stats.misses} misses, {stats.wasted} wasted)"
    )


def _describe_boards(record: GameRecord) -> str:
    sections = []
    for seat in Seat:
        if seat in record.boards:
            sections.append(f"{seat.value} board:\n{record.boards[seat]}")
    return "\n".join(sections)


def _describe_summary(summary: MatchSummary) -> str:
    lines = []
    leader = summary.leader()
    lines.append("DRAW!" if leader is None else f"WINNER IS {leader}!")
    for name in summary.names:
        lines.append(f"{name} won {summary.wins[name]} out of {summary.games} games.")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a match between two computer strategies.")
    kinds = sorted(PLAYER_TYPES)
    parser.add_argument("--player1", choices=kinds, default="good", help="Strategy for player 1.")
    parser.add_argument(
        "--player2", choices=kinds, default="mediocre", help="Strategy for player 2."
    )
    parser.add_argument("--games", type=int, default=1, help="Number of games to play.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument("--rows", type=int, default=MAX_ROWS, help="Board rows.")
    parser.add_argument("--cols", type=int, default=MAX_COLS, help="Board columns.")
    parser.add_argument(
        "--show-boards", action="store_true", help="Print both boards after every game."
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: SALVO_LOG_LEVEL, else WARNING).",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.games < 1:
        parser.error("--games must be at least 1")

    try:
        catalog = ShipCatalog.standard(rows=args.rows, cols=args.cols)
    except SalvoError as exc:
        parser.error(str(exc))

    config = init_telemetry()
    configure_console_logging(args.log_level or config.log_level or "WARNING")

    names = (f"{args.player1}-1", f"{args.player2}-2")
    print(f"COMPETITION BETWEEN {names[0]} AND {names[1]}")
    try:
        summary = play_match(
            args.player1, args.player2, args.games, catalog=catalog, seed=args.seed, names=names
        )
    finally:
        shutdown_telemetry()
    for number, record in enumerate(summary.records, start=1):
        print(_describe_game(number, record))
        if args.show_boards:
            print(_describe_boards(record))
    print(_describe_summary(summary))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
