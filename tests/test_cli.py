"""Command-line driver tests."""

import logging

import pytest
from salvo import cli
from salvo.telemetry import TelemetryConfig


@pytest.fixture(autouse=True)
def telemetry_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    calls: list[str] = []
    monkeypatch.setattr(cli, "init_telemetry", lambda: calls.append("init") or TelemetryConfig())
    monkeypatch.setattr(cli, "shutdown_telemetry", lambda: calls.append("shutdown"))
    return calls


def test_awful_match_output(
    capsys: pytest.CaptureFixture[str], telemetry_calls: list[str]
) -> None:
    exit_code = cli.main(["--player1", "awful", "--player2", "awful", "--games", "3"])
    assert exit_code == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "COMPETITION BETWEEN awful-1 AND awful-2"
    assert lines[1].startswith("Game 1: awful-1 wins in 100 shots")
    assert lines[2].startswith("Game 2: awful-2 wins")
    assert lines[-3:] == [
        "WINNER IS awful-1!",
        "awful-1 won 2 out of 3 games.",
        "awful-2 won 1 out of 3 games.",
    ]
    assert telemetry_calls == ["init", "shutdown"]


def test_show_boards_prints_both_grids(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["--player1", "awful", "--player2", "awful", "--show-boards"])
    out = capsys.readouterr().out
    assert "player1 board:" in out
    assert "player2 board:" in out
    assert "  0123456789" in out


def test_even_match_is_a_draw(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["--player1", "awful", "--player2", "awful", "--games", "2"])
    assert "DRAW!" in capsys.readouterr().out


def test_seeded_matches_repeat(capsys: pytest.CaptureFixture[str]) -> None:
    args = ["--player1", "good", "--player2", "mediocre", "--games", "2", "--seed", "3"]
    cli.main(args)
    first = capsys.readouterr().out
    cli.main(args)
    assert capsys.readouterr().out == first


@pytest.mark.parametrize(
    "args",
    [["--games", "0"], ["--rows", "11"], ["--rows", "3", "--cols", "3"], ["--player1", "human"]],
)
def test_bad_arguments_exit(args: list[str], telemetry_calls: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(args)
    assert excinfo.value.code == 2
    assert telemetry_calls == []


@pytest.fixture
def salvo_logger():
    logger = logging.getLogger("salvo")
    root_level = logging.getLogger().level
    previous = logger.level
    yield logger
    logger.setLevel(previous)
    logging.getLogger().setLevel(root_level)


def test_log_level_comes_from_telemetry_config(
    monkeypatch: pytest.MonkeyPatch, salvo_logger: logging.Logger
) -> None:
    monkeypatch.setattr(cli, "init_telemetry", lambda: TelemetryConfig(log_level="DEBUG"))
    cli.main(["--player1", "awful", "--player2", "awful"])
    assert salvo_logger.level == logging.DEBUG


def test_log_level_flag_beats_telemetry_config(
    monkeypatch: pytest.MonkeyPatch, salvo_logger: logging.Logger
) -> None:
    monkeypatch.setattr(cli, "init_telemetry", lambda: TelemetryConfig(log_level="DEBUG"))
    cli.main(["--player1", "awful", "--player2", "awful", "--log-level", "ERROR"])
    assert salvo_logger.level == logging.ERROR

    monkeypatch.setattr(cli, "init_telemetry", lambda: TelemetryConfig())
    cli.main(["--player1", "awful", "--player2", "awful"])
    assert salvo_logger.level == logging.WARNING
