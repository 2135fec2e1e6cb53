"""Tests for the command-line demo."""

import io
import logging
from collections.abc import Iterator

import pytest

from nested_musig.__main__ import (
    EXIT_ERROR,
    EXIT_SUCCESS,
    ColoredFormatter,
    main,
    parse_participant_count,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Drop the handlers `main` installs so they do not outlive the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_parse_participant_count() -> None:
    assert parse_participant_count("5\n") == 5
    assert parse_participant_count("  1 ") == 1


@pytest.mark.parametrize("raw", ["0", "-3", "abc", ""])
def test_parse_participant_count_rejects(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_participant_count(raw)


def test_formatter_paints_only_with_color() -> None:
    assert ColoredFormatter(use_color=False).paint("ok", ColoredFormatter.GREEN) == "ok"
    painted = ColoredFormatter().paint("ok", ColoredFormatter.GREEN)
    assert painted == f"{ColoredFormatter.GREEN}ok{ColoredFormatter.RESET}"


@pytest.mark.parametrize("use_color", [True, False])
def test_formatter_layout(use_color: bool) -> None:
    record = logging.LogRecord(
        "nested_musig.demo", logging.WARNING, __file__, 1, "value %d", (7,), None
    )
    line = ColoredFormatter(use_color=use_color).format(record)

    suffix = ColoredFormatter.RESET if use_color else ""
    assert line.endswith(f"nested_musig.demo{suffix}: value 7")
    assert "WARNING" in line
    assert ("\x1b[" in line) is use_color


def test_setup_logging_returns_installed_formatter() -> None:
    formatter = setup_logging(verbose=True, no_color=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert root.handlers[-1].formatter is formatter
    assert not formatter.use_color


@pytest.mark.parametrize("participants", ["1", "3", "4"])
def test_demo_succeeds(participants: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-n", participants, "--no-color"]) == EXIT_SUCCESS
    assert capsys.readouterr().out.strip().endswith("SUCCESS")


def test_demo_colors_verdict_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-n", "2"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert f"{ColoredFormatter.GREEN}SUCCESS{ColoredFormatter.RESET}" in out


def test_demo_with_custom_message(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-n", "2", "-m", "pay bob 3 sats", "--no-color", "-v"]) == EXIT_SUCCESS
    assert "SUCCESS" in capsys.readouterr().out


def test_demo_prompts_for_count(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("2\n"))

    assert main(["--no-color"]) == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert "Enter n" in out
    assert "SUCCESS" in out


@pytest.mark.parametrize("participants", ["0", "abc"])
def test_demo_rejects_invalid_count(participants: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-n", participants, "--no-color"]) == EXIT_ERROR
    assert "SUCCESS" not in capsys.readouterr().out


def test_demo_rejects_empty_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main(["--no-color"]) == EXIT_ERROR
