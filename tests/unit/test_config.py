"""Tests for run configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from conformance_runner.config import RunConfig, format_duration, parse_duration


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("500ms", 0.5),
        ("5s", 5.0),
        ("1m", 60.0),
        ("1h", 3600.0),
        ("1m30s", 90.0),
        ("1.5s", 1.5),
        ("2", 2.0),
    ],
)
def test_parse_duration(value: str, expected: float) -> None:
    """Parses unit-suffixed and bare durations into seconds."""
    assert parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["", "5x", "s", "-1s", "0s", "5s junk"])
def test_parse_duration_rejects_invalid(value: str) -> None:
    """Rejects malformed and non-positive durations."""
    with pytest.raises(ValueError):
        parse_duration(value)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0.25, "250ms"), (5.0, "5s"), (60.0, "1m"), (90.0, "1m30s")],
)
def test_format_duration(seconds: float, expected: str) -> None:
    """Formats seconds the way they are written on the command line."""
    assert format_duration(seconds) == expected


def test_search_dir_narrows_to_subpath() -> None:
    """Searches the subpath but keeps the true suite root."""
    config = RunConfig(path=Path("/suite"), subpath="language/**")

    assert config.test_dir == Path("/suite/test")
    assert config.search_dir == Path("/suite/test/language")


def test_search_dir_defaults_to_test_dir() -> None:
    """Searches the whole test directory without a subpath."""
    config = RunConfig(path=Path("/suite"))

    assert config.search_dir == config.test_dir


def test_rejects_negative_limit() -> None:
    """Rejects a negative test limit."""
    with pytest.raises(ValidationError):
        RunConfig(path=Path("/suite"), limit=-1)


def test_rejects_empty_pattern() -> None:
    """Rejects an empty file pattern."""
    with pytest.raises(ValidationError):
        RunConfig(path=Path("/suite"), pattern="")
