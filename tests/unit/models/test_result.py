"""Tests for result models."""

from pathlib import Path

import pytest

from conformance_runner.models.result import OUTCOMES, SuiteStats, TestResult
from conformance_runner.testing.factories import TestResultFactory


@pytest.mark.parametrize("outcome", OUTCOMES)
def test_exactly_one_outcome_flag(outcome: str) -> None:
    """Sets exactly one of the outcome flags."""
    error = "boom" if outcome in {"failed", "timed_out"} else None
    result = TestResultFactory.build(outcome=outcome, error=error)

    flags = [result.passed, result.failed, result.timed_out, result.skipped]

    assert flags.count(True) == 1


def test_rejects_unknown_outcome() -> None:
    """Raises ValueError for an outcome outside the known set."""
    with pytest.raises(ValueError, match="Unknown outcome"):
        TestResult(
            path=Path("a.js"),
            outcome="flaky",  # type: ignore[arg-type]
            duration=0.0,
        )


@pytest.mark.parametrize("outcome", ["passed", "skipped"])
def test_rejects_error_on_non_failure(outcome: str) -> None:
    """Only failed and timed out results carry an error."""
    with pytest.raises(ValueError, match="cannot carry an error"):
        TestResult(
            path=Path("a.js"),
            outcome=outcome,  # type: ignore[arg-type]
            duration=0.0,
            error="x",
        )


def test_stats_add_counts_outcomes() -> None:
    """Counts each outcome and sums durations."""
    stats = SuiteStats()
    stats.add(TestResultFactory.build(duration=0.5))
    stats.add(TestResultFactory.build(outcome="failed", error="x", duration=0.25))
    stats.add(TestResultFactory.build(outcome="skipped", duration=0.0))

    assert (stats.total, stats.passed, stats.failed, stats.skipped) == (3, 1, 1, 1)
    assert stats.duration == pytest.approx(0.75)


def test_stats_merge() -> None:
    """Adds another accumulator's counters."""
    stats = SuiteStats(total=2, passed=1, timed_out=1, duration=1.0)

    stats.merge(SuiteStats(total=1, failed=1, duration=0.5))

    assert stats == SuiteStats(total=3, passed=1, failed=1, timed_out=1, duration=1.5)


def test_empty_stats_rates_are_zero() -> None:
    """Reports zero rates without results."""
    stats = SuiteStats()

    assert stats.pass_rate == 0.0
    assert stats.percent(0) == 0.0
