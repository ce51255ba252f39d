"""Tests for outcome classification."""

from pathlib import Path

import pytest

from conformance_runner.classifier import (
    Collected,
    classify,
    classify_timeout,
    should_skip,
    skipped,
)
from conformance_runner.runtimes.base import Diagnostic
from conformance_runner.testing.factories import TestCaseFactory, TestMetadataFactory


def test_no_diagnostics_passes() -> None:
    """Classifies a clean run as passed."""
    result = classify(TestCaseFactory.build(), Collected(), 0.1)

    assert result.passed
    assert result.error is None


def test_diagnostics_fail_positive_test() -> None:
    """Classifies diagnostics on a positive test as failed."""
    collected = Collected(
        diagnostics=(Diagnostic(stage="execute", message="Test262Error: boom"),)
    )

    result = classify(TestCaseFactory.build(), collected, 0.1)

    assert result.failed
    assert result.error == "test failed: Test262Error: boom"


def test_diagnostics_pass_negative_test() -> None:
    """Classifies diagnostics on a negative test as passed."""
    case = TestCaseFactory.build(metadata=TestMetadataFactory.build(negative=True))
    collected = Collected(
        diagnostics=(Diagnostic(stage="parse", message="SyntaxError"),)
    )

    assert classify(case, collected, 0.1).passed


def test_earliest_stage_is_authoritative() -> None:
    """Reports the first diagnostic of the earliest failing stage."""
    collected = Collected(
        diagnostics=(
            Diagnostic(stage="execute", message="late"),
            Diagnostic(stage="parse", message="first parse"),
            Diagnostic(stage="parse", message="second parse"),
        )
    )

    first = collected.first()

    assert first is not None
    assert first.message == "first parse"


@pytest.mark.parametrize(
    ("timeout", "expected"),
    [
        (0.5, "test timed out after 500ms"),
        (5.0, "test timed out after 5s"),
        (90.0, "test timed out after 1m30s"),
    ],
)
def test_timeout_message(timeout: float, expected: str) -> None:
    """Formats the timeout the way it was given on the command line."""
    result = classify_timeout(Path("/t/a.js"), timeout, timeout)

    assert result.timed_out
    assert result.error == expected


def test_skipped_has_zero_duration() -> None:
    """Skipped results carry no duration and no error."""
    result = skipped(Path("/t/a.js"))

    assert result.skipped
    assert result.duration == 0.0
    assert result.error is None


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("with (obj) { x; }", True),
        ("// Sputnik es5id: 1\narguments.callee;", True),
        ("// Sputnik es5id: 1\neval('1');", True),
        ("// es5id: 1\narguments.callee;", False),
        ("// Sputnik es5id: 1\nvar x;", False),
        ("var withdrawn = 1;", False),
    ],
)
def test_should_skip(source: str, expected: bool) -> None:
    """Filters dynamic scoping and legacy-suite deprecated API use."""
    assert should_skip(source) is expected
