"""Tests for suite classification and prioritization."""

import io
from pathlib import Path

import pytest

from conformance_runner.suites import SuiteClassifier, SuiteSummaryView, suite_key
from conformance_runner.testing.factories import TestResultFactory

ROOT = Path("/suite/test")


@pytest.mark.parametrize(
    ("relative", "expected"),
    [
        ("language/expressions/addition/S1.js", ("language", "expressions/addition")),
        ("language/expressions/addition/deep/S2.js", ("language", "expressions/addition")),
        ("built-ins/Array/from.js", ("built-ins", "Array")),
        ("built-ins/Foo.js", ("built-ins", "built-ins")),
        ("stray.js", ("other", "other")),
    ],
)
def test_suite_key(relative: str, expected: tuple[str, str]) -> None:
    """Derives suite and subsuite from directory segments."""
    assert suite_key(ROOT / relative, ROOT) == expected


def _fold_many(
    classifier: SuiteClassifier, relative: str, passed: int, failed: int
) -> None:
    for i in range(passed):
        classifier.fold(TestResultFactory.build(path=ROOT / relative / f"p{i}.js"))
    for i in range(failed):
        classifier.fold(
            TestResultFactory.build(
                path=ROOT / relative / f"f{i}.js",
                outcome="failed",
                error="test failed: x",
            )
        )


def test_priorities_require_ten_samples() -> None:
    """Excludes subsuites with fewer than ten samples regardless of pass rate."""
    classifier = SuiteClassifier(suite_root=ROOT)
    _fold_many(classifier, "language/expressions/addition", passed=0, failed=9)
    _fold_many(classifier, "language/statements/for", passed=5, failed=5)
    _fold_many(classifier, "built-ins/Array", passed=9, failed=1)

    priorities = classifier.priorities()

    assert [(p.suite, p.subsuite) for p in priorities] == [
        ("language", "statements/for"),
        ("built-ins", "Array"),
    ]
    assert priorities[0].pass_rate == pytest.approx(50.0)
    assert priorities[0].total == 10


def test_priorities_tie_keeps_name_order() -> None:
    """Keeps name order between subsuites with equal pass rates."""
    classifier = SuiteClassifier(suite_root=ROOT)
    _fold_many(classifier, "language/b/x", passed=5, failed=5)
    _fold_many(classifier, "language/a/x", passed=5, failed=5)

    assert [p.subsuite for p in classifier.priorities()] == ["a/x", "b/x"]


def test_accumulates_all_levels() -> None:
    """Accumulates per subsuite, per suite and grand total."""
    classifier = SuiteClassifier(suite_root=ROOT)
    _fold_many(classifier, "language/expressions/addition", passed=2, failed=1)
    _fold_many(classifier, "language/literals", passed=1, failed=0)

    assert classifier.subsuites["language"]["expressions/addition"].total == 3
    assert classifier.subsuites["language"]["literals"].total == 1
    assert classifier.suites["language"].total == 4
    assert classifier.grand_total.failed == 1


def test_summary_view_renders_table() -> None:
    """Prints subsuite rows, suite totals, the grand total and priorities."""
    stream = io.StringIO()
    view = SuiteSummaryView(classifier=SuiteClassifier(suite_root=ROOT), stream=stream)
    view.on_start([])
    for i in range(10):
        view.on_result(
            TestResultFactory.build(path=ROOT / "language/literals/n" / f"{i}.js")
        )
    view.on_finish()

    output = stream.getvalue()
    assert "=== Test262 Suite Results ===" in output
    assert "language/literals/n" in output
    assert "language (TOTAL)" in output
    assert "GRAND TOTAL" in output
    assert "=== Subsuite Priority Recommendations ===" in output
    assert "100.0% pass rate (10 tests)" in output
