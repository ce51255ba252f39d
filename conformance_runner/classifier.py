"""Classification of collected diagnostics into test outcomes."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from conformance_runner.config import format_duration
from conformance_runner.errors import TestTimeoutError
from conformance_runner.models.case import TestCase
from conformance_runner.models.result import TestResult
from conformance_runner.runtimes.base import STAGE_ORDER, Diagnostic

DYNAMIC_SCOPE_MARKER = "with ("
LEGACY_SUITE_MARKERS = ("Sputnik", "es5id")
DEPRECATED_API_MARKERS = ("arguments.callee", "__func__", "eval(")


@dataclass(frozen=True, kw_only=True)
class Collected:
    """Diagnostics gathered by a finished unit of work."""

    diagnostics: Sequence[Diagnostic] = field(default_factory=tuple)

    def first(self) -> Diagnostic | None:
        """Return the first diagnostic of the earliest failing stage."""
        for stage in STAGE_ORDER:
            for diagnostic in self.diagnostics:
                if diagnostic.stage == stage:
                    return diagnostic
        return None


def classify(case: TestCase, collected: Collected, duration: float) -> TestResult:
    """Classify a completed unit of work.

    Any diagnostic fails the test unless the test is negative, in which case
    the failure was expected.
    """
    first = collected.first()
    if first is None or case.metadata.negative:
        return TestResult(path=case.path, outcome="passed", duration=duration)
    return TestResult(
        path=case.path,
        outcome="failed",
        duration=duration,
        error=f"test failed: {first.message}",
    )


def classify_timeout(path: Path, timeout: float, duration: float) -> TestResult:
    """Classify a test whose deadline won the race, negative or not."""
    return TestResult(
        path=path,
        outcome="timed_out",
        duration=duration,
        error=str(TestTimeoutError(format_duration(timeout))),
    )


def classify_fault(path: Path, message: str, duration: float) -> TestResult:
    """Classify a test whose unit of work raised instead of reporting."""
    return TestResult(path=path, outcome="failed", duration=duration, error=message)


def skipped(path: Path) -> TestResult:
    return TestResult(path=path, outcome="skipped", duration=0.0)


def uses_dynamic_scoping(source: str) -> bool:
    """Whether the source uses a ``with`` statement."""
    return DYNAMIC_SCOPE_MARKER in source


def uses_legacy_api(source: str) -> bool:
    """Whether a legacy-suite test relies on deprecated API patterns."""
    if not all(marker in source for marker in LEGACY_SUITE_MARKERS):
        return False
    return any(marker in source for marker in DEPRECATED_API_MARKERS)


def should_skip(source: str) -> bool:
    """Legacy-pattern filter applied before execution when filtering is on."""
    return uses_dynamic_scoping(source) or uses_legacy_api(source)
