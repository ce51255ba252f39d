"""Models for test execution results and their aggregation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

type Outcome = Literal["passed", "failed", "timed_out", "skipped"]

OUTCOMES: tuple[Outcome, ...] = ("passed", "failed", "timed_out", "skipped")


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single test execution.

    Exactly one outcome per test case; ``error`` is only carried by failed and
    timed out results.
    """

    __test__ = False

    path: Path
    outcome: Outcome
    duration: float
    error: str | None = None

    def __post_init__(self) -> None:
        if self.outcome not in OUTCOMES:
            raise ValueError(f"Unknown outcome: {self.outcome!r}")
        if self.error is not None and self.outcome not in {"failed", "timed_out"}:
            raise ValueError(f"A {self.outcome} result cannot carry an error")

    @property
    def passed(self) -> bool:
        return self.outcome == "passed"

    @property
    def failed(self) -> bool:
        return self.outcome == "failed"

    @property
    def timed_out(self) -> bool:
        return self.outcome == "timed_out"

    @property
    def skipped(self) -> bool:
        return self.outcome == "skipped"


@dataclass(kw_only=True)
class SuiteStats:
    """Counters accumulated over a stream of results."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    timed_out: int = 0
    skipped: int = 0
    duration: float = 0.0

    def add(self, result: TestResult) -> None:
        """Fold one result into the counters."""
        self.total += 1
        match result.outcome:
            case "passed":
                self.passed += 1
            case "failed":
                self.failed += 1
            case "timed_out":
                self.timed_out += 1
            case "skipped":
                self.skipped += 1
        self.duration += result.duration

    def merge(self, other: "SuiteStats") -> None:
        """Add another accumulator's counters into this one."""
        self.total += other.total
        self.passed += other.passed
        self.failed += other.failed
        self.timed_out += other.timed_out
        self.skipped += other.skipped
        self.duration += other.duration

    @property
    def pass_rate(self) -> float:
        """Fraction of results that passed, 0.0 when empty."""
        if self.total == 0:
            return 0.0
        return self.passed / self.total

    def percent(self, count: int) -> float:
        """Percentage of ``count`` relative to the total, 0.0 when empty."""
        if self.total == 0:
            return 0.0
        return count / self.total * 100
