"""Suite and subsuite classification with remediation prioritization."""

import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from conformance_runner.models.result import SuiteStats, TestResult
from conformance_runner.tree import relative_parts

OTHER_SUITE = "other"
MIN_PRIORITY_SAMPLES = 10

ROW_FORMAT = "{:<25} {:>8} {:>8} {:>8} {:>8} {:>8} {:>7.1f}% {:>12}"


def suite_key(path: Path, suite_root: Path) -> tuple[str, str]:
    """Derive (suite, subsuite) from a path relative to the true suite root.

    The suite is the first directory. The subsuite joins the next two
    directories when there are that many, else takes the next one, else
    repeats the suite name.

    Args:
        path: Test file path (e.g., "./test/language/expressions/addition/S1.js")
        suite_root: The true suite root (e.g., "./test"), not the searched subtree

    Returns:
        The pair (e.g., ("language", "expressions/addition"))

    """
    dirs = relative_parts(path, suite_root)[:-1]
    if not dirs:
        return OTHER_SUITE, OTHER_SUITE
    suite = dirs[0]
    if len(dirs) >= 3:
        return suite, f"{dirs[1]}/{dirs[2]}"
    if len(dirs) == 2:
        return suite, dirs[1]
    return suite, suite


@dataclass(frozen=True, kw_only=True)
class Priority:
    """A subsuite ranked for remediation."""

    suite: str
    subsuite: str
    pass_rate: float
    total: int


@dataclass(kw_only=True)
class SuiteClassifier:
    """Regroups the result stream by suite and subsuite."""

    suite_root: Path
    subsuites: dict[str, dict[str, SuiteStats]] = field(default_factory=dict)
    suites: dict[str, SuiteStats] = field(default_factory=dict)
    grand_total: SuiteStats = field(default_factory=SuiteStats)

    def fold(self, result: TestResult) -> tuple[str, str]:
        """Accumulate one result at subsuite, suite and grand-total level."""
        suite, subsuite = suite_key(result.path, self.suite_root)
        by_sub = self.subsuites.setdefault(suite, {})
        by_sub.setdefault(subsuite, SuiteStats()).add(result)
        self.suites.setdefault(suite, SuiteStats()).add(result)
        self.grand_total.add(result)
        return suite, subsuite

    def priorities(self, min_samples: int = MIN_PRIORITY_SAMPLES) -> Sequence[Priority]:
        """Subsuites with enough samples, lowest pass rate first."""
        ranked = [
            Priority(
                suite=suite,
                subsuite=subsuite,
                pass_rate=stats.pass_rate * 100,
                total=stats.total,
            )
            for suite in sorted(self.subsuites)
            for subsuite, stats in sorted(self.subsuites[suite].items())
            if stats.total >= min_samples
        ]
        ranked.sort(key=lambda p: p.pass_rate)
        return ranked

    def rows(self) -> Iterator[tuple[str, SuiteStats]]:
        """Yield (label, stats) per subsuite, then the suite total, per suite."""
        for suite in sorted(self.subsuites):
            for subsuite, stats in sorted(self.subsuites[suite].items()):
                yield f"{suite}/{subsuite}", stats
            yield f"{suite} (TOTAL)", self.suites[suite]


def _row(label: str, stats: SuiteStats) -> str:
    return ROW_FORMAT.format(
        label,
        stats.total,
        stats.passed,
        stats.failed,
        stats.skipped,
        stats.timed_out,
        stats.pass_rate * 100,
        f"{stats.duration:.3f}s",
    )


@dataclass(kw_only=True)
class SuiteSummaryView:
    """Collects suite stats during a run and prints the summary at the end."""

    classifier: SuiteClassifier
    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def on_start(self, paths: Sequence[Path]) -> None:
        pass

    def on_result(self, result: TestResult) -> None:
        self.classifier.fold(result)

    def on_finish(self) -> None:
        self.stream.write(self.render())
        self.stream.flush()

    def render(self) -> str:
        lines = [
            "",
            "=== Test262 Suite Results ===",
            "{:<25} {:>8} {:>8} {:>8} {:>8} {:>8} {:>8} {:>12}".format(
                "Suite", "Total", "Passed", "Failed", "Skip", "Timeout", "% Pass", "Duration"
            ),
            "-" * 100,
        ]
        lines.extend(_row(label, stats) for label, stats in self.classifier.rows())
        lines.append("-" * 100)
        if self.classifier.grand_total.total > 0:
            lines.append(_row("GRAND TOTAL", self.classifier.grand_total))

        lines.append("")
        lines.append("=== Subsuite Priority Recommendations ===")
        lines.append("Focus on subsuites with the lowest pass rates first:")
        for p in self.classifier.priorities():
            lines.append(
                f"  {p.suite:<15}/{p.subsuite:<8}: {p.pass_rate:.1f}% pass rate"
                f" ({p.total} tests)"
            )
        return "\n".join(lines) + "\n"
