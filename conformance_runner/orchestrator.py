"""Test orchestrator driving cases through the executor one at a time."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from conformance_runner.classifier import classify_fault, should_skip, skipped
from conformance_runner.discovery import load_test_case
from conformance_runner.executor import TestExecutor
from conformance_runner.models.case import TestCase
from conformance_runner.models.result import SuiteStats, TestResult

log = logging.getLogger(__name__)


class ResultListener(Protocol):
    """Consumes the result stream in discovery order."""

    def on_start(self, paths: Sequence[Path]) -> None:
        """Called once with every path that will be run."""

    def on_result(self, result: TestResult) -> None:
        """Called once per result."""

    def on_finish(self) -> None:
        """Called after the last result."""


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Outcome of a complete run."""

    stats: SuiteStats
    results: Sequence[TestResult]

    @property
    def exit_code(self) -> int:
        """1 when any test failed; timeouts and skips do not count."""
        return 1 if self.stats.failed > 0 else 0


@dataclass(kw_only=True)
class TestOrchestrator:
    """Runs test files sequentially and fans results out to listeners.

    Tests never run concurrently, so listeners are only ever touched from
    this single flow.
    """

    __test__ = False

    executor: TestExecutor
    listeners: Sequence[ResultListener] = field(default_factory=list)
    filter_legacy: bool = False
    report_progress: bool = True
    verbose: bool = False
    loader: Callable[[Path], TestCase] = load_test_case

    async def run_tests(self, paths: Sequence[Path]) -> RunSummary:
        """Run every path in order and return the aggregated summary."""
        stats = SuiteStats()
        results: list[TestResult] = []
        total = len(paths)
        started = time.monotonic()

        for listener in self.listeners:
            listener.on_start(paths)

        for index, path in enumerate(paths, start=1):
            result = await self._run_one(path, index, total)
            stats.add(result)
            results.append(result)
            self._report(result, index, total)
            for listener in self.listeners:
                listener.on_result(result)

        for listener in self.listeners:
            listener.on_finish()

        # Wall time of the run, not the sum of per-test durations
        stats.duration = time.monotonic() - started
        log.info(
            "Run finished: %d passed, %d failed, %d timed out, %d skipped",
            stats.passed,
            stats.failed,
            stats.timed_out,
            stats.skipped,
        )
        if self.executor.abandoned:
            log.info("%d unit(s) of work abandoned after timeout", self.executor.abandoned)
        return RunSummary(stats=stats, results=results)

    async def _run_one(self, path: Path, index: int, total: int) -> TestResult:
        start = time.monotonic()
        try:
            case = self.loader(path)
        except OSError as e:
            return classify_fault(
                path, f"failed to read test: {e}", time.monotonic() - start
            )

        if self.filter_legacy and should_skip(case.source):
            if self.verbose:
                log.info("FILTER %d/%d %s - legacy pattern filtered out", index, total, path)
            return skipped(path)

        return await self.executor.run(case)

    def _report(self, result: TestResult, index: int, total: int) -> None:
        if not self.report_progress:
            return
        if result.failed:
            print(f"FAIL {index}/{total} {result.path} - {result.error}")
        elif result.timed_out:
            print(f"TIMEOUT {index}/{total} {result.path} - {result.error}")
        elif result.skipped and self.verbose:
            print(f"SKIP {index}/{total} {result.path}")
