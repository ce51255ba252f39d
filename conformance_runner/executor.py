"""Per-test execution with isolation and a hard deadline.

The runtime offers no way to interrupt a compile or execute call, so each
test's work runs on its own daemon thread and the orchestrating event loop
only decides how long to wait for it. When the deadline wins, the thread is
abandoned: it keeps running until it finishes on its own, and its late result
is discarded. Memory held by abandoned work is reclaimed by forcing garbage
collection at a fixed interval.
"""

import asyncio
import gc
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from conformance_runner.classifier import (
    Collected,
    classify,
    classify_fault,
    classify_timeout,
)
from conformance_runner.errors import FaultRecovered, HarnessFileError
from conformance_runner.harness import HarnessLoader
from conformance_runner.models.case import TestCase
from conformance_runner.models.result import TestResult
from conformance_runner.runtimes.base import Runtime

log = logging.getLogger(__name__)

GC_INTERVAL = 100


@dataclass(frozen=True, kw_only=True)
class WorkReport:
    """What a finished unit of work hands back to the waiting loop."""

    collected: Collected = field(default_factory=Collected)
    fault: FaultRecovered | None = None
    disassembly: str | None = None


def compile_and_execute(runtime: Runtime, source: str, *, disasm: bool) -> WorkReport:
    """Compile then execute, stopping at the first stage with diagnostics."""
    compiled = runtime.compile(source)
    if compiled.diagnostics:
        return WorkReport(collected=Collected(diagnostics=compiled.diagnostics))

    executed = runtime.execute(compiled.artifact)
    disassembly = None
    if disasm and executed.diagnostics:
        disassembly = runtime.disassemble(compiled.artifact)
    return WorkReport(
        collected=Collected(diagnostics=executed.diagnostics),
        disassembly=disassembly,
    )


def dispose_quietly(runtime: Runtime) -> None:
    """Dispose a runtime, logging rather than raising on failure."""
    try:
        runtime.dispose()
    except Exception as e:
        log.warning("Runtime dispose failed: %s", e)


def _deliver(
    loop: asyncio.AbstractEventLoop,
    future: asyncio.Future[WorkReport],
    report: WorkReport,
) -> None:
    def _set() -> None:
        if not future.done():
            future.set_result(report)

    try:
        loop.call_soon_threadsafe(_set)
    except RuntimeError:
        log.debug("Event loop closed before abandoned work finished")


def _unit_of_work(
    loop: asyncio.AbstractEventLoop,
    future: asyncio.Future[WorkReport],
    runtime: Runtime,
    source: str,
    disasm: bool,
) -> None:
    try:
        report = compile_and_execute(runtime, source, disasm=disasm)
    except Exception as e:
        log.debug("Unit of work raised", exc_info=e)
        report = WorkReport(fault=FaultRecovered(e))

    dispose_quietly(runtime)
    _deliver(loop, future, report)


@dataclass(kw_only=True)
class TestExecutor:
    """Runs one test case to completion or timeout."""

    __test__ = False

    runtime_factory: Callable[[], Runtime]
    harness: HarnessLoader
    timeout: float
    disasm: bool = False
    gc_interval: int = GC_INTERVAL
    completed: int = 0
    abandoned: int = 0

    async def run(self, case: TestCase) -> TestResult:
        """Produce exactly one result for ``case``."""
        start = time.monotonic()
        try:
            result = await self._run(case, start)
        finally:
            self._count_completed()
        return result

    async def _run(self, case: TestCase, start: float) -> TestResult:
        try:
            source = self.harness.build_source(case)
        except HarnessFileError as e:
            return classify_fault(case.path, str(e), time.monotonic() - start)

        try:
            runtime = self.runtime_factory()
        except Exception as e:
            fault = FaultRecovered(e)
            return classify_fault(case.path, str(fault), time.monotonic() - start)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[WorkReport] = loop.create_future()
        worker = threading.Thread(
            target=_unit_of_work,
            args=(loop, future, runtime, source, self.disasm),
            name=f"unit-of-work:{case.path.name}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            log.warning("Could not start unit of work for %s: %s", case.path, e)
            dispose_quietly(runtime)
            fault = FaultRecovered(e)
            return classify_fault(case.path, str(fault), time.monotonic() - start)

        done, _ = await asyncio.wait({future}, timeout=self.timeout)
        duration = time.monotonic() - start

        if not done:
            self.abandoned += 1
            log.debug("Abandoning %s after %.2fs", case.path, duration)
            dispose_quietly(runtime)
            return classify_timeout(case.path, self.timeout, duration)

        report = future.result()
        if report.fault is not None:
            return classify_fault(case.path, str(report.fault), duration)

        result = classify(case, report.collected, duration)
        if result.failed and report.disassembly:
            log.info("Disassembly of %s:\n%s", case.path, report.disassembly)
        return result

    def _count_completed(self) -> None:
        self.completed += 1
        if self.completed % self.gc_interval == 0:
            gc.collect()
            gc.collect()
