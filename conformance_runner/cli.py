"""CLI entry point for the conformance test runner."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from functools import partial

from pydantic import ValidationError

from conformance_runner.config import RunConfig, parse_duration
from conformance_runner.discovery import find_test_files
from conformance_runner.errors import ConfigurationError, DiscoveryError
from conformance_runner.executor import TestExecutor
from conformance_runner.harness import HarnessLoader
from conformance_runner.models.report import ResultBatch
from conformance_runner.models.result import SuiteStats
from conformance_runner.orchestrator import (
    ResultListener,
    RunSummary,
    TestOrchestrator,
)
from conformance_runner.profiling import (
    cpu_profile,
    final_stats_line,
    format_gc_stats,
    start_memory_tracing,
    write_memory_profile,
)
from conformance_runner.rendering import LiveTreeView, TreeRenderer
from conformance_runner.runtimes.loading import (
    load_runtime_config,
    load_runtime_manifest,
)
from conformance_runner.suites import SuiteClassifier, SuiteSummaryView
from conformance_runner.tree import ResultTree


def format_summary(stats: SuiteStats) -> str:
    """Format the plain-mode summary with percentage breakdowns."""
    return "\n".join(
        [
            "",
            "=== Test262 Summary ===",
            f"Total:    {stats.total}",
            f"Passed:   {stats.passed} ({stats.percent(stats.passed):.1f}%)",
            f"Failed:   {stats.failed} ({stats.percent(stats.failed):.1f}%)",
            f"Timeouts: {stats.timed_out} ({stats.percent(stats.timed_out):.1f}%)",
            f"Skipped:  {stats.skipped} ({stats.percent(stats.skipped):.1f}%)",
            f"Duration: {stats.duration:.3f}s",
            "======================",
        ]
    )


def build_listeners(config: RunConfig, *, interactive: bool) -> Sequence[ResultListener]:
    """Create the result consumers selected by the run mode."""
    listeners: list[ResultListener] = []
    if config.tree:
        # Piped output gets the same redraws, without colours or screen clears
        listeners.append(
            LiveTreeView(
                tree=ResultTree(root_dir=config.test_dir),
                renderer=TreeRenderer(color=interactive),
            )
        )
    if config.suite:
        classifier = SuiteClassifier(suite_root=config.test_dir)
        listeners.append(SuiteSummaryView(classifier=classifier))
    return listeners


def write_results(config: RunConfig, summary: RunSummary) -> None:
    """Serialize the result batch for the offline analyzer."""
    if config.json_output is None:
        return
    batch = ResultBatch.from_results(summary.stats, summary.results)
    config.json_output.write_text(batch.to_json(), encoding="utf-8")
    logging.getLogger("conformance_runner").info(
        "Results written to %s", config.json_output
    )


async def run(config: RunConfig) -> int:
    """Run the conformance suite and return the exit code."""
    log = logging.getLogger("conformance_runner")

    if not config.test_dir.is_dir():
        raise ConfigurationError(f"Test directory not found at {config.test_dir}")

    log.info("Loading runtime: %s", config.runtime)
    manifest = load_runtime_manifest(config.runtime)
    runtime_config = load_runtime_config(manifest, config.runtime_config)

    print(f"Running Test262 suite from: {config.path}")
    if config.subpath:
        print(f"Searching in subdirectory: {config.subpath}")

    paths = find_test_files(config.search_dir, config.pattern, config.limit)
    print(f"Found {len(paths)} test files")

    executor = TestExecutor(
        runtime_factory=partial(
            manifest.runtime_factory, runtime_config, ignore_type_errors=True
        ),
        harness=HarnessLoader.for_suite(config.path),
        timeout=config.timeout,
        disasm=config.disasm,
    )
    orchestrator = TestOrchestrator(
        executor=executor,
        listeners=build_listeners(config, interactive=sys.stdout.isatty()),
        filter_legacy=config.filter,
        report_progress=not config.tree,
        verbose=config.verbose,
    )

    with cpu_profile(config.cpuprofile):
        summary = await orchestrator.run_tests(paths)

    if not config.tree and not config.suite:
        print(format_summary(summary.stats))
    if not config.tree:
        print(final_stats_line())

    write_results(config, summary)

    if config.memprofile is not None:
        write_memory_profile(config.memprofile)
    if config.gcstats:
        print(format_gc_stats())

    return summary.exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a conformance test suite against a runtime under test"
    )
    parser.add_argument(
        "--path", required=True, help="Path to the suite root (containing test/)"
    )
    parser.add_argument("--pattern", default="*.js", help="File pattern for test files")
    parser.add_argument(
        "--subpath",
        default="",
        help="Subdirectory within test/ (e.g., 'language/**', 'built-ins/Array')",
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "--limit", type=int, default=0, help="Limit number of tests (0 = no limit)"
    )
    parser.add_argument(
        "--timeout", default="5s", help="Timeout per test (e.g., 500ms, 5s, 1m)"
    )
    parser.add_argument("--memprofile", default=None, help="Write memory profile to file")
    parser.add_argument("--cpuprofile", default=None, help="Write CPU profile to file")
    parser.add_argument(
        "--gcstats", action="store_true", help="Print garbage collection statistics"
    )
    parser.add_argument(
        "--tree", action="store_true", help="Show results as a live directory tree"
    )
    parser.add_argument(
        "--suite", action="store_true", help="Show pass rates per suite and subsuite"
    )
    parser.add_argument(
        "--filter", action="store_true", help="Skip tests relying on legacy patterns"
    )
    parser.add_argument(
        "--disasm", action="store_true", help="Print disassembly on failures"
    )
    parser.add_argument(
        "--runtime", default="engine", help="Runtime key registered as entry point"
    )
    parser.add_argument(
        "--runtime-config", default="{}", help="JSON configuration for the runtime"
    )
    parser.add_argument(
        "--json", dest="json_output", default=None, help="Write results as JSON"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    """Validate parsed flags into a run configuration.

    Raises:
        ConfigurationError: If any flag value is invalid

    """
    try:
        timeout = parse_duration(args.timeout)
    except ValueError as e:
        raise ConfigurationError(f"Invalid --timeout: {e}") from e

    try:
        return RunConfig(
            path=args.path,
            pattern=args.pattern,
            subpath=args.subpath,
            verbose=args.verbose,
            limit=args.limit,
            timeout=timeout,
            memprofile=args.memprofile,
            cpuprofile=args.cpuprofile,
            gcstats=args.gcstats,
            tree=args.tree,
            suite=args.suite,
            filter=args.filter,
            disasm=args.disasm,
            runtime=args.runtime,
            runtime_config=args.runtime_config,
            json_output=args.json_output,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid arguments: {e}") from e


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    log = logging.getLogger("conformance_runner")

    try:
        config = config_from_args(args)
        if config.memprofile is not None or config.gcstats:
            start_memory_tracing()
        exit_code = asyncio.run(run(config))
    except (ConfigurationError, DiscoveryError) as e:
        log.error("%s", e)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
