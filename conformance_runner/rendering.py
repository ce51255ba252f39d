"""Terminal rendering of the result tree.

All ANSI escape handling lives here; the tree itself carries only counters.
"""

import sys
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from conformance_runner.config import format_duration
from conformance_runner.models.result import TestResult
from conformance_runner.tree import PassClass, ResultTree, TreeNode

RESET = "\033[0m"
CLEAR_SCREEN = "\033[2J\033[H"

PASS_CLASS_COLORS: Mapping[PassClass, str] = {
    "neutral": "\033[90m",
    "pass": "\033[32m",
    "partial": "\033[33m",
    "fail": "\033[31m",
}

NAME_WIDTH = 60
RULE_WIDTH = 110
STATS_HEADER = "Total/Pass/Fail/Skip/Timeout"


def _pct(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0


def _duration(seconds: float) -> str:
    if seconds < 0.001:
        return "0s"
    return format_duration(round(seconds, 3))


@dataclass(kw_only=True)
class TreeRenderer:
    """Formats a result tree as an indented, colour-coded table."""

    stream: TextIO = field(default_factory=lambda: sys.stdout)
    color: bool = True

    def _paint(self, text: str, pass_class: PassClass) -> str:
        if not self.color:
            return text
        return f"{PASS_CLASS_COLORS[pass_class]}{text}{RESET}"

    def header(self) -> Sequence[str]:
        return (
            f"\n{'Directory':<{NAME_WIDTH}} {'% Passed':>8} {STATS_HEADER:>40}",
            "-" * RULE_WIDTH,
        )

    def node_lines(
        self, node: TreeNode, indent: str = "", *, show_duration: bool = False
    ) -> Iterator[str]:
        """Yield one line for ``node`` and each descendant, children sorted."""
        stats = node.stats
        percent = f"{_pct(stats.passed, stats.total):.1f}%" if stats.total else "N/A"
        counts = (
            f"{stats.total}/{stats.passed}/{stats.failed}"
            f"/{stats.skipped}/{stats.timed_out}"
        )
        if show_duration:
            counts += f" [{_duration(stats.duration)}]"

        name = self._paint(f"{indent + node.name:<{NAME_WIDTH}}", node.pass_class)
        pct = self._paint(f"{percent:>8}", node.pass_class)
        yield f"{name} {pct} {counts:>40}"

        for child in node.sorted_children():
            yield from self.node_lines(child, indent + "  ", show_duration=show_duration)

    def _write(self, lines: Sequence[str] | Iterator[str]) -> None:
        for line in lines:
            self.stream.write(f"{line}\n")
        self.stream.flush()

    def render_progress(
        self,
        tree: ResultTree,
        done: int,
        total: int,
        current_dir: str | None = None,
    ) -> None:
        """Redraw the whole tree in place with progress information."""
        if self.color:
            self.stream.write(CLEAR_SCREEN)
        lines = ["", "=== Test262 Progress ==="]
        if done == 0:
            lines.append(f"Starting {total} tests...")
        else:
            lines.append(f"Progress: {done}/{total} tests")
        if current_dir is not None:
            lines.append(f"Current directory: {current_dir}")
        lines.extend(self.header())
        self._write(lines)
        self._write(self.node_lines(tree.root))

    def render_final(self, tree: ResultTree) -> None:
        """Render the finished tree with durations and a totals line."""
        if self.color:
            self.stream.write(CLEAR_SCREEN)
        self._write(["", "=== Test262 Final Results ===", *self.header()])
        self._write(self.node_lines(tree.root, show_duration=True))

        stats = tree.stats
        self._write(
            [
                "",
                "=" * RULE_WIDTH,
                (
                    f"TOTAL: {stats.total} tests"
                    f" | Passed: {stats.passed} ({_pct(stats.passed, stats.total):.1f}%)"
                    f" | Failed: {stats.failed} ({_pct(stats.failed, stats.total):.1f}%)"
                    f" | Timeouts: {stats.timed_out}"
                    f" ({_pct(stats.timed_out, stats.total):.1f}%)"
                    f" | Skipped: {stats.skipped} ({_pct(stats.skipped, stats.total):.1f}%)"
                ),
                f"Duration: {_duration(stats.duration)}",
            ]
        )


@dataclass(kw_only=True)
class LiveTreeView:
    """Streams results into a tree and redraws it as directories progress.

    A redraw happens when the directory being processed changes, when every
    test of a directory has completed, and on the last test.
    """

    tree: ResultTree
    renderer: TreeRenderer = field(default_factory=TreeRenderer)
    total: int = 0
    done: int = 0
    last_dir: str | None = None
    redraws: int = 0

    def on_start(self, paths: Sequence[Path]) -> None:
        self.total = len(paths)
        self.tree.prebuild(paths)
        self.renderer.render_progress(self.tree, 0, self.total)

    def on_result(self, result: TestResult) -> None:
        current_dir = self.tree.fold(result)
        self.done += 1

        is_last = self.done == self.total
        changed = self.last_dir is not None and current_dir != self.last_dir
        if changed or self.tree.directory_complete(current_dir) or is_last:
            self.renderer.render_progress(
                self.tree,
                self.done,
                self.total,
                None if is_last else current_dir,
            )
            self.redraws += 1
        self.last_dir = current_dir

    def on_finish(self) -> None:
        self.renderer.render_final(self.tree)

