"""Tests for tree rendering and the live view."""

import io
from pathlib import Path

import pytest

from conformance_runner.rendering import (
    CLEAR_SCREEN,
    PASS_CLASS_COLORS,
    LiveTreeView,
    TreeRenderer,
)
from conformance_runner.testing.factories import TestResultFactory
from conformance_runner.tree import ResultTree

ROOT = Path("/suite/test")


@pytest.fixture
def stream() -> io.StringIO:
    """Capture rendered output."""
    return io.StringIO()


@pytest.fixture
def renderer(stream: io.StringIO) -> TreeRenderer:
    """Create a renderer without colours."""
    return TreeRenderer(stream=stream, color=False)


def test_live_view_redraw_triggers(renderer: TreeRenderer, stream: io.StringIO) -> None:
    """Redraws when a directory completes, changes, and on the last test."""
    paths = [ROOT / "a/1.js", ROOT / "a/2.js", ROOT / "a/3.js", ROOT / "b/1.js"]
    view = LiveTreeView(tree=ResultTree(root_dir=ROOT), renderer=renderer)

    view.on_start(paths)
    assert "Starting 4 tests..." in stream.getvalue()

    view.on_result(TestResultFactory.build(path=paths[0]))
    view.on_result(TestResultFactory.build(path=paths[1]))
    assert view.redraws == 0

    view.on_result(TestResultFactory.build(path=paths[2]))
    assert view.redraws == 1
    assert "Current directory: a" in stream.getvalue()

    view.on_result(TestResultFactory.build(path=paths[3]))
    assert view.redraws == 2
    assert "Progress: 4/4 tests" in stream.getvalue()


def test_live_view_redraws_on_directory_change(renderer: TreeRenderer) -> None:
    """Redraws when results move to another directory mid-way."""
    paths = [ROOT / "a/1.js", ROOT / "b/1.js", ROOT / "a/2.js", ROOT / "c/1.js"]
    view = LiveTreeView(tree=ResultTree(root_dir=ROOT), renderer=renderer)
    view.on_start(paths)

    view.on_result(TestResultFactory.build(path=paths[0]))
    assert view.redraws == 0

    view.on_result(TestResultFactory.build(path=paths[1]))
    assert view.redraws == 1


def test_final_render_shows_totals(renderer: TreeRenderer, stream: io.StringIO) -> None:
    """Renders durations and the totals line once the stream ends."""
    paths = [ROOT / "a/1.js", ROOT / "a/2.js"]
    view = LiveTreeView(tree=ResultTree(root_dir=ROOT), renderer=renderer)
    view.on_start(paths)
    view.on_result(TestResultFactory.build(path=paths[0], duration=0.25))
    view.on_result(
        TestResultFactory.build(
            path=paths[1], outcome="failed", error="test failed: x", duration=0.25
        )
    )
    view.on_finish()

    output = stream.getvalue()
    assert "=== Test262 Final Results ===" in output
    assert "TOTAL: 2 tests | Passed: 1 (50.0%) | Failed: 1 (50.0%)" in output
    assert "Duration: 500ms" in output
    assert CLEAR_SCREEN not in output


def test_node_lines_indent_children(renderer: TreeRenderer) -> None:
    """Indents each level by two spaces and prints the counters."""
    tree = ResultTree(root_dir=ROOT)
    tree.fold(TestResultFactory.build(path=ROOT / "a/b/1.js"))

    lines = list(renderer.node_lines(tree.root))

    assert lines[0].startswith("test ")
    assert lines[1].startswith("  a ")
    assert lines[2].startswith("    b ")
    assert lines[2].rstrip().endswith("1/1/0/0/0")
    assert "100.0%" in lines[2]


def test_empty_directory_shows_not_applicable(renderer: TreeRenderer) -> None:
    """Shows N/A for a directory with no results yet."""
    tree = ResultTree(root_dir=ROOT)
    tree.prebuild([ROOT / "a/1.js"])

    lines = list(renderer.node_lines(tree.root))

    assert "N/A" in lines[1]


def test_colour_reflects_pass_class(stream: io.StringIO) -> None:
    """Paints a failing directory with the fail colour."""
    renderer = TreeRenderer(stream=stream, color=True)
    tree = ResultTree(root_dir=ROOT)
    tree.fold(
        TestResultFactory.build(
            path=ROOT / "a/1.js", outcome="failed", error="test failed: x"
        )
    )

    lines = list(renderer.node_lines(tree.root))

    assert lines[1].startswith(PASS_CLASS_COLORS["fail"])
