"""Shared fixtures for building suites on disk."""

from collections.abc import Callable
from pathlib import Path

import pytest

HARNESS_FILES = {
    "sta.js": "function Test262Error(message) { this.message = message; }",
    "assert.js": "function assert(value) { if (!value) throw new Test262Error(); }",
    "doneprintHandle.js": "function $DONE(error) { print(error); }",
    "propertyHelper.js": "function verifyProperty() {}",
}


@pytest.fixture
def suite_root(tmp_path: Path) -> Path:
    """Create a suite root with an empty test tree and the harness files."""
    root = tmp_path / "suite"
    (root / "test").mkdir(parents=True)
    harness = root / "harness"
    harness.mkdir()
    for name, content in HARNESS_FILES.items():
        (harness / name).write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def write_test(suite_root: Path) -> Callable[[str, str], Path]:
    """Return a helper writing a test file below ``<suite_root>/test``."""

    def _write(relative: str, source: str) -> Path:
        path = suite_root / "test" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return _write
