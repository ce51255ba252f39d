"""Discover test programs under a suite directory."""

import fnmatch
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from conformance_runner.errors import DiscoveryError
from conformance_runner.metadata import parse_metadata
from conformance_runner.models.case import TestCase

log = logging.getLogger(__name__)

FIXTURE_SUFFIX = "_FIXTURE.js"


def find_test_files(search_dir: Path, pattern: str, limit: int = 0) -> Sequence[Path]:
    """Return sorted paths under ``search_dir`` whose basename matches ``pattern``.

    Args:
        search_dir: Directory to walk recursively
        pattern: Glob matched against file names (e.g., "*.js")
        limit: Maximum number of paths to return, 0 for no limit

    Raises:
        DiscoveryError: If the directory is missing or cannot be walked

    """
    if not search_dir.is_dir():
        raise DiscoveryError(f"Test directory not found: {search_dir}")

    def _on_error(e: OSError) -> None:
        raise DiscoveryError(f"Failed to walk {e.filename}: {e.strerror}") from e

    found: list[Path] = []
    for root, dirs, files in os.walk(search_dir, onerror=_on_error):
        dirs[:] = [d for d in dirs if not d.startswith(".")]
        for name in files:
            if name.endswith(FIXTURE_SUFFIX):
                continue
            if fnmatch.fnmatchcase(name, pattern):
                found.append(Path(root) / name)

    found.sort(key=str)
    if limit > 0:
        found = found[:limit]

    log.info("Found %d test files in %s", len(found), search_dir)
    return found


def load_test_case(path: Path) -> TestCase:
    """Read a test file and parse its metadata.

    Raises:
        OSError: If the file cannot be read

    """
    source = path.read_text(encoding="utf-8", errors="replace")
    return TestCase(path=path, source=source, metadata=parse_metadata(source))
