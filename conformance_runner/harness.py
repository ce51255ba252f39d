"""Harness file loading and effective source construction."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from conformance_runner.errors import HarnessFileError
from conformance_runner.models.case import TestCase

log = logging.getLogger(__name__)

# sta.js defines Test262Error, which assert.js relies on.
DEFAULT_HARNESS: Sequence[str] = ("sta.js", "assert.js")
ASYNC_HARNESS = "doneprintHandle.js"

INCLUDE_MARKER = "// [included] "
BODY_MARKER = "// [test body]"


def harness_files_for(case: TestCase) -> Sequence[str]:
    """Return the ordered harness file names to prepend to a test.

    Tests without a metadata header run verbatim.
    """
    if not case.metadata.has_header:
        return ()
    names = list(DEFAULT_HARNESS)
    if case.metadata.is_async:
        names.append(ASYNC_HARNESS)
    names.extend(case.metadata.includes)
    return names


@dataclass(kw_only=True)
class HarnessLoader:
    """Reads harness files from ``<suite root>/harness`` and caches them."""

    harness_dir: Path
    _cache: dict[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def for_suite(cls, suite_root: Path) -> "HarnessLoader":
        return cls(harness_dir=suite_root / "harness")

    def read(self, name: str) -> str:
        """Return a harness file's text.

        Raises:
            HarnessFileError: If the file cannot be read

        """
        if name not in self._cache:
            try:
                self._cache[name] = (self.harness_dir / name).read_text(
                    encoding="utf-8", errors="replace"
                )
            except OSError as e:
                raise HarnessFileError(name, str(e)) from e
            log.debug("Loaded harness file %s", name)
        return self._cache[name]

    def build_source(self, case: TestCase) -> str:
        """Concatenate the required harness files and the test body."""
        names = harness_files_for(case)
        if not names:
            return case.source

        parts: list[str] = []
        for name in names:
            parts.append(f"\n{INCLUDE_MARKER}{name}\n")
            parts.append(self.read(name))
            parts.append("\n")
        parts.append(f"\n{BODY_MARKER}\n")
        parts.append(case.source)
        return "".join(parts)
