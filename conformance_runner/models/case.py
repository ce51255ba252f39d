"""Models for discovered test cases and their header metadata."""

from collections.abc import Sequence
from pathlib import Path

from pydantic import Field

from conformance_runner.models.base import Model


class TestMetadata(Model):
    """Metadata parsed from a test's ``/*--- ... ---*/`` header."""

    __test__ = False

    includes: Sequence[str] = Field(
        default_factory=tuple, description="Harness files requested by the test"
    )
    flags: Sequence[str] = Field(
        default_factory=tuple, description="Test flags (e.g., 'async', 'raw')"
    )
    negative: bool = Field(
        default=False, description="Whether the test is expected to fail"
    )
    has_header: bool = Field(
        default=False, description="Whether a metadata header block was found"
    )

    @property
    def is_async(self) -> bool:
        """Whether the test completes asynchronously via ``$DONE``."""
        return "async" in self.flags


class TestCase(Model):
    """A single test program, read-only once discovered."""

    __test__ = False

    path: Path = Field(..., description="Absolute path, unique per run")
    source: str = Field(..., description="Raw source text of the test")
    metadata: TestMetadata = Field(default_factory=TestMetadata)
