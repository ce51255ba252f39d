"""Run configuration validated from command-line flags."""

import re
from pathlib import Path

from pydantic import Field, field_validator

from conformance_runner.models.base import Model

DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str) -> float:
    """Parse a duration such as ``500ms``, ``5s``, ``1m30s`` into seconds.

    A bare number is taken as seconds.

    Raises:
        ValueError: If the value is not a positive duration

    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        for match in DURATION_RE.finditer(text):
            if match.start() != pos:
                break
            seconds += float(match.group(1)) * DURATION_UNITS[match.group(2)]
            pos = match.end()
        if pos != len(text):
            raise ValueError(f"invalid duration {value!r}") from None

    if seconds <= 0:
        raise ValueError(f"duration must be positive, got {value!r}")
    return seconds


def format_duration(seconds: float) -> str:
    """Render seconds in the form ``parse_duration`` accepts."""
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    minutes, secs = divmod(seconds, 60)
    if minutes == 0:
        return f"{secs:g}s"
    if secs == 0:
        return f"{minutes:g}m"
    return f"{minutes:g}m{secs:g}s"


class RunConfig(Model):
    """Validated settings for one harness run."""

    path: Path = Field(..., description="Suite root containing test/ and harness/")
    pattern: str = Field(default="*.js", description="Test file name glob")
    subpath: str = Field(default="", description="Restrict search to a subtree")
    verbose: bool = False
    limit: int = Field(default=0, ge=0, description="Cap on test count, 0 = none")
    timeout: float = Field(default=5.0, gt=0, description="Per-test seconds")
    memprofile: Path | None = None
    cpuprofile: Path | None = None
    gcstats: bool = False
    tree: bool = False
    suite: bool = False
    filter: bool = False
    disasm: bool = False
    runtime: str = "engine"
    runtime_config: str = "{}"
    json_output: Path | None = None

    @field_validator("pattern")
    @classmethod
    def _pattern_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("pattern must not be empty")
        return value

    @property
    def test_dir(self) -> Path:
        """The true suite root, against which suites are classified."""
        return self.path / "test"

    @property
    def search_dir(self) -> Path:
        """The directory actually walked, narrowed by ``subpath``."""
        if not self.subpath:
            return self.test_dir
        return self.test_dir / self.subpath.removesuffix("/**").strip("/")
