"""Group failing results by a normalized error signature."""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from conformance_runner.models.report import ResultBatch

DIAGNOSTIC_TAG = "[ERROR]: "
UNCAUGHT_PREFIX = "Uncaught exception: "
LOCATION_RE = re.compile(r"\s+at line \d+, column \d+")
MAX_MESSAGE_LENGTH = 100
EXAMPLES_PER_GROUP = 3
TIMEOUT_MESSAGE = "Timeout"


def normalize_error(message: str) -> str:
    """Reduce an error message to a signature shared by similar failures.

    Drops the diagnostic tag prefix, the uncaught-exception prefix and source
    locations, then truncates long messages.
    """
    if (idx := message.find(DIAGNOSTIC_TAG)) != -1:
        message = message[idx + len(DIAGNOSTIC_TAG) :]
    message = message.removeprefix(UNCAUGHT_PREFIX)
    message = LOCATION_RE.sub("", message)
    if len(message) > MAX_MESSAGE_LENGTH:
        message = message[: MAX_MESSAGE_LENGTH - 3] + "..."
    return message.strip()


@dataclass(kw_only=True)
class FailureGroup:
    """Failing paths sharing one normalized message, in first-seen order."""

    message: str
    paths: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.paths)


def cluster_failures(batch: ResultBatch) -> Sequence[FailureGroup]:
    """Group failed and timed out records, largest group first."""
    groups: dict[str, FailureGroup] = {}
    for record in batch.results:
        if not (record.failed or record.timed_out):
            continue
        message = record.error or ""
        if not message and record.timed_out:
            message = TIMEOUT_MESSAGE
        signature = normalize_error(message)
        if (group := groups.get(signature)) is None:
            group = groups[signature] = FailureGroup(message=signature)
        group.paths.append(record.path)

    return sorted(groups.values(), key=lambda g: g.count, reverse=True)


def format_report(batch: ResultBatch, groups: Sequence[FailureGroup]) -> str:
    """Render clustered failures with a few example paths per group."""
    failures = len(batch.results) - batch.stats.passed - batch.stats.skipped
    lines = [f"Analysis of {failures} failures:", "=" * 80]
    for group in groups:
        lines.append(f"[{group.count}] {group.message}")
        for path in group.paths[:EXAMPLES_PER_GROUP]:
            lines.append(f"  - {path}")
        if group.count > EXAMPLES_PER_GROUP:
            lines.append(f"  ... and {group.count - EXAMPLES_PER_GROUP} more")
        lines.append("")
    return "\n".join(lines) + "\n"
