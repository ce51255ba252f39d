"""Serialized result batch exchanged between the runner and the analyzer."""

from collections.abc import Sequence

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from conformance_runner.models.base import Model
from conformance_runner.models.result import SuiteStats, TestResult


class BatchModel(Model):
    """Base for serialized models, using camelCase field names on the wire."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class StatsRecord(BatchModel):
    """Overall counters of a run."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    timed_out: int = 0
    skipped: int = 0
    duration: float = Field(default=0.0, description="Wall time in seconds")

    @classmethod
    def from_stats(cls, stats: SuiteStats) -> "StatsRecord":
        return cls(
            total=stats.total,
            passed=stats.passed,
            failed=stats.failed,
            timed_out=stats.timed_out,
            skipped=stats.skipped,
            duration=stats.duration,
        )


class ResultRecord(BatchModel):
    """One test's result in flattened boolean form."""

    path: str
    passed: bool = False
    failed: bool = False
    timed_out: bool = False
    skipped: bool = False
    duration: float = 0.0
    error: str | None = None

    @classmethod
    def from_result(cls, result: TestResult) -> "ResultRecord":
        return cls(
            path=str(result.path),
            passed=result.passed,
            failed=result.failed,
            timed_out=result.timed_out,
            skipped=result.skipped,
            duration=result.duration,
            error=result.error,
        )


class ResultBatch(BatchModel):
    """A full run: overall stats plus per-test records in run order."""

    stats: StatsRecord = Field(default_factory=StatsRecord)
    results: Sequence[ResultRecord] = Field(default_factory=list)

    @classmethod
    def from_results(
        cls, stats: SuiteStats, results: Sequence[TestResult]
    ) -> "ResultBatch":
        return cls(
            stats=StatsRecord.from_stats(stats),
            results=[ResultRecord.from_result(r) for r in results],
        )

    def to_json(self) -> str:
        """Serialize with wire (camelCase) field names."""
        return self.model_dump_json(by_alias=True, indent=2)
