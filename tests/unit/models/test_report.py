"""Tests for the serialized result batch."""

import json
from pathlib import Path

from conformance_runner.models.report import ResultBatch
from conformance_runner.models.result import SuiteStats, TestResult


def test_batch_uses_camel_case_keys() -> None:
    """Serializes field names in camelCase."""
    stats = SuiteStats(total=1, timed_out=1, duration=5.0)
    results = [
        TestResult(
            path=Path("/suite/test/a.js"),
            outcome="timed_out",
            duration=5.0,
            error="test timed out after 5s",
        )
    ]

    data = json.loads(ResultBatch.from_results(stats, results).to_json())

    assert data["stats"]["timedOut"] == 1
    assert data["results"] == [
        {
            "path": "/suite/test/a.js",
            "passed": False,
            "failed": False,
            "timedOut": True,
            "skipped": False,
            "duration": 5.0,
            "error": "test timed out after 5s",
        }
    ]


def test_batch_decodes_wire_format() -> None:
    """Decodes a batch written with camelCase keys."""
    text = json.dumps(
        {
            "stats": {"total": 1, "failed": 1},
            "results": [{"path": "a.js", "failed": True, "error": "boom"}],
        }
    )

    batch = ResultBatch.model_validate_json(text)

    assert batch.stats.failed == 1
    assert batch.results[0].error == "boom"
    assert not batch.results[0].timed_out
