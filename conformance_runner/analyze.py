"""CLI entry point for clustering failures from a serialized run."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from conformance_runner.clustering import cluster_failures, format_report
from conformance_runner.models.report import ResultBatch

log = logging.getLogger(__name__)


def load_batch(text: str) -> ResultBatch:
    """Decode a result batch written by ``conformance-runner --json``.

    Raises:
        ValueError: If the text is not a valid result batch

    """
    try:
        return ResultBatch.model_validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid result batch: {e}") from e


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Group failing tests by normalized error message"
    )
    parser.add_argument(
        "results",
        nargs="?",
        type=Path,
        default=None,
        help="Result JSON file (reads stdin when omitted)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        text = args.results.read_text(encoding="utf-8") if args.results else sys.stdin.read()
        batch = load_batch(text)
    except (OSError, ValueError) as e:
        log.error("Error decoding JSON input: %s", e)
        sys.exit(1)

    print(format_report(batch, cluster_failures(batch)), end="")


if __name__ == "__main__":  # pragma: no cover
    main()
