"""Parse the metadata header embedded in test sources.

Test262 tests carry a YAML frontmatter block between ``/*---`` and ``---*/``.
Parsing never raises: a missing or malformed header yields empty metadata.
"""

import logging
from collections.abc import Sequence
from typing import Any

import yaml

from conformance_runner.models.case import TestMetadata

log = logging.getLogger(__name__)

HEADER_START = "/*---"
HEADER_END = "---*/"

NEGATIVE_MARKERS = ("negative:", "@negative")


def extract_header(source: str) -> str | None:
    """Return the text between the first start marker and the next end marker."""
    start = source.find(HEADER_START)
    if start == -1:
        return None
    body_start = start + len(HEADER_START)
    end = source.find(HEADER_END, body_start)
    if end == -1:
        return None
    return source[body_start:end]


def extract_list(header: str, key: str) -> Sequence[str]:
    """Scan ``key: [a, 'b', "c"]`` out of a header without a YAML parser.

    Used when the header is not valid YAML. Order is preserved, one level of
    quotes is trimmed and empty entries are dropped.
    """
    idx = header.find(f"{key}:")
    if idx == -1:
        return ()
    rest = header[idx + len(key) + 1 :]
    open_idx = rest.find("[")
    if open_idx == -1:
        return ()
    close_idx = rest.find("]", open_idx + 1)
    if close_idx == -1:
        return ()

    items: list[str] = []
    for part in rest[open_idx + 1 : close_idx].split(","):
        name = part.strip()
        for quote in ("'", '"'):
            name = name.removeprefix(quote).removesuffix(quote)
        if name:
            items.append(name)
    return tuple(items)


def _as_list(value: Any) -> Sequence[str]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, list):
        return tuple(str(item) for item in value if item is not None and item != "")
    return ()


def _load_header(header: str) -> dict[str, Any] | None:
    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as e:
        log.debug("Header is not valid YAML, falling back to marker scan: %s", e)
        return None
    return data if isinstance(data, dict) else None


def is_negative_test(source: str) -> bool:
    """Whether a test is expected to fail.

    A coarse heuristic over the raw source: an explicit negative marker, or
    the words "SyntaxError" and "expected" appearing anywhere.
    """
    if any(marker in source for marker in NEGATIVE_MARKERS):
        return True
    return "SyntaxError" in source and "expected" in source


def parse_metadata(source: str) -> TestMetadata:
    """Extract includes, flags and negativity from a test source."""
    negative = is_negative_test(source)
    header = extract_header(source)
    if header is None:
        return TestMetadata(negative=negative)

    if (data := _load_header(header)) is not None:
        includes = _as_list(data.get("includes"))
        flags = _as_list(data.get("flags"))
    else:
        includes = extract_list(header, "includes")
        flags = extract_list(header, "flags")

    return TestMetadata(
        includes=includes,
        flags=flags,
        negative=negative,
        has_header=True,
    )
