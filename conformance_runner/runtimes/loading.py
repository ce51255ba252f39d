"""Loading of runtimes from entry points."""

import json
from importlib.metadata import entry_points
from typing import Any

from pydantic import BaseModel, ValidationError

from conformance_runner.errors import ConfigurationError, RuntimeNotFoundError
from conformance_runner.runtimes.manifest import RuntimeManifest

ENTRY_POINT_GROUP = "conformance_runner.runtimes"


def load_runtime_manifest(key: str) -> RuntimeManifest[Any]:
    """Load a runtime manifest by key.

    Args:
        key: The runtime key as registered in pyproject.toml (e.g., "engine")

    Returns:
        The runtime manifest instance

    Raises:
        RuntimeNotFoundError: If no runtime with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: RuntimeManifest[Any] = entry.load()
            return manifest

    available = [e.name for e in entries]
    raise RuntimeNotFoundError(
        f"Runtime '{key}' not found. Available runtimes: {available}"
    )


def load_runtime_config(manifest: RuntimeManifest[Any], config_json: str) -> BaseModel:
    """Decode and validate a runtime's JSON configuration.

    Raises:
        ConfigurationError: If the JSON is malformed or fails validation

    """
    try:
        config_dict = json.loads(config_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid runtime config JSON: {e}") from e
    if not isinstance(config_dict, dict):
        raise ConfigurationError("Runtime config must be a JSON object")

    try:
        return manifest.config_cls(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid runtime config: {e}") from e
