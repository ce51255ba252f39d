"""Engine runtime module."""

from conformance_runner.runtimes.engine.config import EngineConfig
from conformance_runner.runtimes.engine.manifest import engine_manifest
from conformance_runner.runtimes.engine.runtime import EngineRuntime

__all__ = ["EngineConfig", "EngineRuntime", "engine_manifest"]
