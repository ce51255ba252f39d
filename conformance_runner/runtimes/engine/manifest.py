"""Engine runtime manifest."""

from conformance_runner.runtimes.engine.config import EngineConfig
from conformance_runner.runtimes.engine.runtime import EngineRuntime
from conformance_runner.runtimes.manifest import RuntimeManifest

engine_manifest = RuntimeManifest(
    config_cls=EngineConfig,
    runtime_factory=EngineRuntime.from_config,
)
