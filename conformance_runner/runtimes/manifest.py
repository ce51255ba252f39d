"""Runtime manifest definition for the plugin system."""

from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel

from conformance_runner.runtimes.base import Runtime


class RuntimeFactory[ConfigT: BaseModel](Protocol):
    """Creates a fresh runtime instance from its configuration."""

    def __call__(self, config: ConfigT, *, ignore_type_errors: bool) -> Runtime:
        """Create a runtime."""


@dataclass(frozen=True, kw_only=True)
class RuntimeManifest[ConfigT: BaseModel]:
    """Manifest describing a runtime plugin.

    The manifest references the configuration class and the factory used to
    create one runtime instance per test.
    """

    config_cls: type[ConfigT]
    runtime_factory: RuntimeFactory[ConfigT]
