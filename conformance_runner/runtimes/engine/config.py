"""Configuration for the engine runtime."""

from collections.abc import Sequence

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Configuration for an external engine binary driven as a subprocess."""

    engine_path: str = "./engine"
    engine_args: Sequence[str] = Field(default_factory=list)
    # Run before execution to surface parse errors separately; empty skips it
    check_args: Sequence[str] = Field(default_factory=list)
    ignore_type_errors_args: Sequence[str] = Field(default_factory=list)
    disasm_args: Sequence[str] = Field(default_factory=list)
    terminate_on_dispose: bool = True
    source_suffix: str = ".js"
