"""Abstract base class for runtimes under test."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

type Stage = Literal["parse", "compile", "execute"]

STAGE_ORDER: Sequence[Stage] = ("parse", "compile", "execute")


@dataclass(frozen=True, kw_only=True)
class Diagnostic:
    """A single error reported by the runtime."""

    stage: Stage
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, kw_only=True)
class CompileOutput:
    """Result of compiling a source text."""

    artifact: Any = None
    diagnostics: Sequence[Diagnostic] = field(default_factory=tuple)


@dataclass(frozen=True, kw_only=True)
class ExecuteOutput:
    """Result of executing a compiled artifact."""

    value: Any = None
    diagnostics: Sequence[Diagnostic] = field(default_factory=tuple)


class Runtime(ABC):
    """A disposable instance of the runtime under test.

    Instances are created per test and never shared. Calls to ``compile`` and
    ``execute`` are not interruptible; ``dispose`` may be called from another
    thread while either is still running.
    """

    @abstractmethod
    def compile(self, source: str) -> CompileOutput:
        """Parse and compile a source text.

        Args:
            source: Complete source, harness files included

        Returns:
            The compiled artifact and any parse or compile diagnostics

        """

    @abstractmethod
    def execute(self, artifact: Any) -> ExecuteOutput:
        """Run a compiled artifact to completion.

        Args:
            artifact: Artifact returned by ``compile``

        Returns:
            The completion value and any runtime diagnostics

        """

    @abstractmethod
    def dispose(self) -> None:
        """Release everything the instance holds."""

    def disassemble(self, artifact: Any) -> str | None:
        """Return a low-level listing of ``artifact``, if supported."""
        return None
