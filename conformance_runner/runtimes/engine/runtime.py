"""Engine runtime implementation.

Drives an external engine binary (a JavaScript shell, or a compiler driver
that runs its output) through a temporary source file.
"""

import logging
import os
import re
import subprocess
import tempfile
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from conformance_runner.runtimes.base import (
    CompileOutput,
    Diagnostic,
    ExecuteOutput,
    Runtime,
    Stage,
)
from conformance_runner.runtimes.engine.config import EngineConfig

log = logging.getLogger(__name__)

ASYNC_FAILURE = "Test262:AsyncTestFailure"
ERROR_LINE_RE = re.compile(r"\b\w*Error\b|Uncaught|Test262:AsyncTestFailure")
MAX_MESSAGE_LENGTH = 300


def summarize_output(output: str) -> str:
    """Pick the most informative line of engine output.

    Prefers the first line naming an error, falling back to the first
    non-empty line.
    """
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if not lines:
        return "engine exited with an error and no output"
    for line in lines:
        if ERROR_LINE_RE.search(line):
            return line[:MAX_MESSAGE_LENGTH]
    return lines[0][:MAX_MESSAGE_LENGTH]


@dataclass(kw_only=True)
class EngineRuntime(Runtime):
    """Runtime backed by an engine subprocess."""

    config: EngineConfig
    ignore_type_errors: bool = True
    _source_file: Path | None = field(default=None, repr=False)
    _process: subprocess.Popen[str] | None = field(default=None, repr=False)
    _disposed: bool = field(default=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_config(
        cls, config: EngineConfig, *, ignore_type_errors: bool
    ) -> "EngineRuntime":
        """Create a runtime instance for one test."""
        return cls(config=config, ignore_type_errors=ignore_type_errors)

    def _command(self, extra_args: Sequence[str], source_file: Path) -> list[str]:
        cmd = [self.config.engine_path, *self.config.engine_args]
        if self.ignore_type_errors:
            cmd.extend(self.config.ignore_type_errors_args)
        cmd.extend(extra_args)
        cmd.append(str(source_file))
        return cmd

    def _run(self, cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
        """Run the engine, registering the process so ``dispose`` can reach it."""
        with self._lock:
            if self._disposed:
                raise RuntimeError("runtime was disposed")
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
            self._process = process

        stdout, stderr = process.communicate()
        with self._lock:
            self._process = None
        return subprocess.CompletedProcess(cmd, process.returncode, stdout, stderr)

    def _diagnose(
        self, stage: Stage, cmd: Sequence[str]
    ) -> tuple[subprocess.CompletedProcess[str] | None, Sequence[Diagnostic]]:
        try:
            proc = self._run(cmd)
        except FileNotFoundError:
            message = f"Engine not found: {self.config.engine_path}"
            return None, (Diagnostic(stage=stage, message=message),)

        output = f"{proc.stdout or ''}\n{proc.stderr or ''}"
        if ASYNC_FAILURE in (proc.stdout or ""):
            idx = proc.stdout.index(ASYNC_FAILURE)
            message = proc.stdout[idx : idx + MAX_MESSAGE_LENGTH].strip()
            return proc, (Diagnostic(stage=stage, message=message),)
        if proc.returncode != 0:
            return proc, (Diagnostic(stage=stage, message=summarize_output(output)),)
        return proc, ()

    def compile(self, source: str) -> CompileOutput:
        """Write the source to a temporary file and optionally syntax-check it."""
        fd, tmp = tempfile.mkstemp(suffix=self.config.source_suffix, prefix="cr_")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(source)
        self._source_file = Path(tmp)

        if not self.config.check_args:
            return CompileOutput(artifact=self._source_file)

        _, diagnostics = self._diagnose(
            "parse", self._command(self.config.check_args, self._source_file)
        )
        return CompileOutput(artifact=self._source_file, diagnostics=diagnostics)

    def execute(self, artifact: Any) -> ExecuteOutput:
        """Run the engine on the compiled source file."""
        proc, diagnostics = self._diagnose("execute", self._command((), Path(artifact)))
        value = proc.stdout if proc is not None else None
        return ExecuteOutput(value=value, diagnostics=diagnostics)

    def disassemble(self, artifact: Any) -> str | None:
        """Ask the engine for a bytecode listing when ``disasm_args`` is set."""
        if not self.config.disasm_args:
            return None
        try:
            proc = self._run(self._command(self.config.disasm_args, Path(artifact)))
        except (FileNotFoundError, RuntimeError) as e:
            log.debug("Disassembly unavailable: %s", e)
            return None
        return proc.stdout

    def dispose(self) -> None:
        """Remove the temporary source and stop a still-running engine."""
        with self._lock:
            self._disposed = True
            process = self._process

        if process is not None and self.config.terminate_on_dispose:
            if process.poll() is None:
                log.debug("Killing engine process %d", process.pid)
                process.kill()

        if self._source_file is not None:
            self._source_file.unlink(missing_ok=True)
