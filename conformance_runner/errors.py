"""Exception taxonomy for the conformance runner.

Only ``DiscoveryError`` and ``ConfigurationError`` (with its subclasses) are
fatal to a run. The remaining exceptions describe per-test conditions and are
converted into a classified ``TestResult`` by the executor.
"""


class HarnessRunnerError(Exception):
    """Base class for all runner errors."""


class DiscoveryError(HarnessRunnerError):
    """Raised when test discovery cannot walk or match the search directory."""


class ConfigurationError(HarnessRunnerError):
    """Raised when command-line flags or runtime configuration are invalid."""


class RuntimeNotFoundError(ConfigurationError):
    """Raised when a runtime plugin is not found."""


class HarnessFileError(HarnessRunnerError):
    """Raised when a harness include file cannot be read."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"failed to read include {name}: {reason}")
        self.name = name


class TestTimeoutError(HarnessRunnerError, TimeoutError):
    """Raised when a test's deadline expires before its unit of work finishes."""

    __test__ = False

    def __init__(self, timeout: str) -> None:
        super().__init__(f"test timed out after {timeout}")
        self.timeout = timeout


class FaultRecovered(HarnessRunnerError):
    """Wraps an unexpected exception raised inside a test's unit of work."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"test panicked: {cause}")
        self.cause = cause
