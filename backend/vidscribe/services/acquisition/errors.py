"""
Acquisition error taxonomy.
"""


class AcquisitionError(Exception):
    """
    Base exception for acquisition failures.

    Attributes:
        message: Error description
        strategy: Strategy name that produced the error (if any)
    """

    def __init__(self, message: str, strategy: str | None = None):
        self.message = message
        self.strategy = strategy
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ToolInvocationError(AcquisitionError):
    """
    Raised when the extraction tool fails or cannot be started.

    Attributes:
        returncode: Tool exit code (None if the tool never ran)
        stderr: Diagnostic output of the tool
    """

    def __init__(
        self,
        message: str,
        strategy: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message, strategy)
        self.returncode = returncode
        self.stderr = stderr


class ArtifactMissingError(AcquisitionError):
    """Raised when the tool exited cleanly but no usable artifact exists."""

    pass


class AllStrategiesExhaustedError(AcquisitionError):
    """
    Raised when every strategy for a restricted platform was access-blocked.

    Attributes:
        last_error: Error of the final attempted strategy
        hint: Remediation hint for the caller
        attempts: Number of strategies actually invoked
    """

    def __init__(
        self,
        last_error: AcquisitionError,
        hint: str,
        attempts: int,
    ):
        super().__init__(
            f"All {attempts} acquisition strategies were blocked. "
            f"Last error: {last_error}",
            strategy=last_error.strategy,
        )
        self.last_error = last_error
        self.hint = hint
        self.attempts = attempts
