"""
Exception hierarchy for the dead letter archive.

Only ConfigurationError, ArchiveWriteError and InvocationTimeoutError
escape an invocation. MessageResolutionError is always recovered by the
metadata extractor.
"""


class DeadLetterArchiveError(Exception):
    """Base class for all dead letter archive errors."""
    pass


class ConfigurationError(DeadLetterArchiveError, ValueError):
    """Raised when required destination settings are missing or invalid."""
    pass


class MessageResolutionError(DeadLetterArchiveError):
    """Raised when the full workflow message cannot be rebuilt from an execution event."""

    def __init__(self, message: str, execution_arn: str | None = None):
        self.execution_arn = execution_arn
        super().__init__(message)


class ArchiveWriteError(DeadLetterArchiveError):
    """
    Raised after a batch settled when at least one archive write failed.

    Attributes:
        failed_count: Number of records whose write failed
        total_count: Number of records in the batch
        written_keys: Keys that were written before the failure was reported
    """

    def __init__(self, failed_count: int, total_count: int, written_keys: list[str] | None = None):
        self.failed_count = failed_count
        self.total_count = total_count
        self.written_keys = written_keys or []
        super().__init__(
            f"{failed_count} of {total_count} dead letter records failed to archive"
        )


class InvocationTimeoutError(DeadLetterArchiveError, TimeoutError):
    """Raised when a batch does not settle within the invocation deadline."""
    pass
