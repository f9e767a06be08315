"""Custom exceptions for the sweep harness."""
from typing import Optional


class SweepExecutionError(Exception):
    """Raised when a sweep cannot be executed at all."""
    pass


class TargetUnreachable(SweepExecutionError):
    """Raised when the target endpoint cannot be reached for a whole batch."""

    def __init__(self, endpoint: str, reason: str = ""):
        self.endpoint = endpoint
        self.reason = reason
        message = f"Target unreachable: {endpoint}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class RequestFailed(Exception):
    """A single request failed. Recorded on the sample, never raised out of a batch."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RequestTimeout(RequestFailed):
    """A single request timed out."""
    pass


class EmptyInputError(Exception):
    """Raised when a chart is requested for an empty sweep result."""
    pass


class DictionaryLoadError(Exception):
    """Exception raised when a dictionary cannot be loaded."""
    pass


class DegenerateAggregate(UserWarning):
    """Warning emitted when a sweep point has no successful samples."""
    pass
