"""Error types raised by the scheduling engine and its collaborators."""

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for all scheduler errors."""
    pass


class DataValidationError(SchedulerError):
    """Raised when a school data document fails validation."""
    pass


class ConfigurationMissingError(SchedulerError):
    """Raised when setup or allocations have not been provided yet."""

    def __init__(self, message: str = "School setup and allocations are not configured yet"):
        super().__init__(message)


class CapacityExceededError(SchedulerError):
    """Raised when a manual edit would exceed a subject's weekly periods."""

    def __init__(self, subject: str, teacher: str, limit: int):
        self.subject = subject
        self.teacher = teacher
        self.limit = limit
        super().__init__(f"Limit reached: {subject} ({teacher}) allows only {limit} periods")


class SolverExhaustedError(SchedulerError):
    """Raised when auto-fill runs out of attempts."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not auto-fill without conflicts after {attempts} attempts. "
            f"Try clearing some slots."
        )


class PersistenceError(SchedulerError):
    """Raised when the data store cannot be read or written."""
    pass


class MalformedLabelError(SchedulerError, ValueError):
    """Raised when a stored session label cannot be parsed."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Malformed session label: {value!r}")
