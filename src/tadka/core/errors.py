"""
Tadka - Domain exceptions.

Only programming and configuration errors are raised. Failures of external
calls travel as `Result` values (see tadka.core.result).
"""


class TadkaError(Exception):
    """Base class for Tadka errors."""


class UnknownTaskTypeError(TadkaError, ValueError):
    """Raised when a task type has no entry in a policy table."""

    def __init__(self, task_type: object):
        self.task_type = task_type
        super().__init__(f"Unknown task type: {task_type!r}")


class CapabilityUnavailableError(TadkaError):
    """Raised when an adapter is used although it reports itself unavailable."""
