"""
Tadka - Core primitives.

Provides:
- Result / ErrorKind for external-call outcomes
- Bounded retry with backoff
- Capability protocols for external collaborators
"""

from tadka.core.errors import CapabilityUnavailableError, TadkaError, UnknownTaskTypeError
from tadka.core.result import ErrorKind, Result
from tadka.core.retry import retry_with_backoff

__all__ = [
    "CapabilityUnavailableError",
    "ErrorKind",
    "Result",
    "TadkaError",
    "UnknownTaskTypeError",
    "retry_with_backoff",
]
