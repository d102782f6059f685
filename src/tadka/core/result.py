"""
Tadka - Explicit results for external calls.

Every wrapper around a generation, embedding, search or document call returns
a Result, so "failed unit, continue the batch" is a branch, not a swallowed
exception.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure taxonomy for external calls."""

    TRANSIENT = "transient"  # network/quota error, retries exhausted
    TIMEOUT = "timeout"  # per-attempt timeout, retries exhausted
    UNAVAILABLE = "unavailable"  # capability not configured
    VALIDATION = "validation"  # structurally incomplete output
    PERSISTENCE = "persistence"  # cache/index write failed


@dataclass(frozen=True)
class Result(Generic[T]):
    """Value or error kind, never both."""

    value: T | None = None
    error: ErrorKind | None = None
    detail: str = ""
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, attempts: int = 1) -> "Result[T]":
        return cls(value=value, attempts=attempts)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "", attempts: int = 1) -> "Result[T]":
        return cls(error=error, detail=detail, attempts=attempts)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or `default` on failure."""
        if self.ok:
            return self.value  # type: ignore[return-value]
        return default
