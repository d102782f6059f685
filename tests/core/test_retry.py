"""
Tests for retry_with_backoff and the Result type.
"""

import asyncio

from tadka.core.result import ErrorKind, Result
from tadka.core.retry import retry_with_backoff


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class Flaky:
    """Fails `failures` times, then returns `value`."""

    def __init__(self, failures: int, value="ok"):
        self.failures = failures
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"boom {self.calls}")
        return self.value


class TestRetryWithBackoff:
    """Bounded attempts with exponential delays."""

    def test_first_attempt_succeeds(self, recording_sleep):
        fn = Flaky(0)

        result = _run(retry_with_backoff(fn, sleep=recording_sleep))

        assert result.ok
        assert result.value == "ok"
        assert result.attempts == 1
        assert recording_sleep.delays == []

    def test_recovers_after_failures(self, recording_sleep):
        fn = Flaky(2)

        result = _run(retry_with_backoff(fn, retries=3, delay=1.0, backoff_factor=2.0, sleep=recording_sleep))

        assert result.ok
        assert result.attempts == 3
        assert recording_sleep.delays == [1.0, 2.0]

    def test_exhausts_retries(self, recording_sleep):
        fn = Flaky(10)

        result = _run(retry_with_backoff(fn, retries=3, delay=1.0, backoff_factor=2.0, sleep=recording_sleep))

        assert not result.ok
        assert result.error == ErrorKind.TRANSIENT
        assert result.attempts == 4
        assert fn.calls == 4
        assert recording_sleep.delays == [1.0, 2.0, 4.0]
        assert "boom 4" in result.detail

    def test_zero_retries_is_single_attempt(self, recording_sleep):
        fn = Flaky(1)

        result = _run(retry_with_backoff(fn, retries=0, sleep=recording_sleep))

        assert result.error == ErrorKind.TRANSIENT
        assert fn.calls == 1
        assert recording_sleep.delays == []

    def test_per_attempt_timeout(self, recording_sleep):
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await asyncio.sleep(1)

        result = _run(retry_with_backoff(slow, retries=1, timeout=0.01, sleep=recording_sleep))

        assert result.error == ErrorKind.TIMEOUT
        assert calls == 2


class TestResult:
    """Result carries a value or an error kind."""

    def test_success(self):
        result = Result.success(5, attempts=2)
        assert result.ok
        assert result.unwrap_or(0) == 5
        assert result.attempts == 2

    def test_failure(self):
        result = Result.failure(ErrorKind.UNAVAILABLE, "no key")
        assert not result.ok
        assert result.value is None
        assert result.unwrap_or("fallback") == "fallback"
