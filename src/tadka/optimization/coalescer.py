"""
Tadka - Request Coalescing.

Concurrent callers asking for the same key share one in-flight task. The entry
is dropped as soon as the task settles (success, failure or cancellation), so
the next caller after that starts a fresh request.

Waiters await the shared task through `asyncio.shield`: cancelling one waiter
never cancels the work the others are waiting on.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class InFlightRequest:
    """A shared task and how many callers are waiting on it."""

    key: str
    task: asyncio.Task
    waiter_count: int = 1


class RequestCoalescer:
    """
    Deduplicate concurrent identical requests.

    Usage:
        coalescer = RequestCoalescer()
        key = coalescer.generate_key(TaskType.FEED, profile_tag, 0)
        result = await coalescer.request(key, lambda: call_model(...))
    """

    def __init__(self):
        self._pending: dict[str, InFlightRequest] = {}
        self.coalesced = 0
        self.unique = 0

    async def request(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run `factory()` unless an identical request is already in flight.

        Every caller for the same key sees the same value or the same
        exception.
        """
        entry = self._pending.get(key)
        if entry is not None:
            self.coalesced += 1
            entry.waiter_count += 1
            logger.debug(f"[Coalescer] Reusing in-flight request: {key[:30]}...")
        else:
            self.unique += 1
            task = asyncio.ensure_future(factory())
            entry = InFlightRequest(key=key, task=task)
            self._pending[key] = entry
            task.add_done_callback(lambda t, e=entry: self._settle(e))

        return await asyncio.shield(entry.task)

    def _settle(self, entry: InFlightRequest) -> None:
        if self._pending.get(entry.key) is entry:
            del self._pending[entry.key]
        # Mark the outcome as observed even if every waiter was cancelled
        if not entry.task.cancelled():
            entry.task.exception()

    @staticmethod
    def generate_key(task_type: Any, *args: Any) -> str:
        """
        Build a coalescing key from the task type and request parameters.

        Example:
            generate_key("feed", "vegan", 2) -> 'feed:["vegan",2]'
        """
        task = task_type.value if isinstance(task_type, Enum) else str(task_type)
        payload = json.dumps(list(args), separators=(",", ":"), sort_keys=True, default=str)
        return f"{task}:{payload}"

    def in_flight(self) -> int:
        return len(self._pending)

    def stats(self) -> dict:
        """Coalescing statistics; savings_rate is a rounded percentage."""
        total = self.coalesced + self.unique
        return {
            "coalesced": self.coalesced,
            "unique": self.unique,
            "savings_rate": round(self.coalesced / total * 100) if total else 0,
            "in_flight": len(self._pending),
        }
