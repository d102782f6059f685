"""
Tadka - Cost and Optimization Tracking.

Estimates spend per model call and aggregates the hit/savings counters of the
optimization layer for monitoring.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tadka.optimization.coalescer import RequestCoalescer
    from tadka.optimization.embedding_cache import EmbeddingCache

logger = logging.getLogger(__name__)


# Per 1M tokens (USD)
MODEL_COSTS = {
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-nano": {"input": 0.10, "output": 0.40},
    "text-embedding-3-small": {"input": 0.02, "output": 0.00},
}


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """
    Estimate the cost of a model call in USD.

    Unknown models are priced at zero.
    """
    costs = MODEL_COSTS.get(model)
    if costs is None:
        return 0.0

    input_cost = (input_tokens / 1_000_000) * costs["input"]
    output_cost = (output_tokens / 1_000_000) * costs["output"]
    return input_cost + output_cost


class CostTracker:
    """
    Track cumulative costs across a process.

    Usage:
        tracker = CostTracker()
        tracker.add("gpt-4.1-mini", 500, 100, task="feed")
        print(tracker.total_cost)
    """

    def __init__(self):
        self.calls: list[dict] = []
        self.total_input_tokens = 0
        self.total_output_tokens = 0
        self.total_cost = 0.0

    def add(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        task: str = "unknown",
    ) -> float:
        """Add a call and return its estimated cost."""
        cost = estimate_cost(model, input_tokens, output_tokens)

        self.calls.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "model": model,
            "task": task,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "cost": cost,
        })

        self.total_input_tokens += input_tokens
        self.total_output_tokens += output_tokens
        self.total_cost += cost
        return cost

    def summary(self) -> dict:
        """Get a summary of tracked costs."""
        return {
            "total_calls": len(self.calls),
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "total_cost_usd": round(self.total_cost, 6),
            "by_model": self._grouped("model"),
            "by_task": self._grouped("task"),
        }

    def _grouped(self, field: str) -> dict[str, float]:
        totals: dict[str, float] = {}
        for call in self.calls:
            totals[call[field]] = totals.get(call[field], 0.0) + call["cost"]
        return {k: round(v, 6) for k, v in totals.items()}


_process_tracker: CostTracker | None = None


def get_cost_tracker() -> CostTracker:
    """Get or create the process-wide cost tracker."""
    global _process_tracker
    if _process_tracker is None:
        _process_tracker = CostTracker()
    return _process_tracker


def reset_cost_tracker() -> None:
    """Reset the process-wide cost tracker."""
    global _process_tracker
    _process_tracker = CostTracker()


def get_optimization_stats(
    embedding_cache: "EmbeddingCache",
    coalescer: "RequestCoalescer",
    tracker: CostTracker | None = None,
) -> dict:
    """Aggregate cache, coalescing and (optionally) cost statistics."""
    stats = {
        "embedding_cache": embedding_cache.stats(),
        "request_coalescing": coalescer.stats(),
    }
    if tracker is not None:
        stats["cost"] = tracker.summary()
    return stats


def log_optimization_stats(stats: dict) -> None:
    """Write a one-line summary of `get_optimization_stats` output."""
    cache = stats["embedding_cache"]
    coalescing = stats["request_coalescing"]
    logger.info(
        f"[Optimization] embedding cache {cache['hit_rate']}% hit rate "
        f"({cache['size']} entries); coalescing {coalescing['savings_rate']}% savings "
        f"({coalescing['coalesced']} coalesced)"
    )
