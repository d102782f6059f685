"""
Tadka - Observability Package.

Provides:
- Cost estimation and tracking per model call
- Aggregated optimization statistics (cache hit rate, coalescing savings)
- Optional LangSmith tracing around model calls
"""

from tadka.observability.cost import (
    CostTracker,
    estimate_cost,
    get_cost_tracker,
    get_optimization_stats,
    log_optimization_stats,
)
from tadka.observability.tracing import init_tracing, is_tracing_enabled, trace_llm_call

__all__ = [
    "CostTracker",
    "estimate_cost",
    "get_cost_tracker",
    "get_optimization_stats",
    "init_tracing",
    "is_tracing_enabled",
    "log_optimization_stats",
    "trace_llm_call",
]
