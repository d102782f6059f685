"""
Tadka - AI request optimization and meal-plan reconciliation core.

Packages:
- tools: Quantity parsing/scaling and name normalization
- kitchen: Grocery aggregation, pantry reconciliation, planner, sync
- optimization: Embedding cache, request coalescing, semantic dedup
- llm: Model routing and provider clients
- generation: Dish generation orchestrator
"""

__version__ = "2.0.0"
