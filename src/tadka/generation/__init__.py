"""
Tadka - Dish Generation.

Cache-first, coalesced and deduplicated swipe-deck generation.
"""

from tadka.generation.orchestrator import DishGenerationOrchestrator
from tadka.generation.validation import is_dish_safe, is_valid_dish

__all__ = [
    "DishGenerationOrchestrator",
    "is_dish_safe",
    "is_valid_dish",
]
