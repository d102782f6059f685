"""
Tadka - Data models.
"""

from tadka.models.entities import (
    DayPlan,
    Dish,
    DishCandidate,
    GroceryItem,
    Ingredient,
    Macros,
    PantryItem,
    QuantityType,
    UserProfile,
    UserState,
)

__all__ = [
    "DayPlan",
    "Dish",
    "DishCandidate",
    "GroceryItem",
    "Ingredient",
    "Macros",
    "PantryItem",
    "QuantityType",
    "UserProfile",
    "UserState",
]
