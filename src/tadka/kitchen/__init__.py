"""
Tadka - Kitchen.

Deterministic reconciliation of plans, groceries and pantry, plus the cook
message and cloud sync helpers.
"""

from tadka.kitchen.cook import generate_cook_instructions
from tadka.kitchen.grocery import generate_grocery_list
from tadka.kitchen.pantry import (
    add_pantry_item,
    deduct_pantry_item,
    migrate_pantry,
    update_pantry_item,
)
from tadka.kitchen.planner import assign_dish, empty_week, propagate_dish_update
from tadka.kitchen.sync import UserStateRepository, reconcile_guest_to_user, sanitize_document

__all__ = [
    "UserStateRepository",
    "add_pantry_item",
    "assign_dish",
    "deduct_pantry_item",
    "empty_week",
    "generate_cook_instructions",
    "generate_grocery_list",
    "migrate_pantry",
    "propagate_dish_update",
    "reconcile_guest_to_user",
    "sanitize_document",
    "update_pantry_item",
]
