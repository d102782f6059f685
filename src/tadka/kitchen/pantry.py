"""
Tadka - Pantry Reconciliation.

Pure functions over the pantry list. Each returns a new list and never mutates
its input, so callers replace their reference with the return value.

Invariant: names are unique case-insensitively. Adding a name that already
exists refreshes the existing record instead of creating a second one.
"""

import time
import uuid
from collections.abc import Callable, Iterable
from typing import Any

from tadka.models.entities import PantryItem, QuantityType

FULL_LEVEL = 3
DEFAULT_LEVEL = 1
DEFAULT_CATEGORY = "Uncategorized"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


def _name_key(name: str) -> str:
    return name.strip().lower()


_FIELD_NAMES = {
    **{name: name for name in PantryItem.model_fields},
    **{f.alias: name for name, f in PantryItem.model_fields.items() if f.alias},
}


def migrate_pantry(
    legacy_names: Iterable[str] | None,
    *,
    clock: Callable[[], int] = _now_ms,
) -> list[PantryItem]:
    """
    Convert a legacy list of names into PantryItems.

    Blank entries are dropped and duplicates (case-insensitive) collapse onto
    the first spelling. Every item starts as binary / in stock.
    """
    if not legacy_names:
        return []

    seen: set[str] = set()
    unique: list[str] = []
    for raw in legacy_names:
        name = raw.strip()
        key = _name_key(name)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(name)

    added_at = clock()
    return [
        PantryItem(
            id=_new_id(),
            name=name,
            quantity_type=QuantityType.BINARY,
            quantity_level=DEFAULT_LEVEL,
            category=DEFAULT_CATEGORY,
            added_at=added_at,
        )
        for name in unique
    ]


def _field_updates(partial: dict[str, Any]) -> dict[str, Any]:
    """Map snake_case or stored camelCase keys to field names. Unknown keys raise ValueError."""
    updates: dict[str, Any] = {}
    for key, value in partial.items():
        field = _FIELD_NAMES.get(key)
        if field is None:
            raise ValueError(f"Unknown pantry field: {key!r}")
        updates[field] = value
    return updates


def add_pantry_item(
    current: list[PantryItem],
    partial: dict[str, Any],
    *,
    clock: Callable[[], int] = _now_ms,
) -> list[PantryItem]:
    """
    Add or refresh a pantry item.

    Args:
        current: Current pantry
        partial: Fields to set; must include "name"

    Returns:
        New pantry list. On a name hit the record keeps its id and takes the
        supplied spelling of the name; its level resets to full (3) unless a
        level is supplied, and added_at refreshes.
        On a miss a binary / level 1 record is created with the overrides.

    Raises:
        ValueError: missing name or unknown field
    """
    overrides = _field_updates(partial)
    overrides.pop("id", None)
    name = overrides.get("name")
    if not name or not str(name).strip():
        raise ValueError("Pantry item requires a name")

    overrides["name"] = str(name).strip()
    key = _name_key(overrides["name"])

    for index, existing in enumerate(current):
        if _name_key(existing.name) == key:
            update = {"quantity_level": FULL_LEVEL, "added_at": clock(), **overrides}
            if update.get("quantity_level") is None:
                update["quantity_level"] = FULL_LEVEL
            refreshed = PantryItem.model_validate(
                {**existing.model_dump(), **update, "id": existing.id}
            )
            return [*current[:index], refreshed, *current[index + 1 :]]

    created = PantryItem.model_validate(
        {
            "id": _new_id(),
            "quantity_type": QuantityType.BINARY,
            "quantity_level": DEFAULT_LEVEL,
            "category": DEFAULT_CATEGORY,
            "added_at": clock(),
            **overrides,
        }
    )
    return [*current, created]


def deduct_pantry_item(current: list[PantryItem], item_id: str) -> list[PantryItem]:
    """Remove an item by id. An unknown id is a no-op."""
    return [item for item in current if item.id != item_id]


def update_pantry_item(
    current: list[PantryItem],
    item_id: str,
    updates: dict[str, Any],
) -> list[PantryItem]:
    """
    Apply field updates to one item by id. The id itself never changes.

    Raises:
        ValueError: unknown field
    """
    changes = _field_updates(updates)
    changes.pop("id", None)
    return [
        PantryItem.model_validate({**item.model_dump(), **changes}) if item.id == item_id else item
        for item in current
    ]


def pantry_names(current: Iterable[PantryItem]) -> list[str]:
    """Names only, for the grocery stock check."""
    return [item.name for item in current]
