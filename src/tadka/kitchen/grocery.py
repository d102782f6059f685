"""
Tadka - Grocery List Aggregation.

Folds a week of planned meals into a consolidated shopping list:
- Identical ingredient names (case/trim-insensitive) are summed
- Provenance is kept in `source_dishes`
- Items already in the pantry are flagged with the strict matcher

Known limitation: magnitudes are summed as raw numbers and only the first-seen
unit is kept, so "500 g" + "1 kg" reads as "501 g". Unit conversion is not
attempted because the intended behavior for mixed units is undecided.
"""

import logging
from collections.abc import Iterable

from tadka.models.entities import DayPlan, GroceryItem, Ingredient
from tadka.tools.normalize import matches_pantry_exact
from tadka.tools.quantity import split_quantity

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "unit"


def parse_magnitude(raw_qty: str) -> tuple[float, str]:
    """
    Read a grocery magnitude and unit from a free-text quantity.

    Unparseable quantities count as 1 with the literal text as the unit.

    Examples:
        parse_magnitude("2 unit") -> (2.0, "unit")
        parse_magnitude("1/2 kg") -> (0.5, "kg")
        parse_magnitude("200g") -> (200.0, "g")
        parse_magnitude("3") -> (3.0, "unit")
        parse_magnitude("a pinch") -> (1.0, "a pinch")
    """
    value, rest = split_quantity(raw_qty or "")
    if value is None:
        return (1.0, (raw_qty or "").strip() or DEFAULT_UNIT)
    return (value, rest.strip() or DEFAULT_UNIT)


def _format_total(total: float, unit: str) -> str:
    if float(total).is_integer():
        qty = str(int(total))
    else:
        qty = f"{total:.2f}".rstrip("0").rstrip(".")
    return f"{qty} {unit}".strip()


def generate_grocery_list(
    week_plan: Iterable[DayPlan],
    pantry_names: Iterable[str],
) -> list[GroceryItem]:
    """
    Build the shopping list for a week.

    Args:
        week_plan: Planned days; empty slots are skipped
        pantry_names: Names currently in stock

    Returns:
        One GroceryItem per distinct ingredient name. Order is not part of
        the contract.
    """
    pantry = list(pantry_names)
    grouped: dict[str, GroceryItem] = {}

    for day in week_plan:
        for dish in day.dishes():
            source = dish.display_name
            for ing in dish.ingredients:
                _accumulate(grouped, ing, source)

    items = []
    for item in grouped.values():
        items.append(
            item.model_copy(
                update={
                    "quantity": _format_total(item.total_quantity, item.unit),
                    "is_stocked": matches_pantry_exact(item.name, pantry),
                }
            )
        )

    logger.debug(f"[Grocery] {len(items)} items from {len(pantry)} pantry entries")
    return items


def _accumulate(grouped: dict[str, GroceryItem], ing: Ingredient, source: str) -> None:
    key = ing.name.lower().strip()
    value, unit = parse_magnitude(ing.quantity)

    existing = grouped.get(key)
    if existing is None:
        grouped[key] = GroceryItem(
            name=ing.name.strip(),
            category=ing.category,
            total_quantity=value,
            unit=unit,
            source_dishes=[source],
        )
        return

    existing.total_quantity += value
    if source not in existing.source_dishes:
        existing.source_dishes.append(source)
