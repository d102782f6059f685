"""
Tadka - Dish Validation and Safety.

Two gates every dish passes before it reaches a user:
- is_valid_dish: structural completeness of raw model output
- is_dish_safe: deterministic content filter (calories, banned terms,
  malformed names, profile allergens)
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from tadka.models.entities import Dish, UserProfile

logger = logging.getLogger(__name__)

BANNED_TERMS = ("human", "unknown", "bleach", "poison", "toxic", "plastic", "metal", "glass")

# Per-dish calorie ceiling
MAX_CALORIES = 1500

MIN_NAME_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 10


def _non_empty_str(value: Any, min_length: int = 1) -> bool:
    return isinstance(value, str) and len(value) >= min_length


def is_valid_dish(candidate: Any) -> bool:
    """
    Check that raw model output is complete enough to become a Dish.

    Requires a name (>= 2 chars), a description (>= 10 chars), a cuisine and a
    meal type, all strings. Anything else on the candidate is ignored.
    """
    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump(by_alias=True)
    if not isinstance(candidate, Mapping):
        return False

    return (
        _non_empty_str(candidate.get("name"), MIN_NAME_LENGTH)
        and _non_empty_str(candidate.get("description"), MIN_DESCRIPTION_LENGTH)
        and _non_empty_str(candidate.get("cuisine"))
        and _non_empty_str(candidate.get("type"))
    )


def is_dish_safe(dish: Dish, profile: UserProfile | None = None) -> bool:
    """Hard deterministic safety check. Returns False for rejected dishes."""
    if dish.macros.calories > MAX_CALORIES:
        logger.warning(f'[Safety] Rejected "{dish.name}": Calories {dish.macros.calories} > {MAX_CALORIES}')
        return False

    text = " ".join([dish.name, dish.description, *(i.name for i in dish.ingredients)]).lower()
    for banned in BANNED_TERMS:
        if banned in text:
            logger.warning(f'[Safety] Rejected "{dish.name}": Contains banned term "{banned}"')
            return False

    if "recipe" in dish.name.lower():
        logger.warning(f'[Safety] Rejected "{dish.name}": Invalid name format')
        return False

    if profile is not None and profile.allergens:
        declared = {a.lower() for a in dish.allergens}
        for allergen in profile.allergens:
            needle = allergen.lower().strip()
            if needle and (needle in declared or needle in text):
                logger.warning(f'[Safety] Rejected "{dish.name}": Contains allergen "{allergen}"')
                return False

    return True
