"""
Tadka - Name Normalization and Pantry Matching.

Two pantry matchers live here and they are NOT interchangeable:

- matches_pantry_exact: strict fold (lowercase, trim, strip non-alphanumerics,
  drop one trailing "s") then equality. Drives `is_stocked` on the grocery list.
- matches_pantry_fuzzy: lowercase/trim then substring containment in either
  direction. Drives the "pantry sync" percentage on the swipe deck.
"""

import re
from collections.abc import Iterable

from tadka.models.entities import Dish

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_name(name: str) -> str:
    """
    Normalize a name for display-level matching.

    Lowercase, strip, collapse interior whitespace.

    Examples:
        normalize_name("  Chicken Thighs  ") -> "chicken thighs"
        normalize_name("green   pepper") -> "green pepper"
    """
    return " ".join(name.lower().strip().split())


def normalize_key(name: str) -> str:
    """
    Strict fold used for grocery stock checks.

    Examples:
        normalize_key("Eggs") -> "egg"
        normalize_key(" Red-Onions ") -> "redonion"
        normalize_key("egg") -> "egg"
    """
    if not name:
        return ""
    folded = _NON_ALNUM_RE.sub("", name.lower().strip())
    return folded[:-1] if folded.endswith("s") else folded


def matches_pantry_exact(name: str, pantry_names: Iterable[str]) -> bool:
    """True iff some pantry entry folds to the same key as `name`."""
    key = normalize_key(name)
    if not key:
        return False
    return any(normalize_key(p) == key for p in pantry_names)


def matches_pantry_fuzzy(name: str, pantry_names: Iterable[str]) -> bool:
    """True iff `name` contains, or is contained in, some pantry entry."""
    needle = normalize_name(name)
    if not needle:
        return False
    for entry in pantry_names:
        candidate = normalize_name(entry)
        if candidate and (needle in candidate or candidate in needle):
            return True
    return False


def pantry_match_percent(dish: Dish, pantry_names: Iterable[str]) -> int:
    """
    Share of a dish's ingredients already in the pantry, 0-100.

    Uses the fuzzy matcher; a dish without ingredients scores 0.
    """
    if not dish.ingredients:
        return 0
    pantry = list(pantry_names)
    matches = sum(1 for ing in dish.ingredients if matches_pantry_fuzzy(ing.name, pantry))
    return round(matches / len(dish.ingredients) * 100)
