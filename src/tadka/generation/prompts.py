"""
Tadka - Feed Prompts and Cache Keys.

Builds the per-unit feed prompt, the tag set that keys the exact cache, and
the flattened vector-index record for an accepted dish.
"""

import json

from tadka.core.capabilities import VectorRecord
from tadka.llm.model_router import TaskType, get_token_budget, truncate_to_token_budget
from tadka.models.entities import Dish, UserProfile

CACHE_COLLECTION = "cached_dishes"

DIET_INSTRUCTIONS = {
    "vegetarian": "Strictly Vegetarian. No meat, no fish, no poultry, no eggs.",
    "vegan": "Strictly Vegan. No animal products of any kind, including dairy, eggs and honey.",
    "eggetarian": "Eggetarian. Include eggs and vegetarian items, but no meat, fish, or poultry.",
    "non-vegetarian": "Non-Vegetarian. Can include meat, fish, poultry, eggs, and vegetarian items.",
}
DEFAULT_DIET_INSTRUCTION = "No dietary restriction."


def build_cache_tags(profile: UserProfile, mode: str) -> list[str]:
    """
    Tag set describing a generation request.

    Diet, health conditions, preferred cuisines and the feed mode, lowercased,
    de-duplicated and sorted so equal requests share one cache entry.
    """
    raw = [profile.dietary_preference, *profile.conditions, *profile.cuisines, mode]
    return sorted({t.strip().lower() for t in raw if t and t.strip() and t.strip().lower() != "any"})


def cache_key(tags: list[str]) -> str:
    """Document key of the exact cache entry for a tag set."""
    return f"{CACHE_COLLECTION}/{'|'.join(tags) or 'any'}"


def build_feed_prompt(
    profile: UserProfile,
    mode: str,
    slot: int,
    avoid: list[str] | None = None,
) -> str:
    """
    Prompt for a single swipe-deck dish.

    Args:
        profile: Preferences of the requesting user
        mode: Feed mode (e.g. "Explorer", "Comfort")
        slot: Index of this unit within the batch, used to vary the output
        avoid: Dish names already on screen
    """
    diet = DIET_INSTRUCTIONS.get(profile.dietary_preference.lower(), DEFAULT_DIET_INSTRUCTION)
    lines = [
        "Generate ONE distinct meal idea as a recipe card.",
        f"Dietary Preference: {diet}",
        f"Preferred Cuisines: {', '.join(profile.cuisines) or 'Any'}.",
        f"Vibe Context: {mode}. Variation #{slot + 1}.",
    ]
    if profile.allergens:
        lines.append(f"Exclude ingredients containing these allergens: {', '.join(profile.allergens)}.")
    if profile.conditions:
        lines.append(f"Suitable for: {', '.join(profile.conditions)}.")
    if profile.custom_notes:
        lines.append(f"Notes: {profile.custom_notes}")
    if avoid:
        lines.append(f"Do not repeat: {', '.join(avoid)}.")
    lines.append(
        "Include macros per serving, ingredients with quantities and category, "
        "5-6 step instructions, a local name if applicable, and tags like "
        "'spicy', 'quick', 'high-protein'. The type is 'Lunch' or 'Dinner'."
    )

    budget = get_token_budget(TaskType.FEED)
    return truncate_to_token_budget("\n".join(lines), budget["max_input_tokens"])


def dish_text(dish: Dish) -> str:
    """Rich text representation embedded into the vector index."""
    return (
        f"Dish: {dish.name}. Cuisine: {dish.cuisine}. Description: {dish.description}. "
        f"Tags: {', '.join(dish.tags)}. Health: {', '.join(dish.health_tags)}."
    )


def dish_to_vector_record(dish: Dish) -> VectorRecord:
    """
    Flatten a dish for the vector index.

    Nested fields are stored as JSON strings and decoded again by the
    duplicate checker.
    """
    text = dish_text(dish)
    metadata = {
        "kind": "dish",
        "name": dish.name,
        "localName": dish.local_name,
        "description": dish.description,
        "cuisine": dish.cuisine,
        "type": dish.meal_type,
        "isStaple": bool(dish.is_staple),
        "text": text,
        "tags": dish.tags,
        "healthTags": dish.health_tags,
        "macros": json.dumps(dish.macros.model_dump()),
        "ingredients": json.dumps([i.model_dump() for i in dish.ingredients]),
        "instructions": json.dumps(dish.instructions),
        "allergens": json.dumps(dish.allergens),
    }
    return VectorRecord(id=dish.id, text=text, metadata=metadata)
