"""
Tadka - Weekly Planner.

Slots hold Dish snapshots, so an edit to a dish (notes, servings) has to be
copied into every slot that holds it.
"""

from tadka.models.entities import DayPlan, Dish

WEEK_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def empty_week() -> list[DayPlan]:
    """Seven empty days, Monday first."""
    return [DayPlan(day=day) for day in WEEK_DAYS]


def propagate_dish_update(week_plan: list[DayPlan], dish: Dish) -> list[DayPlan]:
    """
    Replace every slot holding `dish.id` with the updated snapshot.

    Returns a new list; days without that dish are returned as-is.
    """
    updated = []
    for day in week_plan:
        lunch_hit = day.lunch is not None and day.lunch.id == dish.id
        dinner_hit = day.dinner is not None and day.dinner.id == dish.id
        if not (lunch_hit or dinner_hit):
            updated.append(day)
            continue
        updated.append(
            day.model_copy(
                update={
                    "lunch": dish if lunch_hit else day.lunch,
                    "dinner": dish if dinner_hit else day.dinner,
                }
            )
        )
    return updated


def assign_dish(week_plan: list[DayPlan], day: str, slot: str, dish: Dish | None) -> list[DayPlan]:
    """Put `dish` (or None to clear) into `slot` ("lunch" or "dinner") of `day`."""
    if slot not in ("lunch", "dinner"):
        raise ValueError(f"Unknown slot: {slot!r}")
    return [d.model_copy(update={slot: dish}) if d.day == day else d for d in week_plan]
