"""
Tadka - Cook Instructions.

Turns the week's plan into a single chat message for the household cook,
including allergen and health warnings from the profile.
"""

import asyncio
import logging

from pydantic import BaseModel, Field

from tadka.config import settings
from tadka.core.capabilities import Generator
from tadka.core.retry import Sleep, retry_with_backoff
from tadka.llm.model_router import TaskType, get_token_budget, select_model, truncate_to_token_budget
from tadka.models.entities import DayPlan, UserProfile

logger = logging.getLogger(__name__)


class CookMessage(BaseModel):
    """Structured output for the cook message."""

    reasoning: str = Field(default="", description="Short check of the plan against the profile")
    whatsapp_message: str = Field(description="The message to send to the cook")


def build_cook_prompt(week_plan: list[DayPlan], profile: UserProfile | None = None) -> str:
    lines = ["Write one friendly Hinglish chat message telling the cook what to prepare."]
    for day in week_plan:
        meals = []
        if day.lunch is not None:
            meals.append(f"Lunch: {day.lunch.name} ({day.lunch.local_name or day.lunch.name})")
        if day.dinner is not None:
            meals.append(f"Dinner: {day.dinner.name} ({day.dinner.local_name or day.dinner.name})")
        if meals:
            lines.append(f"{day.day} - " + "; ".join(meals))

    if profile is not None:
        if profile.allergens:
            lines.append(f"ALLERGENS (warn the cook explicitly): {', '.join(profile.allergens)}")
        if profile.conditions:
            lines.append(f"Health conditions: {', '.join(profile.conditions)}")
        if profile.dietary_preference and profile.dietary_preference != "Any":
            lines.append(f"Diet: {profile.dietary_preference}")

    budget = get_token_budget(TaskType.COOK)
    return truncate_to_token_budget("\n".join(lines), budget["max_input_tokens"])


async def generate_cook_instructions(
    week_plan: list[DayPlan],
    generator: Generator,
    profile: UserProfile | None = None,
    *,
    retries: int | None = None,
    sleep: Sleep = asyncio.sleep,
) -> str | None:
    """
    Generate the cook message for a week.

    Returns:
        The message, or None when the week has no dishes (no call is made),
        the generator is unavailable, or every attempt failed.
    """
    if not any(day.dishes() for day in week_plan):
        return None

    if not generator.is_available():
        logger.warning("[Cook] Generator unavailable, skipping cook instructions")
        return None

    config = select_model(TaskType.COOK)
    prompt = build_cook_prompt(week_plan, profile)

    result = await retry_with_backoff(
        lambda: generator.generate(
            prompt,
            CookMessage,
            config["model"],
            max_output_tokens=config["max_output_tokens"],
            temperature=config["temperature"],
            task=TaskType.COOK.value,
        ),
        retries=settings.retry_count if retries is None else retries,
        delay=settings.retry_base_delay,
        backoff_factor=settings.retry_backoff_factor,
        timeout=settings.call_timeout_seconds,
        sleep=sleep,
        label="cook instructions",
    )

    if not result.ok:
        logger.error(f"[Cook] Failed after {result.attempts} attempts: {result.detail}")
        return None

    message = (result.value or {}).get("whatsapp_message")
    if not isinstance(message, str) or not message.strip():
        logger.warning("[Cook] Malformed response, no message")
        return None
    return message
