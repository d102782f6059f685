"""
Tadka - Domain Entity Models.

These models mirror the documents the app persists per user and the
structured output requested from the generation model. They are used for:
- Structured LLM outputs via Instructor
- Pure kitchen functions (grocery, pantry, planner)
- Document store serialization
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


IngredientCategory = Literal["Produce", "Protein", "Dairy", "Pantry", "Spices"]


class QuantityType(str, Enum):
    """How a pantry item tracks its stock level."""

    BINARY = "binary"  # in stock / out of stock
    LOOSE = "loose"  # 1-3 level (low, some, full)
    DISCRETE = "discrete"  # integer count


# =============================================================================
# Dishes
# =============================================================================


class Ingredient(BaseModel):
    """
    Ingredient line attached to a dish.

    Quantity stays free text ("1/2 cup") so scaling is lossless and repeatable.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: str = ""
    category: IngredientCategory = "Pantry"


class Macros(BaseModel):
    """Per-serving macro estimate."""

    protein: float = 0
    carbs: float = 0
    fat: float = 0
    calories: float = 0


class Dish(BaseModel):
    """
    A recipe card.

    Created by the generation pipeline or imported by the user. `id` is
    assigned once at creation and never reused.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    local_name: str = Field(default="", alias="localName")
    description: str = ""
    cuisine: str = ""
    meal_type: str = Field(default="", alias="type")
    macros: Macros = Field(default_factory=Macros)
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    health_tags: list[str] = Field(default_factory=list, alias="healthTags")
    allergens: list[str] = Field(default_factory=list)
    servings: float | None = None
    user_notes: str | None = Field(default=None, alias="userNotes")
    is_staple: bool | None = Field(default=None, alias="isStaple")

    @property
    def display_name(self) -> str:
        """Name shown to the cook (local name wins when present)."""
        return self.local_name or self.name


class DishCandidate(BaseModel):
    """
    Raw structured output requested from the generation model.

    Every field is optional: the model may omit anything, and validation
    decides afterwards whether the candidate becomes a Dish.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    local_name: str | None = Field(default=None, alias="localName")
    description: str | None = None
    cuisine: str | None = None
    meal_type: str | None = Field(default=None, alias="type")
    macros: Macros | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    health_tags: list[str] = Field(default_factory=list, alias="healthTags")
    allergens: list[str] = Field(default_factory=list)


class DayPlan(BaseModel):
    """
    One day of the weekly planner.

    Slots hold full Dish snapshots, not ids, so old plans stay meaningful.
    """

    day: str
    lunch: Dish | None = None
    dinner: Dish | None = None

    def dishes(self) -> list[Dish]:
        """Non-empty slots in lunch, dinner order."""
        return [d for d in (self.lunch, self.dinner) if d is not None]


# =============================================================================
# Pantry & Grocery
# =============================================================================


class PantryItem(BaseModel):
    """Item in the user's pantry. Names are unique case-insensitively."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    quantity_type: QuantityType = Field(default=QuantityType.BINARY, alias="quantityType")
    quantity_level: float = Field(default=1, alias="quantityLevel")
    category: str = "Uncategorized"
    added_at: int = Field(default=0, alias="addedAt")  # epoch milliseconds


class GroceryItem(BaseModel):
    """Derived shopping-list line. Rebuilt on every request, never persisted."""

    name: str
    category: str = "Pantry"
    total_quantity: float = 0
    unit: str = "unit"
    quantity: str = ""  # display string, e.g. "3 unit"
    source_dishes: list[str] = Field(default_factory=list)
    is_stocked: bool = False


# =============================================================================
# User
# =============================================================================


class UserProfile(BaseModel):
    """Preferences collected during onboarding."""

    name: str = ""
    allergens: list[str] = Field(default_factory=list)
    allergen_notes: str = ""
    conditions: list[str] = Field(default_factory=list)
    condition_notes: str = ""
    cuisines: list[str] = Field(default_factory=list)
    cuisine_notes: str = ""
    dietary_preference: str = "Any"
    custom_notes: str = ""
    daily_targets: Macros = Field(default_factory=Macros)
    is_onboarded: bool = False


class UserState(BaseModel):
    """The per-user document kept in the document store."""

    profile: UserProfile | None = None
    approved_dishes: list[Dish] = Field(default_factory=list)
    weekly_plan: list[DayPlan] = Field(default_factory=list)
    pantry_stock: list[PantryItem] = Field(default_factory=list)
