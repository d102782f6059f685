"""
Pytest configuration and fixtures for Tadka tests.

External capabilities are replaced by small in-process fakes; nothing here
talks to OpenAI or Supabase.
"""

import asyncio
import os

import pytest

# Set test environment before importing tadka modules
os.environ["TADKA_ENV"] = "development"
os.environ["RETRY_BASE_DELAY"] = "0"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_KEY", None)
os.environ.pop("LANGCHAIN_TRACING_V2", None)

from tadka.core.capabilities import VectorMatch, VectorRecord
from tadka.models.entities import DayPlan, Dish, Ingredient, Macros, UserProfile


# ---------------------------------------------------------------------------
# Fake capabilities
# ---------------------------------------------------------------------------


def make_candidate(n: int, **overrides) -> dict:
    """A structurally valid dish payload as the generator would return it."""
    data = {
        "name": f"Test Dish {n}",
        "localName": f"Dish {n}",
        "description": "A comforting weeknight dish with warm spices.",
        "cuisine": "Indian",
        "type": "Dinner",
        "macros": {"protein": 20, "carbs": 40, "fat": 10, "calories": 450},
        "ingredients": [{"name": "Onion", "quantity": "1", "category": "Produce"}],
        "instructions": ["Chop", "Cook", "Serve"],
        "tags": ["quick"],
    }
    data.update(overrides)
    return data


class FakeGenerator:
    """
    Generator returning numbered valid dishes.

    `responder(call_index, prompt)` can replace the default output; it may
    return a dict/None or raise.
    """

    def __init__(self, responder=None, available: bool = True):
        self.responder = responder or (lambda i, prompt: make_candidate(i))
        self.available = available
        self.calls: list[dict] = []

    def is_available(self) -> bool:
        return self.available

    async def generate(self, prompt, schema, model, *, max_output_tokens, temperature, task="unknown"):
        index = len(self.calls)
        self.calls.append({
            "prompt": prompt,
            "schema": schema,
            "model": model,
            "max_output_tokens": max_output_tokens,
            "temperature": temperature,
            "task": task,
        })
        await asyncio.sleep(0)
        return self.responder(index, prompt)


class FakeEmbedder:
    """Deterministic embeddings; can be told to fail the first N calls."""

    def __init__(self, available: bool = True, fail_times: int = 0):
        self.available = available
        self.fail_times = fail_times
        self.calls: list[str] = []

    def is_available(self) -> bool:
        return self.available

    async def embed(self, text: str):
        self.calls.append(text)
        await asyncio.sleep(0)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("embedding quota exceeded")
        return [float(len(text)), 1.0, 0.5]


class FakeVectorIndex:
    """Vector index returning canned matches and recording upserts."""

    def __init__(self, matches=None, available: bool = True, error: Exception | None = None, delay: float = 0):
        self.matches: list[VectorMatch] = list(matches or [])
        self.available = available
        self.error = error
        self.delay = delay
        self.searches: list[tuple[str, str, int]] = []
        self.upserts: list[tuple[list[VectorRecord], str]] = []

    def is_available(self) -> bool:
        return self.available

    async def search(self, query, namespace, top_k):
        self.searches.append((query, namespace, top_k))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.matches[:top_k]

    async def upsert(self, records, namespace):
        self.upserts.append((list(records), namespace))
        return len(records)


class RecordingSleep:
    """Replacement for asyncio.sleep that only records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_generator():
    return FakeGenerator


@pytest.fixture
def fake_embedder():
    return FakeEmbedder


@pytest.fixture
def fake_index():
    return FakeVectorIndex


@pytest.fixture
def candidate():
    return make_candidate


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def sample_dish():
    """A complete dish as stored in the approved list."""
    return Dish(
        id="dish-1",
        name="Paneer Tikka",
        local_name="पनीर टिक्का",
        description="Char-grilled cottage cheese in a spiced yogurt marinade.",
        cuisine="Indian",
        meal_type="Dinner",
        macros=Macros(protein=25, carbs=10, fat=18, calories=320),
        ingredients=[
            Ingredient(name="Paneer", quantity="200g", category="Dairy"),
            Ingredient(name="Onion", quantity="1", category="Produce"),
            Ingredient(name="Yogurt", quantity="1/2 cup", category="Dairy"),
        ],
        instructions=["Marinate", "Skewer", "Grill"],
        tags=["spicy", "high-protein"],
        health_tags=["High-Protein"],
    )


@pytest.fixture
def dal_dish():
    return Dish(
        id="dish-2",
        name="Dal Fry",
        local_name="Dal",
        description="Yellow lentils tempered with cumin and garlic.",
        cuisine="Indian",
        meal_type="Lunch",
        ingredients=[
            Ingredient(name="Onion", quantity="2", category="Produce"),
            Ingredient(name="Toor Dal", quantity="1 cup", category="Pantry"),
            Ingredient(name="Salt", quantity="to taste", category="Spices"),
        ],
    )


@pytest.fixture
def sample_week(sample_dish, dal_dish):
    """Monday lunch Dal Fry, Monday dinner Paneer Tikka, Tuesday lunch Dal Fry."""
    return [
        DayPlan(day="Monday", lunch=dal_dish, dinner=sample_dish),
        DayPlan(day="Tuesday", lunch=dal_dish),
        DayPlan(day="Wednesday"),
    ]


@pytest.fixture
def sample_profile():
    return UserProfile(
        name="Asha",
        allergens=["Peanut"],
        conditions=["Diabetes"],
        cuisines=["Indian", "Thai"],
        dietary_preference="Vegetarian",
        is_onboarded=True,
    )
