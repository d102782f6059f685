"""
Tests for the semantic duplicate checker.
"""

import asyncio

from tadka.core.capabilities import VectorMatch
from tadka.generation.prompts import dish_to_vector_record
from tadka.optimization.dedup import SemanticDuplicateChecker


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


def _match(dish, score: float, **metadata_overrides) -> VectorMatch:
    record = dish_to_vector_record(dish)
    return VectorMatch(id=record.id, score=score, metadata={**record.metadata, **metadata_overrides})


class TestSemanticDuplicateChecker:
    """Threshold decision and fail-open behavior."""

    def test_query_shape(self, fake_index):
        index = fake_index()

        _run(SemanticDuplicateChecker(index).check("Paneer Tikka", "Indian"))

        assert index.searches == [("Paneer Tikka Indian", "dishes", 1)]

    def test_high_score_suppresses_with_existing_dish(self, fake_index, sample_dish):
        index = fake_index([_match(sample_dish, 0.97)])

        result = _run(SemanticDuplicateChecker(index).check("Paneer Tikka", "Indian"))

        assert result.should_generate is False
        assert result.similarity_score == 0.97
        existing = result.existing_item
        assert existing.id == sample_dish.id
        assert existing.name == "Paneer Tikka"
        assert existing.meal_type == "Dinner"
        assert [i.name for i in existing.ingredients] == ["Paneer", "Onion", "Yogurt"]
        assert existing.macros.calories == 320

    def test_score_equal_to_threshold_suppresses(self, fake_index, sample_dish):
        index = fake_index([_match(sample_dish, 0.95)])

        assert _run(SemanticDuplicateChecker(index).check("Paneer Tikka", "Indian")).should_generate is False

    def test_low_score_generates(self, fake_index, sample_dish):
        index = fake_index([_match(sample_dish, 0.80)])

        result = _run(SemanticDuplicateChecker(index).check("Paneer Butter Masala", "Indian"))

        assert result.should_generate is True
        assert result.existing_item is None
        assert result.similarity_score == 0.80

    def test_no_matches_generates(self, fake_index):
        result = _run(SemanticDuplicateChecker(fake_index()).check("Anything", "Thai"))

        assert result.should_generate is True
        assert result.similarity_score is None

    def test_custom_threshold_and_namespace(self, fake_index, sample_dish):
        index = fake_index([_match(sample_dish, 0.9)])
        checker = SemanticDuplicateChecker(index, namespace="recipes", threshold=0.85)

        assert _run(checker.check("Paneer Tikka", "Indian")).should_generate is False
        assert index.searches[0][1] == "recipes"


class TestFailOpen:
    """Any problem with the index means: generate."""

    def test_unavailable_index(self, fake_index):
        index = fake_index(available=False)

        assert _run(SemanticDuplicateChecker(index).check("Dal", "Indian")).should_generate is True
        assert index.searches == []

    def test_search_error(self, fake_index):
        index = fake_index(error=RuntimeError("index down"))

        assert _run(SemanticDuplicateChecker(index).check("Dal", "Indian")).should_generate is True

    def test_timeout(self, fake_index, sample_dish):
        index = fake_index([_match(sample_dish, 0.99)], delay=1)
        checker = SemanticDuplicateChecker(index, timeout=0.01)

        assert _run(checker.check("Paneer Tikka", "Indian")).should_generate is True

    def test_corrupt_metadata(self, fake_index, sample_dish):
        index = fake_index([_match(sample_dish, 0.99, ingredients="not json{")])

        result = _run(SemanticDuplicateChecker(index).check("Paneer Tikka", "Indian"))

        assert result.should_generate is True
        assert result.existing_item is None

    def test_metadata_missing_name(self, fake_index):
        index = fake_index([VectorMatch(id="x", score=0.99, metadata={"cuisine": "Indian"})])

        assert _run(SemanticDuplicateChecker(index).check("Dal", "Indian")).should_generate is True
