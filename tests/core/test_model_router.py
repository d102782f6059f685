"""
Tests for model routing and token budgets.
"""

import pytest

from tadka.core.errors import UnknownTaskTypeError
from tadka.llm.model_router import (
    MODEL_CONFIGS,
    TOKEN_BUDGETS,
    TaskType,
    estimate_tokens,
    get_model,
    get_token_budget,
    select_model,
    truncate_to_token_budget,
)


class TestSelectModel:
    """The routing table is total over TaskType."""

    def test_every_task_type_has_config_and_budget(self):
        for task in TaskType:
            assert task in MODEL_CONFIGS
            assert task in TOKEN_BUDGETS
            config = select_model(task)
            assert set(config) == {"model", "max_output_tokens", "temperature", "description"}

    def test_accepts_string_values(self):
        assert select_model("feed") == select_model(TaskType.FEED)

    def test_feed_uses_small_fast_model(self):
        assert get_model(TaskType.FEED) == "gpt-4.1-mini"

    def test_cook_gets_stronger_model_and_longer_output(self):
        cook = select_model(TaskType.COOK)
        feed = select_model(TaskType.FEED)

        assert cook["model"] == "gpt-4.1"
        assert cook["max_output_tokens"] > feed["max_output_tokens"]

    def test_embed_has_no_output(self):
        assert select_model(TaskType.EMBED)["max_output_tokens"] == 0

    def test_unknown_task_raises(self):
        with pytest.raises(UnknownTaskTypeError) as exc:
            select_model("dessert")
        assert exc.value.task_type == "dessert"

    def test_unknown_task_is_value_error(self):
        with pytest.raises(ValueError):
            get_token_budget("dessert")

    def test_returns_copy(self):
        """Mutating a returned config does not change the policy table."""
        config = select_model(TaskType.FEED)
        config["model"] = "something-else"

        assert get_model(TaskType.FEED) == "gpt-4.1-mini"


class TestTokenBudget:
    """Budgets and truncation."""

    def test_budgets(self):
        assert get_token_budget(TaskType.FEED)["max_input_tokens"] == 500
        assert get_token_budget(TaskType.COOK) == {"max_input_tokens": 8000, "max_output_tokens": 4000}

    def test_estimate_tokens(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_truncate_short_text_untouched(self):
        assert truncate_to_token_budget("short", 10) == "short"

    def test_truncate_long_text(self):
        result = truncate_to_token_budget("x" * 100, 5)

        assert result == "x" * 20 + "..."
