"""
Tadka - Model Router.

Maps a task type to a model and an output-token budget. The table is a static
policy: it must cover every TaskType, and an unknown task type raises instead
of silently falling back, so policy gaps show up during development.

Task types:
- feed: One swipe-deck dish per call, small and fast
- enrich: Dish hydration (ingredients, macros)
- cook: Weekly cook instructions, long context and output
- analyze: Multimodal / report analysis
- embed: Text embeddings
"""

import logging
from enum import Enum
from typing import TypedDict

from tadka.core.errors import UnknownTaskTypeError

logger = logging.getLogger(__name__)

# Rough heuristic used for budgeting: 1 token ~ 4 characters
CHARS_PER_TOKEN = 4


class TaskType(str, Enum):
    """Closed set of generation tasks."""

    FEED = "feed"
    COOK = "cook"
    ANALYZE = "analyze"
    ENRICH = "enrich"
    EMBED = "embed"


class ModelConfig(TypedDict):
    """Configuration for model calls."""

    model: str
    max_output_tokens: int
    temperature: float
    description: str


class TokenBudget(TypedDict):
    """Input/output token limits for a task."""

    max_input_tokens: int
    max_output_tokens: int


MODEL_CONFIGS: dict[TaskType, ModelConfig] = {
    TaskType.FEED: {
        "model": "gpt-4.1-mini",
        "max_output_tokens": 1200,  # one full dish card
        "temperature": 0.4,
        "description": "Fast generation for swipe deck",
    },
    TaskType.ENRICH: {
        "model": "gpt-4.1-mini",
        "max_output_tokens": 500,
        "temperature": 0.3,
        "description": "Dish hydration (standard JSON)",
    },
    TaskType.COOK: {
        "model": "gpt-4.1",
        "max_output_tokens": 4000,
        "temperature": 0.3,
        "description": "Stronger model for multi-constraint cook instructions",
    },
    TaskType.ANALYZE: {
        "model": "gpt-4.1-mini",
        "max_output_tokens": 1500,
        "temperature": 0.2,
        "description": "Multimodal / report analysis",
    },
    TaskType.EMBED: {
        "model": "text-embedding-3-small",
        "max_output_tokens": 0,
        "temperature": 0.0,
        "description": "Text embeddings",
    },
}

TOKEN_BUDGETS: dict[TaskType, TokenBudget] = {
    TaskType.FEED: {"max_input_tokens": 500, "max_output_tokens": 1200},
    TaskType.ENRICH: {"max_input_tokens": 800, "max_output_tokens": 500},
    TaskType.COOK: {"max_input_tokens": 8000, "max_output_tokens": 4000},
    TaskType.ANALYZE: {"max_input_tokens": 2000, "max_output_tokens": 1500},
    TaskType.EMBED: {"max_input_tokens": 2000, "max_output_tokens": 0},
}


def _coerce(task_type: TaskType | str) -> TaskType:
    try:
        return TaskType(task_type)
    except ValueError:
        raise UnknownTaskTypeError(task_type) from None


def select_model(task_type: TaskType | str) -> ModelConfig:
    """
    Get the model configuration for a task.

    Args:
        task_type: TaskType member or its string value

    Returns:
        A copy of the policy entry

    Raises:
        UnknownTaskTypeError: task type not in the policy table
    """
    task = _coerce(task_type)
    config = MODEL_CONFIGS.get(task)
    if config is None:
        raise UnknownTaskTypeError(task_type)
    logger.debug(f"[ModelSelect] Task: {task.value} -> Model: {config['model']}")
    return config.copy()  # type: ignore[return-value]


def get_model(task_type: TaskType | str) -> str:
    """Model name only."""
    return select_model(task_type)["model"]


def get_token_budget(task_type: TaskType | str) -> TokenBudget:
    """Get the input/output token budget for a task."""
    task = _coerce(task_type)
    budget = TOKEN_BUDGETS.get(task)
    if budget is None:
        raise UnknownTaskTypeError(task_type)
    return budget.copy()  # type: ignore[return-value]


def estimate_tokens(text: str) -> int:
    """Rough token count for a prompt."""
    if not text:
        return 0
    return -(-len(text) // CHARS_PER_TOKEN)


def truncate_to_token_budget(text: str, max_tokens: int) -> str:
    """Cut `text` so it fits `max_tokens`, marking the cut with '...'."""
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(text) <= max_chars:
        return text
    logger.debug(f"[TokenBudget] Truncating from {len(text)} to {max_chars} chars")
    return text[:max_chars] + "..."
