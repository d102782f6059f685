"""
Tadka - LLM Layer.

Model routing per task type and OpenAI-backed capability adapters.
"""

from tadka.llm.client import OpenAIEmbedder, OpenAIGenerator
from tadka.llm.model_router import TaskType, get_model, get_token_budget, select_model

__all__ = [
    "OpenAIEmbedder",
    "OpenAIGenerator",
    "TaskType",
    "get_model",
    "get_token_budget",
    "select_model",
]
