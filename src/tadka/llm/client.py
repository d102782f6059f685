"""
Tadka - LLM Client.

OpenAI-backed implementations of the Generator and Embedder capabilities.
Structured outputs go through Instructor so the response always matches the
requested Pydantic schema. Usage is fed to the cost tracker.

Both adapters report themselves unavailable when no API key is configured;
callers skip the optimization instead of failing.
"""

import logging

import instructor
from openai import AsyncOpenAI
from pydantic import BaseModel

from tadka.config import settings
from tadka.core.errors import CapabilityUnavailableError
from tadka.observability.cost import CostTracker, get_cost_tracker
from tadka.observability.tracing import trace_llm_call

logger = logging.getLogger(__name__)


class OpenAIGenerator:
    """Structured-output generation via Instructor over AsyncOpenAI."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        tracker: CostTracker | None = None,
        schema_retries: int = 1,
    ):
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._tracker = tracker or get_cost_tracker()
        self._schema_retries = schema_retries
        self._client: instructor.AsyncInstructor | None = None

    def is_available(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> instructor.AsyncInstructor:
        if not self.is_available():
            raise CapabilityUnavailableError("OPENAI_API_KEY is not configured")
        if self._client is None:
            self._client = instructor.from_openai(AsyncOpenAI(api_key=self._api_key))
        return self._client

    async def generate(
        self,
        prompt: str,
        schema: type[BaseModel],
        model: str,
        *,
        max_output_tokens: int,
        temperature: float,
        task: str = "unknown",
    ) -> dict | None:
        """
        Make one structured call.

        Returns:
            The response as a dict (aliases applied, None fields dropped),
            or None when the model returned nothing.

        Raises:
            Whatever the SDK raises (network, quota, schema retries exhausted);
            the caller's retry loop decides what happens next.
        """
        client = self._get_client()

        async with trace_llm_call(
            f"generate:{task}",
            inputs={"prompt": prompt},
            metadata={"model": model, "schema": schema.__name__},
        ) as run:
            response, completion = await client.chat.completions.create_with_completion(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                response_model=schema,
                max_retries=self._schema_retries,
                max_tokens=max_output_tokens,
                temperature=temperature,
            )
            run.end(outputs={"response": response.model_dump() if response is not None else None})

        usage = getattr(completion, "usage", None)
        if usage is not None:
            self._tracker.add(model, usage.prompt_tokens, usage.completion_tokens, task=task)

        if response is None:
            return None
        return response.model_dump(by_alias=True, exclude_none=True)


class OpenAIEmbedder:
    """Text embeddings via AsyncOpenAI."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        tracker: CostTracker | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._model = model or settings.embedding_model
        self._tracker = tracker or get_cost_tracker()
        self._client: AsyncOpenAI | None = None

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def embed(self, text: str) -> list[float] | None:
        """Embed one text. Returns None for blank input."""
        if not text.strip():
            return None
        if not self.is_available():
            raise CapabilityUnavailableError("OPENAI_API_KEY is not configured")
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)

        response = await self._client.embeddings.create(model=self._model, input=text)

        usage = getattr(response, "usage", None)
        if usage is not None:
            self._tracker.add(self._model, usage.prompt_tokens, 0, task="embed")

        if not response.data:
            return None
        return list(response.data[0].embedding)
