"""
Tadka - External capability interfaces.

The generation model, the embedding model, the vector index and the document
database are opaque collaborators. The core only depends on these protocols;
concrete adapters live in tadka.llm.client and tadka.db.client.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class VectorMatch(BaseModel):
    """One similarity-search hit."""

    id: str | None = None
    score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorRecord(BaseModel):
    """A text to embed and store, with flattened metadata."""

    id: str
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class Generator(Protocol):
    """Structured-output generation. May raise on network/quota errors."""

    def is_available(self) -> bool: ...

    async def generate(
        self,
        prompt: str,
        schema: type[BaseModel],
        model: str,
        *,
        max_output_tokens: int,
        temperature: float,
        task: str = "unknown",
    ) -> dict | None: ...


@runtime_checkable
class Embedder(Protocol):
    """Text embedding."""

    def is_available(self) -> bool: ...

    async def embed(self, text: str) -> list[float] | None: ...


@runtime_checkable
class VectorIndex(Protocol):
    """Similarity search over embedded text, partitioned by namespace."""

    def is_available(self) -> bool: ...

    async def search(self, query: str, namespace: str, top_k: int) -> list[VectorMatch]: ...

    async def upsert(self, records: list[VectorRecord], namespace: str) -> int: ...


@runtime_checkable
class DocumentStore(Protocol):
    """Key-value document read/write with field-level merge."""

    async def get(self, key: str) -> dict | None: ...

    async def set(self, key: str, data: dict, *, merge: bool = True) -> None: ...
