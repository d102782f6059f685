"""
Tadka - Supabase Client.

Document store and vector index adapters. The Supabase SDK is blocking, so
every query runs in a worker thread via asyncio.to_thread.

Tables (see scripts/ingest_cached_dishes.py for the vector backfill):
- documents(key text primary key, data jsonb)
- dish_vectors(id text primary key, namespace text, content text,
  embedding vector, metadata jsonb), searched through the
  match_dish_vectors(query_embedding, match_namespace, match_count) function
"""

import asyncio
import copy
import logging
from typing import Any

from supabase import Client, create_client

from tadka.config import settings
from tadka.core.capabilities import Embedder, VectorMatch, VectorRecord
from tadka.core.errors import CapabilityUnavailableError

logger = logging.getLogger(__name__)

# Singleton client instance
_client: Client | None = None


def is_configured() -> bool:
    return bool(settings.supabase_url and settings.supabase_key)


def get_client() -> Client:
    """
    Get the Supabase client.

    Uses singleton pattern to reuse connection.

    Raises:
        CapabilityUnavailableError: SUPABASE_URL / SUPABASE_KEY not set
    """
    global _client

    if _client is None:
        if not is_configured():
            raise CapabilityUnavailableError("SUPABASE_URL / SUPABASE_KEY are not configured")
        _client = create_client(settings.supabase_url, settings.supabase_key)

    return _client


def merge_document(current: dict | None, data: dict) -> dict:
    """Field-level merge: top-level keys in `data` replace those in `current`."""
    return {**(current or {}), **data}


# =============================================================================
# Document Store
# =============================================================================


class SupabaseDocumentStore:
    """Key-value documents in a single jsonb table."""

    def __init__(self, client: Client | None = None, table: str | None = None):
        self._client = client
        self.table = table or settings.documents_table

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    def _select(self, key: str) -> dict | None:
        response = (
            self._get_client()
            .table(self.table)
            .select("data")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]["data"]

    def _upsert(self, key: str, data: dict) -> None:
        self._get_client().table(self.table).upsert({"key": key, "data": data}).execute()

    async def get(self, key: str) -> dict | None:
        return await asyncio.to_thread(self._select, key)

    async def set(self, key: str, data: dict, *, merge: bool = True) -> None:
        """Write a document. With merge=True only the supplied fields change."""

        def write() -> None:
            payload = merge_document(self._select(key), data) if merge else data
            self._upsert(key, payload)

        await asyncio.to_thread(write)

    async def scan(self, prefix: str) -> dict[str, dict]:
        """All documents whose key starts with `prefix`."""

        def call() -> list[dict[str, Any]]:
            response = (
                self._get_client()
                .table(self.table)
                .select("key, data")
                .like("key", f"{prefix}%")
                .execute()
            )
            return response.data or []

        return {row["key"]: row["data"] for row in await asyncio.to_thread(call)}


class InMemoryDocumentStore:
    """Dict-backed DocumentStore for local runs and tests."""

    def __init__(self, initial: dict[str, dict] | None = None):
        self.documents: dict[str, dict] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> dict | None:
        doc = self.documents.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, key: str, data: dict, *, merge: bool = True) -> None:
        payload = copy.deepcopy(data)
        self.documents[key] = merge_document(self.documents.get(key), payload) if merge else payload

    async def scan(self, prefix: str) -> dict[str, dict]:
        return {k: copy.deepcopy(v) for k, v in self.documents.items() if k.startswith(prefix)}


# =============================================================================
# Vector Index
# =============================================================================


class SupabaseVectorIndex:
    """
    pgvector similarity search over dish texts.

    Queries and records are embedded with the supplied Embedder (normally a
    CachedEmbedder, so repeated texts never hit the embedding API twice).
    """

    def __init__(
        self,
        embedder: Embedder,
        client: Client | None = None,
        table: str | None = None,
    ):
        self._embedder = embedder
        self._client = client
        self.table = table or settings.vectors_table

    def is_available(self) -> bool:
        return (self._client is not None or is_configured()) and self._embedder.is_available()

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    async def search(self, query: str, namespace: str, top_k: int) -> list[VectorMatch]:
        embedding = await self._embedder.embed(query)
        if embedding is None:
            return []

        def call() -> list[dict[str, Any]]:
            response = self._get_client().rpc(
                "match_dish_vectors",
                {
                    "query_embedding": embedding,
                    "match_namespace": namespace,
                    "match_count": top_k,
                },
            ).execute()
            return response.data or []

        rows = await asyncio.to_thread(call)
        return [
            VectorMatch(
                id=row.get("id"),
                score=row.get("similarity") or 0.0,
                metadata=row.get("metadata") or {},
            )
            for row in rows
        ]

    async def upsert(self, records: list[VectorRecord], namespace: str) -> int:
        """Embed and store records. Records whose text cannot be embedded are skipped."""
        rows = []
        for record in records:
            embedding = await self._embedder.embed(record.text)
            if embedding is None:
                logger.warning(f"[VectorIndex] No embedding for {record.id}, skipping")
                continue
            rows.append({
                "id": record.id,
                "namespace": namespace,
                "content": record.text,
                "embedding": embedding,
                "metadata": record.metadata,
            })

        if not rows:
            return 0

        await asyncio.to_thread(
            lambda: self._get_client().table(self.table).upsert(rows).execute()
        )
        logger.info(f"[VectorIndex] Upserted {len(rows)} records into '{namespace}'")
        return len(rows)
