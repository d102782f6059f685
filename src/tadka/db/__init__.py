"""
Tadka - Database Client.

Supabase-backed document store and vector index, plus an in-memory store.
"""

from tadka.db.client import (
    InMemoryDocumentStore,
    SupabaseDocumentStore,
    SupabaseVectorIndex,
    get_client,
)

__all__ = [
    "InMemoryDocumentStore",
    "SupabaseDocumentStore",
    "SupabaseVectorIndex",
    "get_client",
]
