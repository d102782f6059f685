"""
Tadka - AI Request Optimization.

Embedding cache, request coalescing and semantic deduplication.
"""

from tadka.optimization.coalescer import InFlightRequest, RequestCoalescer
from tadka.optimization.dedup import DuplicateCheck, SemanticDuplicateChecker
from tadka.optimization.embedding_cache import CachedEmbedder, EmbeddingCache

__all__ = [
    "CachedEmbedder",
    "DuplicateCheck",
    "EmbeddingCache",
    "InFlightRequest",
    "RequestCoalescer",
    "SemanticDuplicateChecker",
]
