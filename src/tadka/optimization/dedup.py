"""
Tadka - Semantic Deduplication.

Before a freshly generated dish is accepted, search the vector index for a
near-identical one. A match at or above the threshold means "reuse the stored
dish instead". Any problem with the index fails open: generation proceeds.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from tadka.config import settings
from tadka.core.capabilities import VectorIndex, VectorMatch
from tadka.models.entities import Dish

logger = logging.getLogger(__name__)

# Metadata fields the index stores as JSON strings
SERIALIZED_FIELDS = ("macros", "ingredients", "instructions", "tags", "healthTags", "allergens")


@dataclass(frozen=True)
class DuplicateCheck:
    """Outcome of a duplicate check."""

    should_generate: bool
    existing_item: Dish | None = None
    similarity_score: float | None = None


def dish_from_metadata(match: VectorMatch) -> Dish:
    """
    Rebuild a Dish from flattened index metadata.

    Raises:
        ValueError: metadata is corrupt (bad JSON or missing required fields)
    """
    data: dict[str, Any] = dict(match.metadata)
    for field in SERIALIZED_FIELDS:
        if isinstance(data.get(field), str):
            data[field] = json.loads(data[field])
    data.setdefault("id", match.id or data.get("id"))
    try:
        return Dish.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"corrupt dish metadata: {e.error_count()} errors") from e


class SemanticDuplicateChecker:
    """Vector-search gate in front of dish acceptance."""

    def __init__(
        self,
        index: VectorIndex,
        *,
        namespace: str | None = None,
        threshold: float | None = None,
        timeout: float | None = None,
    ):
        self._index = index
        self.namespace = namespace or settings.vector_namespace
        self.threshold = settings.dedup_threshold if threshold is None else threshold
        self.timeout = settings.call_timeout_seconds if timeout is None else timeout

    async def check(self, candidate_text: str, context_tag: str) -> DuplicateCheck:
        """
        Decide whether `candidate_text` should be generated/kept.

        Args:
            candidate_text: Dish name (or other short identifying text)
            context_tag: Disambiguating context, usually the cuisine

        Returns:
            DuplicateCheck; should_generate=False only when a stored dish
            scores at or above the threshold and its metadata is readable.
        """
        if not self._index.is_available():
            logger.debug("[Dedup] Vector index unavailable, generating")
            return DuplicateCheck(should_generate=True)

        query = f"{candidate_text} {context_tag}".strip()
        try:
            search = self._index.search(query, self.namespace, 1)
            matches = await asyncio.wait_for(search, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[Dedup] Check timed out after {self.timeout}s, proceeding with generation")
            return DuplicateCheck(should_generate=True)
        except Exception as e:
            logger.warning(f"[Dedup] Check failed, proceeding with generation: {e}")
            return DuplicateCheck(should_generate=True)

        if not matches:
            return DuplicateCheck(should_generate=True)

        top = matches[0]
        score = top.score or 0.0
        if score < self.threshold:
            return DuplicateCheck(should_generate=True, similarity_score=score)

        try:
            existing = dish_from_metadata(top)
        except ValueError as e:
            logger.warning(f"[Dedup] Failed to parse metadata for {top.id}: {e}")
            return DuplicateCheck(should_generate=True)

        logger.info(
            f'[Dedup] SKIP: "{candidate_text}" matches "{existing.name}" ({score * 100:.1f}%)'
        )
        return DuplicateCheck(should_generate=False, existing_item=existing, similarity_score=score)
