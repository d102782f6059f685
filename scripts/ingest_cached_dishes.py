#!/usr/bin/env python3
"""
Backfill the dish vector index from the exact-cache documents.

Every dish stored under `cached_dishes/*` is embedded and upserted into the
vector namespace used by the semantic duplicate check.

Usage:
    python scripts/ingest_cached_dishes.py [--batch-size 20] [--namespace dishes]
    python scripts/ingest_cached_dishes.py --dry-run
"""

import argparse
import asyncio
import logging

from pydantic import ValidationError

from tadka.config import settings
from tadka.db.client import SupabaseDocumentStore, SupabaseVectorIndex
from tadka.generation.prompts import CACHE_COLLECTION, dish_to_vector_record
from tadka.llm.client import OpenAIEmbedder
from tadka.models.entities import Dish
from tadka.optimization.coalescer import RequestCoalescer
from tadka.optimization.embedding_cache import CachedEmbedder, EmbeddingCache

logger = logging.getLogger("ingest_cached_dishes")


async def load_cached_dishes(store: SupabaseDocumentStore) -> list[Dish]:
    """Every readable dish across the exact-cache documents, unique by id."""
    documents = await store.scan(f"{CACHE_COLLECTION}/")
    dishes: dict[str, Dish] = {}
    for key, doc in documents.items():
        for raw in doc.get("dishes", []):
            try:
                dish = Dish.model_validate(raw)
            except ValidationError:
                logger.warning(f"Skipping unreadable dish in {key}")
                continue
            dishes.setdefault(dish.id, dish)
    return list(dishes.values())


async def main(batch_size: int, namespace: str, dry_run: bool, pause: float) -> None:
    print("🚀 Starting cached dishes ingestion...")

    store = SupabaseDocumentStore()
    embedder = CachedEmbedder(OpenAIEmbedder(), EmbeddingCache.from_settings(), RequestCoalescer())
    index = SupabaseVectorIndex(embedder)

    if not dry_run and not index.is_available():
        print("❌ Vector index unavailable: set OPENAI_API_KEY, SUPABASE_URL and SUPABASE_KEY")
        return

    dishes = await load_cached_dishes(store)
    print(f"📦 Loaded {len(dishes)} dishes from '{CACHE_COLLECTION}'")

    total = 0
    for i in range(0, len(dishes), batch_size):
        batch = dishes[i : i + batch_size]
        records = [dish_to_vector_record(d) for d in batch]
        print(f"  ...Processing batch {i // batch_size + 1} ({len(records)} dishes)")

        if dry_run:
            continue

        total += await index.upsert(records, namespace)
        # Rate limit guard
        await asyncio.sleep(pause)

    print(f"✅ Ingestion complete: {total} vectors upserted into '{namespace}'")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Backfill the dish vector index")
    parser.add_argument("--batch-size", type=int, default=20)
    parser.add_argument("--namespace", default=settings.vector_namespace)
    parser.add_argument("--pause", type=float, default=1.0, help="Seconds between batches")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)
    asyncio.run(main(args.batch_size, args.namespace, args.dry_run, args.pause))
