"""
Tadka - Dish Generation Orchestrator.

Fills a swipe-deck request for `count` dishes as cheaply as possible:

    CheckExactCache -> ComputeDeficit -> (per unit) Coalesce -> Generate
    -> Validate -> SemanticCheck -> PersistAccepted -> Done

- Exact cache: dishes previously generated for the same request tag set
- Deficit: only `count - len(exact_hits)` generation units are started
- Units run concurrently and are joined all-settled; a failed unit is
  logged and dropped, never fails the batch
- Semantic check: a near-duplicate already in the vector index replaces the
  freshly generated dish
- Persistence of new dishes runs in the background after the result is
  returned; its failures are logged only
"""

import asyncio
import logging
import uuid
from collections.abc import Callable, Iterable

from pydantic import ValidationError

from tadka.config import settings
from tadka.core.capabilities import DocumentStore, Generator, VectorIndex
from tadka.core.result import ErrorKind, Result
from tadka.core.retry import Sleep, retry_with_backoff
from tadka.generation.prompts import build_cache_tags, build_feed_prompt, cache_key, dish_to_vector_record
from tadka.generation.validation import is_dish_safe, is_valid_dish
from tadka.kitchen.sync import sanitize_document
from tadka.llm.model_router import TaskType, select_model
from tadka.models.entities import Dish, DishCandidate, UserProfile
from tadka.optimization.coalescer import RequestCoalescer
from tadka.optimization.dedup import SemanticDuplicateChecker

logger = logging.getLogger(__name__)


def new_dish_id() -> str:
    return f"ai_{uuid.uuid4().hex}"


class DishGenerationOrchestrator:
    """
    Cache-first, deduplicated dish generation.

    Usage:
        orchestrator = DishGenerationOrchestrator(generator, store, checker=checker)
        dishes = await orchestrator.generate_new_dishes(5, profile, "Explorer")
        await orchestrator.drain()
    """

    def __init__(
        self,
        generator: Generator,
        store: DocumentStore,
        *,
        coalescer: RequestCoalescer | None = None,
        checker: SemanticDuplicateChecker | None = None,
        index: VectorIndex | None = None,
        namespace: str | None = None,
        retries: int | None = None,
        delay: float | None = None,
        backoff_factor: float | None = None,
        timeout: float | None = None,
        sleep: Sleep = asyncio.sleep,
        id_factory: Callable[[], str] = new_dish_id,
    ):
        self._generator = generator
        self._store = store
        self._coalescer = coalescer or RequestCoalescer()
        self._checker = checker
        self._index = index
        self._namespace = namespace or settings.vector_namespace
        self._retries = settings.retry_count if retries is None else retries
        self._delay = settings.retry_base_delay if delay is None else delay
        self._backoff = settings.retry_backoff_factor if backoff_factor is None else backoff_factor
        self._timeout = settings.call_timeout_seconds if timeout is None else timeout
        self._sleep = sleep
        self._id_factory = id_factory
        self._pending: set[asyncio.Task] = set()

    # =========================================================================
    # Public API
    # =========================================================================

    async def generate_new_dishes(
        self,
        count: int,
        profile: UserProfile,
        mode: str = "Explorer",
        *,
        exclude_ids: Iterable[str] = (),
    ) -> list[Dish]:
        """
        Produce up to `count` dishes for a profile and feed mode.

        Args:
            count: Number of dishes wanted
            profile: Preferences of the requesting user
            mode: Feed mode
            exclude_ids: Dish ids the user has already seen; skipped in the
                exact cache

        Returns:
            Exact-cache hits first, then generated (or semantically reused)
            dishes. May be shorter than `count` when units fail; never longer.
            Names are unique within the result.
        """
        if count <= 0:
            return []

        tags = build_cache_tags(profile, mode)
        key = cache_key(tags)

        exact_hits = await self._check_exact_cache(key, profile, count, set(exclude_ids))
        needed = count - len(exact_hits)
        logger.info(f"[Generate] {len(exact_hits)} cache hits for {key}, generating {needed}")

        if needed <= 0:
            return exact_hits

        if not self._generator.is_available():
            logger.warning("[Generate] Generator unavailable, returning cache hits only")
            return exact_hits

        avoid = [d.name for d in exact_hits]
        outcomes = await asyncio.gather(
            *(self._generate_unit(profile, mode, slot, avoid) for slot in range(needed)),
            return_exceptions=True,
        )

        produced: list[tuple[Dish, bool]] = []
        for slot, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"[Generate] Unit {slot} raised {type(outcome).__name__}: {outcome}")
                continue
            if outcome is not None:
                produced.append(outcome)

        results = list(exact_hits)
        seen_names = {d.name.strip().lower() for d in results}
        fresh: list[Dish] = []
        for dish, is_new in produced:
            name_key = dish.name.strip().lower()
            if name_key in seen_names:
                logger.debug(f"[Generate] Dropping duplicate name in batch: {dish.name}")
                continue
            seen_names.add(name_key)
            results.append(dish)
            if is_new:
                fresh.append(dish)

        logger.info(
            f"[Generate] Returning {len(results)}/{count} dishes "
            f"({len(exact_hits)} cached, {len(fresh)} new, {len(results) - len(exact_hits) - len(fresh)} reused)"
        )

        if fresh:
            self._schedule(self._persist(key, tags, fresh))
        return results

    async def drain(self) -> None:
        """Wait for all scheduled persistence to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # =========================================================================
    # Steps
    # =========================================================================

    async def _check_exact_cache(
        self,
        key: str,
        profile: UserProfile,
        count: int,
        exclude_ids: set[str],
    ) -> list[Dish]:
        result = await self._with_retry(lambda: self._store.get(key), label=f"cache read {key}")
        if not result.ok:
            logger.warning(f"[Generate] Exact cache unavailable ({result.detail}), treating as empty")
            return []

        hits: list[Dish] = []
        for raw in (result.value or {}).get("dishes", []):
            if len(hits) >= count:
                break
            try:
                dish = Dish.model_validate(raw)
            except ValidationError:
                logger.warning(f"[Generate] Skipping unreadable cached dish in {key}")
                continue
            if dish.id in exclude_ids or not is_dish_safe(dish, profile):
                continue
            hits.append(dish)
        return hits

    async def _generate_unit(
        self,
        profile: UserProfile,
        mode: str,
        slot: int,
        avoid: list[str],
    ) -> tuple[Dish, bool] | None:
        """
        One unit of work. Returns (dish, is_new) or None when the unit failed.

        is_new is False when the vector index already held an equivalent dish
        that is returned in place of the generated one.
        """
        prompt = build_feed_prompt(profile, mode, slot, avoid)
        key = self._coalescer.generate_key(TaskType.FEED, prompt)
        result: Result[Dish] = await self._coalescer.request(key, lambda: self._generate_candidate(prompt, slot))
        if not result.ok:
            logger.warning(f"[Generate] Unit {slot} dropped ({result.error.value}): {result.detail}")
            return None

        dish = result.value
        if not is_dish_safe(dish, profile):
            return None

        if self._checker is None:
            return (dish, True)

        check = await self._checker.check(dish.name, dish.cuisine)
        if not check.should_generate and check.existing_item is not None:
            existing = check.existing_item
            if is_dish_safe(existing, profile):
                return (existing, False)
            return None
        return (dish, True)

    async def _generate_candidate(self, prompt: str, slot: int) -> Result[Dish]:
        config = select_model(TaskType.FEED)

        call = await self._with_retry(
            lambda: self._generator.generate(
                prompt,
                DishCandidate,
                config["model"],
                max_output_tokens=config["max_output_tokens"],
                temperature=config["temperature"],
                task=TaskType.FEED.value,
            ),
            label=f"feed unit {slot}",
        )
        if not call.ok:
            return Result.failure(call.error, call.detail, attempts=call.attempts)

        raw = call.value
        if not is_valid_dish(raw):
            return Result.failure(ErrorKind.VALIDATION, "incomplete dish", attempts=call.attempts)

        try:
            dish = Dish.model_validate({**raw, "id": self._id_factory()})
        except ValidationError as e:
            return Result.failure(ErrorKind.VALIDATION, f"{e.error_count()} field errors", attempts=call.attempts)
        return Result.success(dish, attempts=call.attempts)

    async def _persist(self, key: str, tags: list[str], dishes: list[Dish]) -> None:
        """Merge new dishes into the exact cache and upsert them into the vector index."""
        cache_result = await self._with_retry(
            lambda: self._merge_into_cache(key, tags, dishes), label=f"cache write {key}"
        )
        if not cache_result.ok:
            logger.error(f"[Persist] {ErrorKind.PERSISTENCE.value}: exact cache {key}: {cache_result.detail}")

        if self._index is None or not self._index.is_available():
            return

        records = [dish_to_vector_record(d) for d in dishes]
        index_result = await self._with_retry(
            lambda: self._index.upsert(records, self._namespace), label="vector upsert"
        )
        if not index_result.ok:
            logger.error(f"[Persist] {ErrorKind.PERSISTENCE.value}: vector index: {index_result.detail}")

    async def _merge_into_cache(self, key: str, tags: list[str], dishes: list[Dish]) -> None:
        current = await self._store.get(key) or {}
        stored = list(current.get("dishes", []))
        known = {d.get("id") for d in stored if isinstance(d, dict)}
        for dish in dishes:
            if dish.id not in known:
                stored.append(dish.model_dump(mode="json", by_alias=True))
        await self._store.set(key, sanitize_document({"tags": tags, "dishes": stored}), merge=True)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _with_retry(self, fn, *, label: str) -> Result:
        return await retry_with_backoff(
            fn,
            retries=self._retries,
            delay=self._delay,
            backoff_factor=self._backoff,
            timeout=self._timeout,
            sleep=self._sleep,
            label=label,
        )

    def _schedule(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
