"""
Tests for the OpenAI and Supabase adapters with mocked SDK clients.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from tadka.core.capabilities import VectorRecord
from tadka.core.errors import CapabilityUnavailableError
from tadka.db.client import InMemoryDocumentStore, SupabaseDocumentStore, SupabaseVectorIndex, merge_document
from tadka.llm.client import OpenAIEmbedder, OpenAIGenerator
from tadka.models.entities import DishCandidate
from tadka.observability.cost import CostTracker


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


@pytest.fixture
def mock_supabase():
    """Mock Supabase client."""
    return MagicMock()


# =============================================================================
# OpenAI
# =============================================================================


class TestOpenAIGenerator:
    def _generator(self, response, usage=(120, 80)):
        tracker = CostTracker()
        generator = OpenAIGenerator(api_key="sk-test", tracker=tracker)
        completion = SimpleNamespace(usage=SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1]))
        client = MagicMock()
        client.chat.completions.create_with_completion = AsyncMock(return_value=(response, completion))
        generator._client = client
        return generator, client, tracker

    def test_returns_aliased_dict_and_tracks_usage(self, candidate):
        response = DishCandidate.model_validate(candidate(1))
        generator, client, tracker = self._generator(response)

        raw = _run(
            generator.generate(
                "prompt", DishCandidate, "gpt-4.1-mini", max_output_tokens=1200, temperature=0.8, task="feed"
            )
        )

        assert raw["name"] == "Test Dish 1"
        assert raw["type"] == "Dinner"
        kwargs = client.chat.completions.create_with_completion.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["response_model"] is DishCandidate
        assert kwargs["max_tokens"] == 1200
        assert tracker.summary()["total_input_tokens"] == 120
        assert tracker.calls[0]["task"] == "feed"

    def test_none_response(self):
        generator, _, _ = self._generator(None)

        raw = _run(generator.generate("p", DishCandidate, "gpt-4.1-mini", max_output_tokens=10, temperature=0))

        assert raw is None

    def test_unavailable_without_key(self):
        generator = OpenAIGenerator(api_key="")

        assert generator.is_available() is False
        with pytest.raises(CapabilityUnavailableError):
            _run(generator.generate("p", DishCandidate, "gpt-4.1-mini", max_output_tokens=10, temperature=0))


class TestOpenAIEmbedder:
    def test_embeds_and_tracks(self):
        tracker = CostTracker()
        embedder = OpenAIEmbedder(api_key="sk-test", model="text-embedding-3-small", tracker=tracker)
        client = MagicMock()
        client.embeddings.create = AsyncMock(
            return_value=SimpleNamespace(
                data=[SimpleNamespace(embedding=[0.1, 0.2])],
                usage=SimpleNamespace(prompt_tokens=4),
            )
        )
        embedder._client = client

        assert _run(embedder.embed("Dal Fry")) == [0.1, 0.2]
        client.embeddings.create.assert_awaited_once_with(model="text-embedding-3-small", input="Dal Fry")
        assert tracker.calls[0]["task"] == "embed"

    def test_blank_text(self):
        assert _run(OpenAIEmbedder(api_key="sk-test").embed("  ")) is None

    def test_unavailable_without_key(self):
        embedder = OpenAIEmbedder(api_key="")

        assert embedder.is_available() is False
        with pytest.raises(CapabilityUnavailableError):
            _run(embedder.embed("Dal"))


# =============================================================================
# Document stores
# =============================================================================


class TestMergeDocument:
    def test_top_level_fields_replaced(self):
        assert merge_document({"a": 1, "b": {"x": 1}}, {"b": {"y": 2}}) == {"a": 1, "b": {"y": 2}}

    def test_missing_current(self):
        assert merge_document(None, {"a": 1}) == {"a": 1}


class TestSupabaseDocumentStore:
    def test_get(self, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value.data = [{"data": {"dishes": []}}]
        store = SupabaseDocumentStore(mock_supabase, table="documents")

        assert _run(store.get("cached_dishes/any")) == {"dishes": []}
        mock_supabase.table.assert_called_with("documents")
        mock_supabase.table.return_value.select.return_value.eq.assert_called_with("key", "cached_dishes/any")

    def test_get_missing(self, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value.data = []

        assert _run(SupabaseDocumentStore(mock_supabase).get("users/u1")) is None

    def test_set_merges_fields(self, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value.data = [{"data": {"profile": {"name": "Asha"}, "pantry": []}}]
        store = SupabaseDocumentStore(mock_supabase)

        _run(store.set("users/u1", {"pantry": [{"name": "Rice"}]}))

        mock_supabase.table.return_value.upsert.assert_called_once_with(
            {"key": "users/u1", "data": {"profile": {"name": "Asha"}, "pantry": [{"name": "Rice"}]}}
        )

    def test_set_without_merge_replaces(self, mock_supabase):
        store = SupabaseDocumentStore(mock_supabase)

        _run(store.set("users/u1", {"pantry": []}, merge=False))

        mock_supabase.table.return_value.upsert.assert_called_once_with({"key": "users/u1", "data": {"pantry": []}})

    def test_scan(self, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.like.return_value
        chain.execute.return_value.data = [{"key": "cached_dishes/a", "data": {"dishes": []}}]

        result = _run(SupabaseDocumentStore(mock_supabase).scan("cached_dishes/"))

        assert result == {"cached_dishes/a": {"dishes": []}}
        mock_supabase.table.return_value.select.return_value.like.assert_called_with("key", "cached_dishes/%")


class TestInMemoryDocumentStore:
    def test_merge_and_scan(self):
        store = InMemoryDocumentStore({"users/u1": {"profile": {"name": "Asha"}}})

        async def scenario():
            await store.set("users/u1", {"pantry": []})
            await store.set("users/u2", {"pantry": []})
            return await store.get("users/u1"), await store.scan("users/")

        doc, scanned = _run(scenario())

        assert doc == {"profile": {"name": "Asha"}, "pantry": []}
        assert set(scanned) == {"users/u1", "users/u2"}

    def test_returns_copies(self):
        store = InMemoryDocumentStore({"k": {"dishes": []}})

        doc = _run(store.get("k"))
        doc["dishes"].append("x")

        assert store.documents["k"] == {"dishes": []}


# =============================================================================
# Vector index
# =============================================================================


class _SelectiveEmbedder:
    """Returns None for texts containing 'skip'."""

    def is_available(self) -> bool:
        return True

    async def embed(self, text):
        return None if "skip" in text else [1.0, 0.0]


class TestSupabaseVectorIndex:
    def test_search_maps_rows(self, mock_supabase, fake_embedder):
        mock_supabase.rpc.return_value.execute.return_value.data = [
            {"id": "dish-1", "similarity": 0.97, "metadata": {"name": "Dal"}},
        ]
        index = SupabaseVectorIndex(fake_embedder(), client=mock_supabase)

        matches = _run(index.search("Dal Indian", "dishes", 1))

        assert [(m.id, m.score, m.metadata["name"]) for m in matches] == [("dish-1", 0.97, "Dal")]
        name, params = mock_supabase.rpc.call_args.args
        assert name == "match_dish_vectors"
        assert params["match_namespace"] == "dishes"
        assert params["match_count"] == 1

    def test_search_without_embedding(self, mock_supabase):
        index = SupabaseVectorIndex(_SelectiveEmbedder(), client=mock_supabase)

        assert _run(index.search("skip me", "dishes", 1)) == []
        mock_supabase.rpc.assert_not_called()

    def test_upsert_skips_unembeddable(self, mock_supabase):
        index = SupabaseVectorIndex(_SelectiveEmbedder(), client=mock_supabase, table="dish_vectors")
        records = [
            VectorRecord(id="a", text="Dal", metadata={"name": "Dal"}),
            VectorRecord(id="b", text="skip", metadata={}),
        ]

        assert _run(index.upsert(records, "dishes")) == 1
        rows = mock_supabase.table.return_value.upsert.call_args.args[0]
        assert [r["id"] for r in rows] == ["a"]
        assert rows[0]["namespace"] == "dishes"

    def test_availability(self, mock_supabase, fake_embedder):
        assert SupabaseVectorIndex(fake_embedder(), client=mock_supabase).is_available() is True
        assert SupabaseVectorIndex(fake_embedder(available=False), client=mock_supabase).is_available() is False
