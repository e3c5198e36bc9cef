"""Tests for vector stores (in-memory and local LanceDB)."""

import pytest

from ragspace.components.embeddings import MockEmbeddingService
from ragspace.components.vectorstore import (
    InMemoryVectorStore,
    LanceDBVectorStore,
    workspace_table_name,
)
from ragspace.components.vectorstore.lancedb_store import document_row_model
from ragspace.components.workspace import UpstreamStoreError


@pytest.fixture(params=["memory", "lancedb"])
def store(request, tmp_path):
    embeddings = MockEmbeddingService(dimensions=1024)
    if request.param == "memory":
        return InMemoryVectorStore(embeddings)
    return LanceDBVectorStore(str(tmp_path / "lancedb"), embeddings)


def test_workspace_table_name():
    assert workspace_table_name("3f9a1c0b") == "workspace_3f9a1c0b"


def test_lancedb_cloud_requires_api_key():
    with pytest.raises(ValueError):
        LanceDBVectorStore("db://my-database", MockEmbeddingService())


def test_lancedb_row_model_schema():
    schema = document_row_model(8).to_arrow_schema()

    assert schema.names == ["id", "content", "vector", "metadata"]
    assert schema.field("vector").type.list_size == 8
    assert document_row_model(8) is document_row_model(8)


@pytest.mark.asyncio
class TestVectorStoreContract:
    async def test_create_table_is_idempotent(self, store):
        await store.create_table("workspace_a")
        await store.create_table("workspace_a")

        assert await store.list_tables() == ["workspace_a"]

    async def test_drop_table(self, store):
        await store.create_table("workspace_a")

        await store.drop_table("workspace_a")

        assert await store.list_tables() == []

    async def test_drop_missing_table_is_noop(self, store):
        await store.drop_table("workspace_missing")

    async def test_count_rows(self, store):
        await store.create_table("workspace_a")
        assert await store.count_rows("workspace_a") == 0

        await store.upsert_document("workspace_a", "d1", "alpha", {})
        await store.upsert_document("workspace_a", "d1", "alpha again", {})
        await store.upsert_document("workspace_a", "d2", "beta", {})

        assert await store.count_rows("workspace_a") == 2

    async def test_count_rows_missing_table(self, store):
        with pytest.raises(UpstreamStoreError):
            await store.count_rows("workspace_missing")

    async def test_upsert_replaces_row(self, store):
        await store.create_table("workspace_a")

        await store.upsert_document("workspace_a", "d1", "first version", {"v": 1})
        await store.upsert_document("workspace_a", "d1", "second version", {"v": 2})

        results = await store.search("workspace_a", "second version", limit=10)
        assert [r.id for r in results] == ["d1"]
        assert results[0].content == "second version"
        assert results[0].metadata == {"v": 2}

    async def test_search_ranks_by_similarity(self, store):
        await store.create_table("workspace_a")
        await store.upsert_document("workspace_a", "d1", "apples and oranges", {})
        await store.upsert_document("workspace_a", "d2", "distributed systems consensus", {})

        results = await store.search("workspace_a", "distributed systems consensus", limit=2)

        assert results[0].id == "d2"
        assert results[0].score == pytest.approx(1.0, abs=1e-4)

    async def test_search_limit_and_threshold(self, store):
        await store.create_table("workspace_a")
        await store.upsert_document("workspace_a", "d1", "alpha", {})
        await store.upsert_document("workspace_a", "d2", "alpha beta", {})
        await store.upsert_document("workspace_a", "d3", "alpha beta gamma", {})

        assert len(await store.search("workspace_a", "alpha", limit=2)) == 2
        strict = await store.search("workspace_a", "alpha", limit=10, threshold=0.99)
        assert [r.id for r in strict] == ["d1"]

    async def test_delete_document(self, store):
        await store.create_table("workspace_a")
        await store.upsert_document("workspace_a", "d1", "hello", {})

        await store.delete_document("workspace_a", "d1")
        await store.delete_document("workspace_a", "d1")

        assert await store.search("workspace_a", "hello") == []

    async def test_quotes_in_document_id(self, store):
        await store.create_table("workspace_a")
        await store.upsert_document("workspace_a", "it's", "hello", {})

        await store.delete_document("workspace_a", "it's")

        assert await store.search("workspace_a", "hello") == []

    async def test_missing_table_raises_upstream_error(self, store):
        with pytest.raises(UpstreamStoreError):
            await store.upsert_document("workspace_missing", "d1", "hello", {})
