"""Tests for WorkspaceCoordinator.

These tests verify ordering and partial-failure handling across the
metadata, vector and blob stores.
"""

from unittest.mock import AsyncMock, patch

import pytest

from ragspace.components.vectorstore import workspace_table_name
from ragspace.components.workspace import (
    CollisionError,
    DocumentCreate,
    DocumentStatus,
    EmbedOptions,
    MetadataStoreError,
    NotFoundError,
    UpdateWorkspaceRequest,
    UpstreamStoreError,
    VectorDbStatus,
    WorkspaceValidationError,
)
from ragspace.services.coordinator import WorkspaceCoordinator
from ragspace.settings import VectorDeletePolicy
from ragspace.utils import extract_content_from_metadata


async def _add_document(coordinator, workspace_id, content="hello", storage_key="", embed=False):
    return await coordinator.create_and_embed_document(
        workspace_id,
        DocumentCreate(name="doc.txt", storageKey=storage_key, fileSize=len(content), content=content),
        EmbedOptions(embed=embed),
    )


@pytest.mark.asyncio
class TestCreateWorkspace:
    """Workspace creation: metadata first, vector table second."""

    async def test_create_returns_ready_workspace(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test", "d")

        assert workspace.documentCount == 0
        assert workspace.vectorDbStatus == VectorDbStatus.ready
        assert workspace.vectorDbError is None
        assert await coordinator.get_workspace(workspace.id) == workspace
        assert workspace_table_name(workspace.id) in await vector_store.list_tables()

    async def test_vector_failure_is_recorded_not_raised(self, coordinator, vector_store):
        vector_store.create_table = AsyncMock(side_effect=UpstreamStoreError("vector", "quota exceeded"))

        workspace = await coordinator.create_workspace_coordinated("Test", "d")

        assert workspace.vectorDbStatus == VectorDbStatus.failed
        assert "quota exceeded" in workspace.vectorDbError
        stored = await coordinator.get_workspace(workspace.id)
        assert stored.vectorDbStatus == VectorDbStatus.failed
        assert stored.vectorDbError

    async def test_vector_failure_without_message_still_has_error(self, coordinator, vector_store):
        vector_store.create_table = AsyncMock(side_effect=RuntimeError())

        workspace = await coordinator.create_workspace_coordinated("Test")

        assert workspace.vectorDbStatus == VectorDbStatus.failed
        assert workspace.vectorDbError == "RuntimeError"

    async def test_collision_raises_and_does_not_overwrite(self, coordinator, vector_store):
        with patch("ragspace.repositories.workspace.generate_id", return_value="abcd1234"):
            first = await coordinator.create_workspace_coordinated("First")
            vector_store.create_table = AsyncMock()

            with pytest.raises(CollisionError):
                await coordinator.create_workspace_coordinated("Second")

        vector_store.create_table.assert_not_called()
        stored = await coordinator.get_workspace("abcd1234")
        assert stored.name == first.name

    async def test_blank_name_rejected(self, coordinator, vector_store):
        vector_store.create_table = AsyncMock()

        with pytest.raises(WorkspaceValidationError):
            await coordinator.create_workspace_coordinated("   ")

        vector_store.create_table.assert_not_called()

    async def test_metadata_failure_propagates(self, coordinator, metadata_store, vector_store):
        metadata_store.create_if_absent = AsyncMock(side_effect=MetadataStoreError("redis down"))
        vector_store.create_table = AsyncMock()

        with pytest.raises(MetadataStoreError):
            await coordinator.create_workspace_coordinated("Test")

        vector_store.create_table.assert_not_called()

    async def test_retry_vector_table_after_failure(self, coordinator, vector_store):
        original_create = vector_store.create_table
        vector_store.create_table = AsyncMock(side_effect=UpstreamStoreError("vector", "timeout"))
        workspace = await coordinator.create_workspace_coordinated("Test")
        assert workspace.vectorDbStatus == VectorDbStatus.failed

        vector_store.create_table = original_create
        retried = await coordinator.retry_vector_table(workspace.id)

        assert retried.vectorDbStatus == VectorDbStatus.ready
        assert retried.vectorDbError is None
        assert (await coordinator.get_workspace(workspace.id)).vectorDbStatus == VectorDbStatus.ready

    async def test_retry_vector_table_missing_workspace(self, coordinator):
        assert await coordinator.retry_vector_table("missing") is None


@pytest.mark.asyncio
class TestDeleteWorkspace:
    """Workspace deletion: vector table, blobs, then metadata."""

    async def test_delete_removes_workspace(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")

        assert await coordinator.delete_workspace_coordinated(workspace.id) is True
        assert await coordinator.get_workspace(workspace.id) is None
        assert workspace_table_name(workspace.id) not in await vector_store.list_tables()

    async def test_delete_succeeds_when_drop_table_fails(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        vector_store.drop_table = AsyncMock(side_effect=UpstreamStoreError("vector", "network error"))

        assert await coordinator.delete_workspace_coordinated(workspace.id) is True
        assert await coordinator.get_workspace(workspace.id) is None
        vector_store.drop_table.assert_awaited_once_with(workspace_table_name(workspace.id))

    async def test_delete_missing_workspace_has_no_side_effects(self, repository, embeddings):
        vector_store = AsyncMock()
        blob_store = AsyncMock()
        coordinator = WorkspaceCoordinator(repository, vector_store, blob_store, embeddings)

        assert await coordinator.delete_workspace_coordinated("missing") is False
        assert vector_store.mock_calls == []
        assert blob_store.mock_calls == []

    async def test_delete_attempts_every_blob_when_some_fail(self, coordinator, blob_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        keys = [f"workspaces/{workspace.id}/file-{i}.txt" for i in range(6)]
        for key in keys:
            await blob_store.put(key, b"data")
            await _add_document(coordinator, workspace.id, storage_key=key)

        failing = set(keys[:2])
        attempted: list[str] = []

        async def flaky_delete(key):
            attempted.append(key)
            if key in failing:
                raise UpstreamStoreError("blob", f"cannot delete {key}")

        blob_store.delete = AsyncMock(side_effect=flaky_delete)

        assert await coordinator.delete_workspace_coordinated(workspace.id) is True
        assert blob_store.delete.await_count == len(keys)
        assert sorted(attempted) == sorted(keys)
        assert await coordinator.get_workspace(workspace.id) is None
        assert await coordinator.list_documents(workspace.id) == []

    async def test_delete_skips_documents_without_blob(self, coordinator, blob_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        await _add_document(coordinator, workspace.id, storage_key="")
        blob_store.delete = AsyncMock()

        assert await coordinator.delete_workspace_coordinated(workspace.id) is True
        blob_store.delete.assert_not_called()

    async def test_repeat_delete_returns_false(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")

        assert await coordinator.delete_workspace_coordinated(workspace.id) is True
        assert await coordinator.delete_workspace_coordinated(workspace.id) is False

    async def test_strict_policy_aborts_before_blobs_and_metadata(
        self, repository, vector_store, embeddings
    ):
        blob_store = AsyncMock()
        coordinator = WorkspaceCoordinator(
            repository,
            vector_store,
            blob_store,
            embeddings,
            vector_delete_policy=VectorDeletePolicy.strict,
        )
        workspace = await coordinator.create_workspace_coordinated("Test")
        await _add_document(coordinator, workspace.id, storage_key="k1")
        vector_store.drop_table = AsyncMock(side_effect=RuntimeError("table locked"))

        with pytest.raises(UpstreamStoreError) as exc_info:
            await coordinator.delete_workspace_coordinated(workspace.id)

        assert exc_info.value.store == "vector"
        blob_store.delete.assert_not_called()
        assert await coordinator.get_workspace(workspace.id) is not None

    async def test_metadata_delete_failure_propagates(self, coordinator, metadata_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        metadata_store.delete = AsyncMock(side_effect=MetadataStoreError("redis down"))

        with pytest.raises(MetadataStoreError):
            await coordinator.delete_workspace_coordinated(workspace.id)


@pytest.mark.asyncio
class TestDeleteDocument:
    """Document deletion: blob, vector row, then metadata."""

    async def test_delete_document(self, coordinator, blob_store, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        await blob_store.put("k1", b"hello")
        document = await _add_document(coordinator, workspace.id, storage_key="k1", embed=True)
        table = workspace_table_name(workspace.id)
        assert await vector_store.count_rows(table) == 1

        assert await coordinator.delete_document_coordinated(workspace.id, document.id) is True

        assert await coordinator.get_document(workspace.id, document.id) is None
        assert not await blob_store.exists("k1")
        assert await vector_store.count_rows(table) == 0
        stored = await coordinator.get_workspace(workspace.id)
        assert stored.documentCount == 0
        assert stored.embeddedCount == 0

    async def test_delete_document_survives_store_failures(self, coordinator, blob_store, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, storage_key="k1")
        blob_store.delete = AsyncMock(side_effect=UpstreamStoreError("blob", "denied"))
        vector_store.delete_document = AsyncMock(side_effect=UpstreamStoreError("vector", "timeout"))

        assert await coordinator.delete_document_coordinated(workspace.id, document.id) is True
        assert await coordinator.get_document(workspace.id, document.id) is None

    async def test_delete_document_order(self, coordinator, blob_store, vector_store, metadata_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, storage_key="k1")
        calls: list[str] = []

        blob_store.delete = AsyncMock(side_effect=lambda *a: calls.append("blob"))
        vector_store.delete_document = AsyncMock(side_effect=lambda *a: calls.append("vector"))
        original_delete = metadata_store.delete

        async def metadata_delete(*keys):
            calls.append("metadata")
            return await original_delete(*keys)

        metadata_store.delete = metadata_delete

        await coordinator.delete_document_coordinated(workspace.id, document.id)

        assert calls == ["blob", "vector", "metadata"]

    async def test_delete_missing_document(self, coordinator, blob_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        blob_store.delete = AsyncMock()

        assert await coordinator.delete_document_coordinated(workspace.id, "missing") is False
        blob_store.delete.assert_not_called()


@pytest.mark.asyncio
class TestEmbeddingWorkflow:
    """embed_document_and_update_status / create_and_embed_document."""

    async def test_embed_marks_document_embedded(self, coordinator, embeddings):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id)
        assert document.status == DocumentStatus.uploaded

        embedded = await coordinator.embed_document_and_update_status(workspace.id, document.id)

        assert embedded.status == DocumentStatus.embedded
        assert embedded.embeddedAt is not None
        assert embedded.metadata["embeddingModel"] == embeddings.model
        assert (await coordinator.get_workspace(workspace.id)).embeddedCount == 1

    async def test_status_written_only_after_upsert_resolves(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id)
        seen_during_upsert: list[DocumentStatus] = []

        async def upsert(table, document_id, content, metadata):
            current = await coordinator.get_document(workspace.id, document_id)
            seen_during_upsert.append(current.status)

        vector_store.upsert_document = AsyncMock(side_effect=upsert)

        embedded = await coordinator.embed_document_and_update_status(workspace.id, document.id)

        assert seen_during_upsert == [DocumentStatus.uploaded]
        assert embedded.status == DocumentStatus.embedded

    async def test_upsert_failure_leaves_status_unchanged(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id)
        vector_store.upsert_document = AsyncMock(side_effect=UpstreamStoreError("vector", "boom"))

        with pytest.raises(UpstreamStoreError):
            await coordinator.embed_document_and_update_status(workspace.id, document.id)

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.uploaded
        assert stored.embeddedAt is None
        assert stored.updatedAt == document.updatedAt

    async def test_upsert_failure_recorded_when_requested(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id)
        vector_store.upsert_document = AsyncMock(side_effect=ValueError("bad vector"))

        with pytest.raises(UpstreamStoreError):
            await coordinator.embed_document_and_update_status(
                workspace.id, document.id, EmbedOptions(record_failure=True)
            )

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.error
        assert stored.metadata["embeddingError"] == "bad vector"

    async def test_error_document_can_be_embedded_again(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id)
        original_upsert = vector_store.upsert_document
        vector_store.upsert_document = AsyncMock(side_effect=UpstreamStoreError("vector", "boom"))
        with pytest.raises(UpstreamStoreError):
            await coordinator.embed_document_and_update_status(
                workspace.id, document.id, EmbedOptions(record_failure=True)
            )

        vector_store.upsert_document = original_upsert
        embedded = await coordinator.embed_document_and_update_status(workspace.id, document.id)

        assert embedded.status == DocumentStatus.embedded
        assert "embeddingError" not in embedded.metadata

    async def test_embed_missing_document_returns_none(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")

        assert await coordinator.embed_document_and_update_status(workspace.id, "missing") is None

    async def test_embed_without_content_is_noop(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await coordinator.add_document(workspace.id, DocumentCreate(name="empty.bin"))
        vector_store.upsert_document = AsyncMock()

        result = await coordinator.embed_document_and_update_status(workspace.id, document.id)

        assert result == document
        vector_store.upsert_document.assert_not_called()

    async def test_embed_passes_scoped_metadata(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="some text")
        vector_store.upsert_document = AsyncMock()

        await coordinator.embed_document_and_update_status(
            workspace.id, document.id, EmbedOptions(model="custom-model", metadata={"source": "test"})
        )

        table, document_id, content, metadata = vector_store.upsert_document.await_args.args
        assert table == workspace_table_name(workspace.id)
        assert document_id == document.id
        assert content == "some text"
        assert metadata["workspaceId"] == workspace.id
        assert metadata["documentId"] == document.id
        assert metadata["source"] == "test"
        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.metadata["embeddingModel"] == "custom-model"

    async def test_create_and_embed_keeps_document_on_failure(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        vector_store.upsert_document = AsyncMock(side_effect=UpstreamStoreError("vector", "boom"))

        document = await coordinator.create_and_embed_document(
            workspace.id, DocumentCreate(name="a.txt", content="hello")
        )

        assert document.status == DocumentStatus.uploaded
        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.uploaded
        assert (await coordinator.get_workspace(workspace.id)).documentCount == 1

    async def test_create_and_embed_requires_workspace(self, coordinator):
        with pytest.raises(NotFoundError):
            await coordinator.create_and_embed_document("missing", DocumentCreate(name="a.txt"))


@pytest.mark.asyncio
class TestReembed:
    """reembed_if_content_changed."""

    async def test_same_content_is_noop(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello", embed=True)
        vector_store.upsert_document = AsyncMock()

        assert await coordinator.reembed_if_content_changed(workspace.id, document.id, "hello") is False

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.updatedAt == document.updatedAt
        assert extract_content_from_metadata(stored.metadata) == "hello"
        vector_store.upsert_document.assert_not_called()

    async def test_whitespace_difference_counts_as_change(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello", embed=True)

        assert await coordinator.reembed_if_content_changed(workspace.id, document.id, "hello ") is True

    async def test_changed_content_is_reembedded(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello", embed=True)

        assert await coordinator.reembed_if_content_changed(workspace.id, document.id, "goodbye") is True

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.embedded
        assert extract_content_from_metadata(stored.metadata) == "goodbye"
        results = await vector_store.search(workspace_table_name(workspace.id), "goodbye")
        assert results[0].content == "goodbye"
        assert (await coordinator.get_workspace(workspace.id)).embeddedCount == 1

    async def test_changed_content_saved_even_if_embedding_fails(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello", embed=True)
        vector_store.upsert_document = AsyncMock(side_effect=UpstreamStoreError("vector", "boom"))

        with pytest.raises(UpstreamStoreError):
            await coordinator.reembed_if_content_changed(workspace.id, document.id, "goodbye")

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.uploaded
        assert stored.embeddedAt is None
        assert extract_content_from_metadata(stored.metadata) == "goodbye"

    async def test_emptied_content_removes_stale_embedding(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello world", embed=True)
        table = workspace_table_name(workspace.id)

        assert await coordinator.reembed_if_content_changed(workspace.id, document.id, "") is True

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.uploaded
        assert await vector_store.count_rows(table) == 0
        assert await vector_store.search(table, "hello world") == []
        assert (await coordinator.get_workspace(workspace.id)).embeddedCount == 0

    async def test_emptied_content_tolerates_vector_delete_failure(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello", embed=True)
        vector_store.delete_document = AsyncMock(side_effect=UpstreamStoreError("vector", "down"))

        assert await coordinator.reembed_if_content_changed(workspace.id, document.id, "") is True

        stored = await coordinator.get_document(workspace.id, document.id)
        assert extract_content_from_metadata(stored.metadata) == ""
        vector_store.delete_document.assert_awaited_once()

    async def test_missing_document_raises(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")

        with pytest.raises(NotFoundError):
            await coordinator.reembed_if_content_changed(workspace.id, "missing", "text")


@pytest.mark.asyncio
class TestUploadAndSearch:
    async def test_upload_stores_blob_and_embeds(self, coordinator, blob_store):
        workspace = await coordinator.create_workspace_coordinated("Test")

        document = await coordinator.upload_document(workspace.id, "notes.txt", b"hello world")

        assert document.status == DocumentStatus.embedded
        assert document.fileSize == 11
        assert document.storageKey.startswith(f"workspaces/{workspace.id}/")
        assert await blob_store.get(document.storageKey) == b"hello world"
        assert extract_content_from_metadata(document.metadata) == "hello world"

    async def test_upload_strips_directories_from_name(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")

        document = await coordinator.upload_document(workspace.id, "../../etc/passwd", b"x")

        assert document.name == "passwd"
        assert ".." not in document.storageKey

    async def test_upload_removes_blob_when_metadata_fails(self, coordinator, repository, blob_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        repository.add_document = AsyncMock(side_effect=MetadataStoreError("redis down"))

        with pytest.raises(MetadataStoreError):
            await coordinator.upload_document(workspace.id, "notes.txt", b"hello")

        assert blob_store.keys() == []

    async def test_upload_to_missing_workspace(self, coordinator, blob_store):
        with pytest.raises(NotFoundError):
            await coordinator.upload_document("missing", "notes.txt", b"hello")

        assert blob_store.keys() == []

    async def test_search_ranks_matching_document_first(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")
        await _add_document(coordinator, workspace.id, content="quantum chromodynamics lecture", embed=True)
        match = await _add_document(coordinator, workspace.id, content="hello world greeting", embed=True)

        results = await coordinator.search_workspace(workspace.id, "hello world greeting", limit=5)

        assert results[0].id == match.id
        assert results[0].score == pytest.approx(1.0)

    async def test_search_threshold_filters(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")
        await _add_document(coordinator, workspace.id, content="alpha beta", embed=True)

        assert await coordinator.search_workspace(workspace.id, "gamma delta", threshold=0.99) == []

    async def test_search_validation_and_missing(self, coordinator):
        with pytest.raises(WorkspaceValidationError):
            await coordinator.search_workspace("any", "  ")
        with pytest.raises(NotFoundError):
            await coordinator.search_workspace("missing", "query")

    async def test_search_failed_vector_table(self, coordinator, vector_store):
        vector_store.create_table = AsyncMock(side_effect=UpstreamStoreError("vector", "down"))
        workspace = await coordinator.create_workspace_coordinated("Test")

        with pytest.raises(UpstreamStoreError):
            await coordinator.search_workspace(workspace.id, "query")


@pytest.mark.asyncio
class TestPassThrough:
    async def test_update_and_list_workspaces(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Old")

        updated = await coordinator.update_workspace(workspace.id, UpdateWorkspaceRequest(name="New"))

        assert updated.name == "New"
        assert updated.vectorDbStatus == VectorDbStatus.ready
        assert [w.id for w in await coordinator.list_workspaces()] == [workspace.id]
        assert await coordinator.update_workspace("missing", UpdateWorkspaceRequest(name="x")) is None

    async def test_update_document_cannot_mark_embedded(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello")

        for updates in (
            {"status": DocumentStatus.embedded},
            {"status": "embedded"},
            {"embeddedAt": 1700000000000},
            {"metadata": {**document.metadata, "embeddingModel": "forged"}},
        ):
            with pytest.raises(WorkspaceValidationError):
                await coordinator.update_document(workspace.id, document.id, updates)

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.uploaded
        assert stored.embeddedAt is None
        assert "embeddingModel" not in stored.metadata
        assert (await coordinator.get_workspace(workspace.id)).embeddedCount == 0
        assert await vector_store.count_rows(workspace_table_name(workspace.id)) == 0

    async def test_error_document_cannot_be_marked_embedded(self, coordinator, vector_store):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello")
        vector_store.upsert_document = AsyncMock(side_effect=UpstreamStoreError("vector", "down"))
        with pytest.raises(UpstreamStoreError):
            await coordinator.embed_document_and_update_status(
                workspace.id, document.id, EmbedOptions(record_failure=True)
            )

        with pytest.raises(WorkspaceValidationError):
            await coordinator.update_document(workspace.id, document.id, {"status": DocumentStatus.embedded})

        stored = await coordinator.get_document(workspace.id, document.id)
        assert stored.status == DocumentStatus.error

    async def test_update_document_other_fields(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")
        document = await _add_document(coordinator, workspace.id, content="hello", embed=True)

        updated = await coordinator.update_document(
            workspace.id,
            document.id,
            {"status": DocumentStatus.processing, "metadata": {**document.metadata, "tag": "x"}},
        )

        assert updated.status == DocumentStatus.processing
        assert updated.metadata["tag"] == "x"

    async def test_list_documents_with_glob_id_is_empty(self, coordinator):
        for name in ("A", "B"):
            workspace = await coordinator.create_workspace_coordinated(name)
            await _add_document(coordinator, workspace.id, content=f"secret {name}")

        assert await coordinator.list_documents("*") == []
        assert await coordinator.list_documents("?" * 8) == []

    async def test_stats(self, coordinator):
        workspace = await coordinator.create_workspace_coordinated("Test")
        await _add_document(coordinator, workspace.id, content="abc", embed=True)
        await _add_document(coordinator, workspace.id, content="defg")

        stats = await coordinator.get_workspace_stats(workspace.id)

        assert stats.totalDocuments == 2
        assert stats.embeddedDocuments == 1
        assert stats.uploadedDocuments == 1
        assert stats.totalSize == 7


@pytest.mark.asyncio
async def test_example_scenario(coordinator):
    """Create, add, embed, delete, delete again."""
    workspace = await coordinator.create_workspace_coordinated("Test", "d")
    assert workspace.documentCount == 0

    document = await coordinator.add_document(
        workspace.id, DocumentCreate(name="hello.txt", metadata={"content": "hello"})
    )
    embedded = await coordinator.embed_document_and_update_status(workspace.id, document.id)
    assert embedded.status == DocumentStatus.embedded
    assert embedded.embeddedAt is not None

    assert await coordinator.delete_workspace_coordinated(workspace.id) is True
    assert await coordinator.get_workspace(workspace.id) is None
    assert await coordinator.delete_workspace_coordinated(workspace.id) is False
