"""Workspace repository.

Single-store CRUD for workspaces and their document registry on top of a
MetadataStoreProtocol implementation. Nothing here touches the vector or blob
stores; cross-store sequencing lives in WorkspaceCoordinator.

Counters (documentCount/embeddedCount) are adjusted through the store's atomic
update primitive, so concurrent writers do not lose increments. They can
still drift from the real document set (e.g. a crash between the document
write and the counter update); get_workspace_stats() computes exact figures.
"""

import logging
from collections.abc import Callable
from typing import Any

from ragspace.components.workspace.errors import NotFoundError, WorkspaceValidationError
from ragspace.components.workspace.models import (
    DocumentCreate,
    DocumentStatus,
    UpdateWorkspaceRequest,
    VectorDbPending,
    VectorDbState,
    Workspace,
    WorkspaceDocument,
    WorkspaceStats,
)
from ragspace.components.workspace.storage import MetadataStoreProtocol
from ragspace.db.redis_db import RedisKeyPrefix
from ragspace.utils import generate_id, get_timestamp_ms, store_content_in_metadata

logger = logging.getLogger(__name__)

# Fields a document update may not rewrite
_IMMUTABLE_DOCUMENT_FIELDS = frozenset({"id", "workspaceId", "uploadedAt"})


class WorkspaceRepository:
    """Repository for Workspace and WorkspaceDocument records."""

    def __init__(self, store: MetadataStoreProtocol):
        self._store = store

    @property
    def store(self) -> MetadataStoreProtocol:
        return self._store

    # ==================== Workspace Operations ====================

    async def create_workspace(
        self,
        name: str,
        description: str = "",
        metadata: dict[str, Any] | None = None,
        vector_db: VectorDbState | None = None,
    ) -> Workspace:
        """Create a workspace record with a fresh id.

        Raises:
            WorkspaceValidationError: If the name is blank
            CollisionError: If the generated id already exists
        """
        if not name or not name.strip():
            raise WorkspaceValidationError("Workspace name cannot be empty")

        now = get_timestamp_ms()
        workspace = Workspace(
            id=generate_id(),
            name=name,
            description=description,
            documentCount=0,
            embeddedCount=0,
            vectorDb=vector_db or VectorDbPending(),
            metadata=dict(metadata or {}),
            createdAt=now,
            updatedAt=now,
        )

        await self._store.create_if_absent(
            RedisKeyPrefix.workspace_key(workspace.id),
            workspace.model_dump(mode="json"),
        )
        logger.info(f"Created workspace: {workspace.id} ({workspace.name})")
        return workspace

    async def get_workspace(self, workspace_id: str) -> Workspace | None:
        """Get a workspace by ID."""
        record = await self._store.get(RedisKeyPrefix.workspace_key(workspace_id))
        if record is None:
            return None
        return Workspace.model_validate(record)

    async def list_workspaces(self, limit: int | None = None) -> list[Workspace]:
        """List workspaces, newest first."""
        workspaces = [
            Workspace.model_validate(record)
            async for record in self._store.list_by_prefix(RedisKeyPrefix.workspace_prefix())
        ]
        workspaces.sort(key=lambda w: w.createdAt, reverse=True)
        if limit is not None:
            return workspaces[:limit]
        return workspaces

    async def update_workspace(self, workspace_id: str, updates: UpdateWorkspaceRequest) -> Workspace | None:
        """Update name/description/metadata. Returns None if the workspace is missing."""
        if updates.name is not None and not updates.name.strip():
            raise WorkspaceValidationError("Workspace name cannot be empty")

        def mutate(record: dict[str, Any]) -> dict[str, Any]:
            if updates.name is not None:
                record["name"] = updates.name
            if updates.description is not None:
                record["description"] = updates.description
            if updates.metadata is not None:
                record["metadata"] = dict(updates.metadata)
            record["updatedAt"] = get_timestamp_ms()
            return record

        record = await self._store.update(RedisKeyPrefix.workspace_key(workspace_id), mutate)
        if record is None:
            return None
        logger.info(f"Updated workspace: {workspace_id}")
        return Workspace.model_validate(record)

    async def set_vector_db_state(self, workspace_id: str, state: VectorDbState) -> Workspace | None:
        """Persist the vector table status flag."""

        def mutate(record: dict[str, Any]) -> dict[str, Any]:
            record["vectorDb"] = state.model_dump(mode="json")
            record["updatedAt"] = get_timestamp_ms()
            return record

        record = await self._store.update(RedisKeyPrefix.workspace_key(workspace_id), mutate)
        if record is None:
            return None
        return Workspace.model_validate(record)

    async def delete_workspace(self, workspace_id: str) -> bool:
        """Delete the workspace record and its whole document registry.

        Vector table and blobs must be cleaned up by the caller beforehand.
        Returns False if the workspace did not exist.
        """
        workspace_key = RedisKeyPrefix.workspace_key(workspace_id)
        if await self._store.get(workspace_key) is None:
            return False

        document_keys = [
            RedisKeyPrefix.document_key(workspace_id, record["id"])
            async for record in self._store.list_by_prefix(RedisKeyPrefix.document_prefix(workspace_id))
        ]
        deleted = await self._store.delete(workspace_key, *document_keys)

        logger.info(f"Deleted workspace: {workspace_id} ({len(document_keys)} documents)")
        return deleted > 0

    # ==================== Document Registry Operations ====================

    async def add_document(self, workspace_id: str, fields: DocumentCreate) -> WorkspaceDocument:
        """Register a document (metadata only) with status uploaded.

        Raises:
            NotFoundError: If the workspace does not exist
            CollisionError: If the generated document id already exists
        """
        if await self.get_workspace(workspace_id) is None:
            raise NotFoundError("Workspace", workspace_id)

        metadata = dict(fields.metadata)
        if fields.content is not None:
            metadata = store_content_in_metadata(metadata, fields.content)

        now = get_timestamp_ms()
        document = WorkspaceDocument(
            id=generate_id(),
            workspaceId=workspace_id,
            name=fields.name,
            originalName=fields.originalName or fields.name,
            storageKey=fields.storageKey,
            fileSize=fields.fileSize,
            mimeType=fields.mimeType,
            status=DocumentStatus.uploaded,
            uploadedAt=now,
            updatedAt=now,
            metadata=metadata,
        )

        await self._store.create_if_absent(
            RedisKeyPrefix.document_key(workspace_id, document.id),
            document.model_dump(mode="json"),
        )
        await self._adjust_counters(workspace_id, documents=1)

        logger.info(f"Added document: {document.id} to workspace {workspace_id}")
        return document

    async def get_document(self, workspace_id: str, document_id: str) -> WorkspaceDocument | None:
        """Get a document by ID."""
        record = await self._store.get(RedisKeyPrefix.document_key(workspace_id, document_id))
        if record is None:
            return None
        return WorkspaceDocument.model_validate(record)

    async def list_documents(self, workspace_id: str, limit: int | None = None) -> list[WorkspaceDocument]:
        """List documents of a workspace, oldest upload first."""
        documents = [
            WorkspaceDocument.model_validate(record)
            async for record in self._store.list_by_prefix(RedisKeyPrefix.document_prefix(workspace_id))
        ]
        documents.sort(key=lambda d: d.uploadedAt)
        if limit is not None:
            return documents[:limit]
        return documents

    async def update_document(
        self,
        workspace_id: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> WorkspaceDocument | None:
        """Merge ``updates`` into a document record.

        The embedded state (status embedded, ``embeddedAt``,
        ``metadata.embeddingModel``) can only be written by
        mark_document_embedded(); clearing ``embeddedAt`` is allowed.
        Returns None if the document is missing.
        """
        forbidden = _IMMUTABLE_DOCUMENT_FIELDS.intersection(updates)
        if forbidden:
            raise WorkspaceValidationError(f"Cannot update document fields: {sorted(forbidden)}")
        if updates.get("status") in (DocumentStatus.embedded, DocumentStatus.embedded.value):
            raise WorkspaceValidationError("Documents become embedded only through the embedding workflow")
        if updates.get("embeddedAt") is not None:
            raise WorkspaceValidationError("embeddedAt is set only through the embedding workflow")

        new_metadata = updates.get("metadata")

        def check(record: dict[str, Any]) -> None:
            if not isinstance(new_metadata, dict):
                return
            current_model = record.get("metadata", {}).get("embeddingModel")
            if new_metadata.get("embeddingModel") != current_model:
                raise WorkspaceValidationError("metadata.embeddingModel is set only through the embedding workflow")

        return await self._write_document(workspace_id, document_id, updates, check)

    async def mark_document_embedded(
        self,
        workspace_id: str,
        document_id: str,
        embedding_model: str,
    ) -> WorkspaceDocument | None:
        """Record a successful vector upsert: status embedded, embeddedAt, model.

        Callers must only invoke this after the vector store accepted the
        document. Clears any previous ``embeddingError``.
        """
        embedded_at = get_timestamp_ms()
        payload: dict[str, Any] = {}

        def check(record: dict[str, Any]) -> None:
            metadata = {
                key: value
                for key, value in record.get("metadata", {}).items()
                if key != "embeddingError"
            }
            metadata["embeddingModel"] = embedding_model
            payload.update(status=DocumentStatus.embedded, embeddedAt=embedded_at, metadata=metadata)

        return await self._write_document(workspace_id, document_id, payload, check)

    async def _write_document(
        self,
        workspace_id: str,
        document_id: str,
        updates: dict[str, Any],
        check: Callable[[dict[str, Any]], None],
    ) -> WorkspaceDocument | None:
        """Atomically merge ``updates`` and keep embeddedCount in step with the status."""
        previous: dict[str, Any] = {}

        def mutate(record: dict[str, Any]) -> dict[str, Any]:
            check(record)
            previous["status"] = record.get("status")
            payload = {
                key: value.value if isinstance(value, DocumentStatus) else value
                for key, value in updates.items()
            }
            merged = {**record, **payload, "updatedAt": get_timestamp_ms()}
            # Validate before anything is written
            return WorkspaceDocument.model_validate(merged).model_dump(mode="json")

        record = await self._store.update(RedisKeyPrefix.document_key(workspace_id, document_id), mutate)
        if record is None:
            return None

        was_embedded = previous.get("status") == DocumentStatus.embedded.value
        is_embedded = record["status"] == DocumentStatus.embedded.value
        if was_embedded != is_embedded:
            await self._adjust_counters(workspace_id, embedded=1 if is_embedded else -1)

        logger.debug(f"Updated document: {document_id}")
        return WorkspaceDocument.model_validate(record)

    async def delete_document(self, workspace_id: str, document_id: str) -> bool:
        """Delete a document record. Returns False if it did not exist."""
        document = await self.get_document(workspace_id, document_id)
        if document is None:
            return False

        deleted = await self._store.delete(RedisKeyPrefix.document_key(workspace_id, document_id))
        if not deleted:
            # Removed concurrently; the other caller adjusted the counters
            return False

        await self._adjust_counters(
            workspace_id,
            documents=-1,
            embedded=-1 if document.status == DocumentStatus.embedded else 0,
        )
        logger.info(f"Deleted document: {document_id}")
        return True

    async def get_workspace_stats(self, workspace_id: str) -> WorkspaceStats | None:
        """Compute statistics from the document list. None if the workspace is missing."""
        if await self.get_workspace(workspace_id) is None:
            return None

        documents = await self.list_documents(workspace_id)
        by_status = {status: 0 for status in DocumentStatus}
        for document in documents:
            by_status[document.status] += 1

        return WorkspaceStats(
            totalDocuments=len(documents),
            uploadedDocuments=by_status[DocumentStatus.uploaded],
            processingDocuments=by_status[DocumentStatus.processing],
            embeddedDocuments=by_status[DocumentStatus.embedded],
            errorDocuments=by_status[DocumentStatus.error],
            totalSize=sum(d.fileSize for d in documents),
        )

    # ==================== Helpers ====================

    async def _adjust_counters(self, workspace_id: str, documents: int = 0, embedded: int = 0) -> None:
        def mutate(record: dict[str, Any]) -> dict[str, Any]:
            record["documentCount"] = max(0, record.get("documentCount", 0) + documents)
            record["embeddedCount"] = max(0, record.get("embeddedCount", 0) + embedded)
            record["updatedAt"] = get_timestamp_ms()
            return record

        await self._store.update(RedisKeyPrefix.workspace_key(workspace_id), mutate)
