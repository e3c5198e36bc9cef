"""Workspace coordinator across the metadata, vector and blob stores.

The stores share no transactions, so every operation runs its steps in a
fixed order and treats the stores asymmetrically:

- Metadata store: system of record. Any failure is raised to the caller.
- Vector store: table creation failures become a persisted status flag;
  deletion failures are logged (or raised under the strict policy).
- Blob store: deletion is best-effort, per item.

Architecture:
    ┌─────────────────────────────────────────────────────────────┐
    │                    WorkspaceCoordinator                     │
    └─────────────────────────────────────────────────────────────┘
                              │
          ┌───────────────────┼───────────────────┐
          ▼                   ▼                   ▼
    ┌───────────┐       ┌───────────┐       ┌───────────┐
    │ Metadata  │       │  Vector   │       │   Blob    │
    │  (source  │       │ (tables + │       │  (files)  │
    │  of truth)│       │ embedding)│       │           │
    └───────────┘       └───────────┘       └───────────┘

Status flags (Workspace.vectorDb, WorkspaceDocument.status) record what is
known about the other stores, so partial failures can be retried by the caller.
"""

from pathlib import PurePosixPath
from typing import Any

from ragspace.components.blobstore import BlobStoreProtocol
from ragspace.components.embeddings import EmbeddingServiceProtocol
from ragspace.components.vectorstore import VectorStoreProtocol, workspace_table_name
from ragspace.components.workspace.errors import (
    MetadataStoreError,
    NotFoundError,
    UpstreamStoreError,
    WorkspaceValidationError,
)
from ragspace.components.workspace.models import (
    DocumentCreate,
    DocumentStatus,
    EmbedOptions,
    SearchResult,
    UpdateWorkspaceRequest,
    VectorDbFailed,
    VectorDbReady,
    VectorDbState,
    VectorDbStatus,
    Workspace,
    WorkspaceDocument,
    WorkspaceStats,
)
from ragspace.repositories.workspace import WorkspaceRepository
from ragspace.services.batch import run_best_effort
from ragspace.settings import VectorDeletePolicy, settings
from ragspace.utils import (
    extract_content_from_metadata,
    generate_id,
    get_logger,
    get_timestamp_ms,
    store_content_in_metadata,
)

logger = get_logger(__name__)


def _error_message(error: Exception) -> str:
    return str(error) or error.__class__.__name__


class WorkspaceCoordinator:
    """Sequences workspace and document operations across the stores.

    Collaborators are injected once; operations never look them up at runtime.
    """

    def __init__(
        self,
        repository: WorkspaceRepository,
        vector_store: VectorStoreProtocol,
        blob_store: BlobStoreProtocol,
        embedding_service: EmbeddingServiceProtocol,
        vector_delete_policy: VectorDeletePolicy | None = None,
        blob_delete_concurrency: int | None = None,
    ):
        self._repository = repository
        self._vector_store = vector_store
        self._blob_store = blob_store
        self._embedding_service = embedding_service
        self._vector_delete_policy = VectorDeletePolicy(vector_delete_policy or settings.vector_delete_policy)
        self._blob_delete_concurrency = blob_delete_concurrency or settings.blob_delete_concurrency

    @property
    def repository(self) -> WorkspaceRepository:
        return self._repository

    @property
    def vector_delete_policy(self) -> VectorDeletePolicy:
        return self._vector_delete_policy

    # ==================== Workspace Lifecycle ====================

    async def create_workspace_coordinated(
        self,
        name: str,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> Workspace:
        """Create a workspace and its vector table.

        The record is persisted first (vectorDb=pending). A failed table
        creation is stored as vectorDb=failed and is not raised; the workspace
        is still returned.

        Raises:
            WorkspaceValidationError: Blank name
            CollisionError: Generated id already taken
            MetadataStoreError: Metadata backend failure
        """
        # 1. Metadata record (source of truth)
        workspace = await self._repository.create_workspace(name, description, metadata)

        # 2. Vector table; outcome recorded as a status flag
        return await self._provision_vector_table(workspace)

    async def retry_vector_table(self, workspace_id: str) -> Workspace | None:
        """Re-attempt vector table creation for a workspace (e.g. after a failure).

        Returns None if the workspace does not exist.
        """
        workspace = await self._repository.get_workspace(workspace_id)
        if workspace is None:
            return None

        if workspace.vectorDbStatus == VectorDbStatus.ready:
            logger.debug(f"Vector table already ready for workspace {workspace_id}, re-checking")
        return await self._provision_vector_table(workspace)

    async def _provision_vector_table(self, workspace: Workspace) -> Workspace:
        table = workspace_table_name(workspace.id)
        state: VectorDbState
        try:
            await self._vector_store.create_table(table)
        except Exception as e:
            logger.warning(f"Vector table creation failed for workspace {workspace.id}: {e}")
            state = VectorDbFailed(error=_error_message(e), failedAt=get_timestamp_ms())
        else:
            state = VectorDbReady(readyAt=get_timestamp_ms())

        updated = await self._repository.set_vector_db_state(workspace.id, state)
        if updated is None:
            # Deleted concurrently; report the state we observed
            logger.warning(f"Workspace {workspace.id} disappeared before its vector status was saved")
            return workspace.model_copy(update={"vectorDb": state})

        logger.info(f"Workspace {workspace.id} vector table: {updated.vectorDbStatus.value}")
        return updated

    async def delete_workspace_coordinated(self, workspace_id: str) -> bool:
        """Delete a workspace: vector table, then blobs, then metadata.

        Returns:
            True if the workspace record was deleted, False if it did not exist

        Raises:
            UpstreamStoreError: Vector table drop failed under the strict policy
            MetadataStoreError: Metadata deletion failed (safe to retry)
        """
        workspace = await self._repository.get_workspace(workspace_id)
        if workspace is None:
            logger.debug(f"Workspace not found, nothing to delete: {workspace_id}")
            return False

        # 1. Vector table
        await self._drop_vector_table(workspace_id)

        # 2. Blobs, in parallel, each failure isolated
        documents = await self._repository.list_documents(workspace_id)
        with_blobs = [d for d in documents if d.storageKey]
        if with_blobs:
            result = await run_best_effort(
                with_blobs,
                lambda d: self._blob_store.delete(d.storageKey),
                describe=lambda d: f"document {d.id} ({d.storageKey})",
                concurrency=self._blob_delete_concurrency,
                operation=f"Blob delete in workspace {workspace_id}",
            )
            logger.info(
                f"Deleted {len(result.succeeded)}/{result.total} blobs for workspace {workspace_id}"
            )

        # 3. Metadata last (authoritative)
        deleted = await self._repository.delete_workspace(workspace_id)
        if deleted:
            logger.info(f"Workspace deleted: {workspace_id} ({len(documents)} documents)")
        return deleted

    async def _drop_vector_table(self, workspace_id: str) -> None:
        table = workspace_table_name(workspace_id)
        try:
            await self._vector_store.drop_table(table)
        except Exception as e:
            if self._vector_delete_policy == VectorDeletePolicy.strict:
                logger.error(f"Failed to drop vector table {table}, aborting delete: {e}")
                if isinstance(e, UpstreamStoreError):
                    raise
                raise UpstreamStoreError("vector", f"Failed to drop table {table}: {e}") from e
            logger.warning(f"Failed to drop vector table {table}, continuing: {e}")

    async def delete_document_coordinated(self, workspace_id: str, document_id: str) -> bool:
        """Delete a document: blob, then vector row, then metadata.

        Returns False if the document record did not exist.
        """
        document = await self._repository.get_document(workspace_id, document_id)
        if document is None:
            logger.debug(f"Document not found, nothing to delete: {document_id}")
            return False

        # 1. Blob
        if document.storageKey:
            try:
                await self._blob_store.delete(document.storageKey)
            except Exception as e:
                logger.warning(f"Failed to delete blob {document.storageKey} for document {document_id}: {e}")

        # 2. Vector row
        table = workspace_table_name(workspace_id)
        try:
            await self._vector_store.delete_document(table, document_id)
        except Exception as e:
            if self._vector_delete_policy == VectorDeletePolicy.strict:
                logger.error(f"Failed to delete embedding for document {document_id}, aborting delete: {e}")
                if isinstance(e, UpstreamStoreError):
                    raise
                raise UpstreamStoreError("vector", f"Failed to delete {document_id} from {table}: {e}") from e
            logger.warning(f"Failed to delete embedding for document {document_id}: {e}")

        # 3. Metadata (authoritative)
        return await self._repository.delete_document(workspace_id, document_id)

    # ==================== Embedding Workflow ====================

    async def embed_document_and_update_status(
        self,
        workspace_id: str,
        document_id: str,
        options: EmbedOptions | None = None,
    ) -> WorkspaceDocument | None:
        """Embed a document's stored content and mark it embedded.

        The status is written only after the vector upsert succeeds. When the
        upsert raises, the document keeps its previous status (or becomes
        ``error`` with ``options.record_failure``) and the error propagates.

        Returns:
            Updated document, the unchanged document when it has no content,
            or None if the document does not exist
        """
        options = options or EmbedOptions()

        document = await self._repository.get_document(workspace_id, document_id)
        if document is None:
            return None

        content = extract_content_from_metadata(document.metadata)
        if not content:
            logger.debug(f"Document {document_id} has no content to embed")
            return document

        vector_metadata = {
            "workspaceId": workspace_id,
            "documentId": document_id,
            "name": document.name,
            "mimeType": document.mimeType,
            **options.metadata,
        }
        try:
            await self._vector_store.upsert_document(
                workspace_table_name(workspace_id), document_id, content, vector_metadata
            )
        except Exception as e:
            logger.error(f"Embedding failed for document {document_id}: {e}")
            if options.record_failure:
                await self._repository.update_document(
                    workspace_id,
                    document_id,
                    {
                        "status": DocumentStatus.error,
                        "metadata": {**document.metadata, "embeddingError": _error_message(e)},
                    },
                )
            if isinstance(e, UpstreamStoreError):
                raise
            raise UpstreamStoreError("vector", f"Failed to embed document {document_id}: {e}") from e

        updated = await self._repository.mark_document_embedded(
            workspace_id,
            document_id,
            options.model or self._embedding_service.model,
        )
        logger.info(f"Document embedded: {document_id}")
        return updated

    async def create_and_embed_document(
        self,
        workspace_id: str,
        fields: DocumentCreate,
        options: EmbedOptions | None = None,
    ) -> WorkspaceDocument:
        """Register a document and (optionally) embed it right away.

        An embedding failure is logged, not raised: the document stays
        ``uploaded`` and can be embedded again later.

        Raises:
            NotFoundError: Workspace does not exist
            MetadataStoreError: Metadata backend failure
        """
        options = options or EmbedOptions()

        document = await self._repository.add_document(workspace_id, fields)
        if not options.embed:
            return document

        try:
            embedded = await self.embed_document_and_update_status(workspace_id, document.id, options)
        except MetadataStoreError:
            raise
        except Exception as e:
            logger.warning(f"Document {document.id} created but not embedded, retry later: {e}")
            return await self._repository.get_document(workspace_id, document.id) or document

        return embedded or document

    async def reembed_if_content_changed(
        self,
        workspace_id: str,
        document_id: str,
        new_content: str,
        options: EmbedOptions | None = None,
    ) -> bool:
        """Replace a document's content and re-embed it if it changed.

        Comparison is exact string equality. The new content is saved (status
        reset to uploaded) before embedding, so an embedding error leaves a
        document that can simply be embedded again. Empty content is not
        embedded; the old vector row is deleted best-effort instead.

        Returns:
            False if the content is unchanged (nothing written), True otherwise

        Raises:
            NotFoundError: Document does not exist
            UpstreamStoreError: Embedding failed after the content was saved
        """
        document = await self._repository.get_document(workspace_id, document_id)
        if document is None:
            raise NotFoundError("Document", document_id)

        if extract_content_from_metadata(document.metadata) == new_content:
            logger.debug(f"Content unchanged for document {document_id}, skipping re-embed")
            return False

        await self._repository.update_document(
            workspace_id,
            document_id,
            {
                "metadata": store_content_in_metadata(document.metadata, new_content),
                "status": DocumentStatus.uploaded,
                "embeddedAt": None,
            },
        )
        if not new_content:
            # Nothing to embed; remove the row indexed for the old text
            try:
                await self._vector_store.delete_document(workspace_table_name(workspace_id), document_id)
            except Exception as e:
                logger.warning(f"Failed to delete stale embedding for document {document_id}: {e}")
            return True

        await self.embed_document_and_update_status(workspace_id, document_id, options)
        return True

    # ==================== Uploads & Search ====================

    async def upload_document(
        self,
        workspace_id: str,
        name: str,
        data: bytes,
        mime_type: str = "text/plain",
        content: str | None = None,
        metadata: dict[str, Any] | None = None,
        options: EmbedOptions | None = None,
    ) -> WorkspaceDocument:
        """Store file bytes in the blob store, then register (and embed) the document.

        Text files are decoded as UTF-8 for embedding when ``content`` is not
        given. If the metadata write fails, the blob is removed again
        (best-effort) and the error is raised.
        """
        if await self._repository.get_workspace(workspace_id) is None:
            raise NotFoundError("Workspace", workspace_id)

        file_name = PurePosixPath(name.replace("\\", "/")).name
        if not file_name or file_name in (".", ".."):
            raise WorkspaceValidationError(f"Invalid file name: {name!r}")

        storage_key = f"workspaces/{workspace_id}/{generate_id()}/{file_name}"
        await self._blob_store.put(storage_key, data, mime_type)

        if content is None and mime_type.startswith("text/"):
            content = data.decode("utf-8", errors="replace")

        fields = DocumentCreate(
            name=file_name,
            originalName=name,
            storageKey=storage_key,
            fileSize=len(data),
            mimeType=mime_type,
            metadata=dict(metadata or {}),
            content=content,
        )
        try:
            return await self.create_and_embed_document(workspace_id, fields, options)
        except Exception:
            try:
                await self._blob_store.delete(storage_key)
            except Exception as cleanup_error:
                logger.warning(f"Failed to remove orphaned blob {storage_key}: {cleanup_error}")
            raise

    async def search_workspace(
        self,
        workspace_id: str,
        query: str,
        limit: int = 10,
        threshold: float | None = None,
    ) -> list[SearchResult]:
        """Semantic search over a workspace's embedded documents.

        Raises:
            NotFoundError: Workspace does not exist
            WorkspaceValidationError: Blank query
            UpstreamStoreError: Vector table unavailable or search failed
        """
        if not query or not query.strip():
            raise WorkspaceValidationError("Search query cannot be empty")

        workspace = await self._repository.get_workspace(workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace", workspace_id)
        if workspace.vectorDbStatus == VectorDbStatus.failed:
            raise UpstreamStoreError("vector", f"Vector table unavailable: {workspace.vectorDbError}")

        return await self._vector_store.search(workspace_table_name(workspace_id), query, limit, threshold)

    # ==================== Pass-through Reads & Updates ====================

    async def get_workspace(self, workspace_id: str) -> Workspace | None:
        return await self._repository.get_workspace(workspace_id)

    async def list_workspaces(self, limit: int | None = None) -> list[Workspace]:
        return await self._repository.list_workspaces(limit)

    async def update_workspace(self, workspace_id: str, updates: UpdateWorkspaceRequest) -> Workspace | None:
        return await self._repository.update_workspace(workspace_id, updates)

    async def get_workspace_stats(self, workspace_id: str) -> WorkspaceStats | None:
        return await self._repository.get_workspace_stats(workspace_id)

    async def add_document(self, workspace_id: str, fields: DocumentCreate) -> WorkspaceDocument:
        """Register a document without embedding it."""
        return await self._repository.add_document(workspace_id, fields)

    async def get_document(self, workspace_id: str, document_id: str) -> WorkspaceDocument | None:
        return await self._repository.get_document(workspace_id, document_id)

    async def list_documents(self, workspace_id: str, limit: int | None = None) -> list[WorkspaceDocument]:
        return await self._repository.list_documents(workspace_id, limit)

    async def update_document(
        self,
        workspace_id: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> WorkspaceDocument | None:
        return await self._repository.update_document(workspace_id, document_id, updates)
