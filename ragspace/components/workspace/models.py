"""Workspace data models.

Defines the core entities:
- Workspace: tenant-scoped container with a per-workspace vector table
- WorkspaceDocument: registry entry for one ingested document
- VectorDbState: tagged status of the workspace's vector table
- WorkspaceStats: figures derived from the document list
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator


class DocumentStatus(str, Enum):
    """Document processing status.

    uploaded -> embedded (successful embed)
    uploaded -> error (failed embed, only when failures are recorded)
    embedded -> uploaded (content changed, reset before re-embedding)
    """

    uploaded = "uploaded"
    processing = "processing"
    embedded = "embedded"
    error = "error"


class VectorDbStatus(str, Enum):
    """Believed state of the workspace's vector table."""

    pending = "pending"
    ready = "ready"
    failed = "failed"


class VectorDbPending(BaseModel):
    status: Literal["pending"] = "pending"


class VectorDbReady(BaseModel):
    status: Literal["ready"] = "ready"
    readyAt: int | None = None


class VectorDbFailed(BaseModel):
    status: Literal["failed"] = "failed"
    error: str
    failedAt: int | None = None


VectorDbState = Annotated[
    Union[VectorDbPending, VectorDbReady, VectorDbFailed],
    Field(discriminator="status"),
]


class Workspace(BaseModel):
    """Workspace metadata record.

    documentCount/embeddedCount are materialized counters. They are kept
    approximately right by the repository; WorkspaceStats gives exact figures.
    """

    id: str
    name: str
    description: str = ""
    documentCount: int = 0
    embeddedCount: int = 0
    vectorDb: VectorDbState = Field(default_factory=VectorDbPending)
    metadata: dict[str, Any] = Field(default_factory=dict)
    createdAt: int
    updatedAt: int

    @property
    def vectorDbStatus(self) -> VectorDbStatus:
        return VectorDbStatus(self.vectorDb.status)

    @property
    def vectorDbError(self) -> str | None:
        if isinstance(self.vectorDb, VectorDbFailed):
            return self.vectorDb.error
        return None


class WorkspaceDocument(BaseModel):
    """Document metadata stored in the metadata store.

    File bytes live in the blob store under storageKey; extracted text is kept
    in metadata["content"] for embedding.
    """

    id: str
    workspaceId: str
    name: str
    originalName: str
    storageKey: str = ""
    fileSize: int = 0
    mimeType: str = "text/plain"
    status: DocumentStatus = DocumentStatus.uploaded
    uploadedAt: int
    updatedAt: int
    embeddedAt: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class WorkspaceStats(BaseModel):
    """Statistics computed from the current document list."""

    totalDocuments: int = 0
    uploadedDocuments: int = 0
    processingDocuments: int = 0
    embeddedDocuments: int = 0
    errorDocuments: int = 0
    totalSize: int = 0


class SearchResult(BaseModel):
    """One semantic search hit."""

    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float


# Request models


class CreateWorkspaceRequest(BaseModel):
    """Request to create a new workspace."""

    name: str
    description: str = ""
    metadata: dict[str, Any] | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Workspace name cannot be empty")
        return value


class UpdateWorkspaceRequest(BaseModel):
    """Request to update workspace fields. None means unchanged."""

    name: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None


class DocumentCreate(BaseModel):
    """Fields for registering a document.

    ``content`` is a convenience: when given it is stored in metadata["content"].
    """

    name: str
    originalName: str | None = None
    storageKey: str = ""
    fileSize: int = Field(default=0, ge=0)
    mimeType: str = "text/plain"
    metadata: dict[str, Any] = Field(default_factory=dict)
    content: str | None = None


class EmbedOptions(BaseModel):
    """Options for the embedding workflow."""

    # Run the embedding step right after creating a document
    embed: bool = True
    # Recorded as metadata.embeddingModel; defaults to the embedding service's model
    model: str | None = None
    # Extra metadata attached to the vector record
    metadata: dict[str, Any] = Field(default_factory=dict)
    # Persist status=error when the vector upsert fails (default: leave status unchanged)
    record_failure: bool = False


class SearchRequest(BaseModel):
    query: str
    limit: int = Field(default=10, ge=1, le=100)
    threshold: float | None = None


class UpdateContentRequest(BaseModel):
    content: str
