"""Workspace Module.

Data models, error taxonomy and metadata stores for workspaces and their
documents.

Components:
- models.py: Workspace, WorkspaceDocument, status types, request models
- errors.py: CollisionError, NotFoundError, UpstreamStoreError, ...
- storage.py: MetadataStoreProtocol and the in-memory store
- redis_storage.py: Redis-backed metadata store (multi-instance)

Usage:
    from ragspace.components.workspace import (
        Workspace,
        WorkspaceDocument,
        DocumentStatus,
        InMemoryMetadataStore,
        NotFoundError,
    )
"""

from ragspace.components.workspace.errors import (
    CollisionError,
    MetadataStoreError,
    NotFoundError,
    UpstreamStoreError,
    WorkspaceError,
    WorkspaceValidationError,
)
from ragspace.components.workspace.models import (
    CreateWorkspaceRequest,
    DocumentCreate,
    DocumentStatus,
    EmbedOptions,
    SearchRequest,
    SearchResult,
    UpdateContentRequest,
    UpdateWorkspaceRequest,
    VectorDbFailed,
    VectorDbPending,
    VectorDbReady,
    VectorDbState,
    VectorDbStatus,
    Workspace,
    WorkspaceDocument,
    WorkspaceStats,
)
from ragspace.components.workspace.redis_storage import RedisMetadataStore
from ragspace.components.workspace.storage import InMemoryMetadataStore, MetadataStoreProtocol

__all__ = [
    # Errors
    "WorkspaceError",
    "CollisionError",
    "NotFoundError",
    "UpstreamStoreError",
    "MetadataStoreError",
    "WorkspaceValidationError",
    # Models
    "Workspace",
    "WorkspaceDocument",
    "WorkspaceStats",
    "DocumentStatus",
    "VectorDbStatus",
    "VectorDbPending",
    "VectorDbReady",
    "VectorDbFailed",
    "VectorDbState",
    "SearchResult",
    # Requests
    "CreateWorkspaceRequest",
    "UpdateWorkspaceRequest",
    "DocumentCreate",
    "EmbedOptions",
    "SearchRequest",
    "UpdateContentRequest",
    # Storage
    "MetadataStoreProtocol",
    "InMemoryMetadataStore",
    "RedisMetadataStore",
]
