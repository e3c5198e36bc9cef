"""Repository layer for metadata access.

Repositories wrap a metadata store with typed CRUD for each entity. They never
touch the vector or blob stores.

Usage:
    from ragspace.repositories import WorkspaceRepository

    repository = WorkspaceRepository(InMemoryMetadataStore())
    workspace = await repository.get_workspace(workspace_id)
"""

from ragspace.repositories.workspace import WorkspaceRepository

__all__ = [
    "WorkspaceRepository",
]
