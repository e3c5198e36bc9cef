"""Workspace API endpoints.

Workspaces own a vector table, a set of documents and their blobs. Creation
and deletion go through the coordinator so all three stores stay in step.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from ragspace.api.v1.deps import get_coordinator
from ragspace.components.workspace import (
    CollisionError,
    CreateWorkspaceRequest,
    NotFoundError,
    SearchRequest,
    SearchResult,
    UpdateWorkspaceRequest,
    UpstreamStoreError,
    Workspace,
    WorkspaceStats,
    WorkspaceValidationError,
)
from ragspace.services.coordinator import WorkspaceCoordinator

router = APIRouter()


@router.post("", response_model=Workspace)
async def create_workspace(
    request: CreateWorkspaceRequest,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> Workspace:
    """Create a workspace.

    A vector table failure does not fail the request; check ``vectorDb.status``.
    """
    try:
        return await coordinator.create_workspace_coordinated(
            request.name, request.description, request.metadata
        )
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except CollisionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.get("", response_model=list[Workspace])
async def list_workspaces(
    limit: int | None = Query(None, ge=1),
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> list[Workspace]:
    """List workspaces, newest first."""
    return await coordinator.list_workspaces(limit)


@router.get("/{workspace_id}", response_model=Workspace)
async def get_workspace(
    workspace_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> Workspace:
    workspace = await coordinator.get_workspace(workspace_id)
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return workspace


@router.patch("/{workspace_id}", response_model=Workspace)
async def update_workspace(
    workspace_id: str,
    request: UpdateWorkspaceRequest,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> Workspace:
    try:
        workspace = await coordinator.update_workspace(workspace_id, request)
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return workspace


@router.delete("/{workspace_id}")
async def delete_workspace(
    workspace_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
):
    """Delete a workspace with its vector table, blobs and documents."""
    try:
        deleted = await coordinator.delete_workspace_coordinated(workspace_id)
    except UpstreamStoreError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    if not deleted:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return {"status": "deleted", "id": workspace_id}


@router.get("/{workspace_id}/stats", response_model=WorkspaceStats)
async def get_workspace_stats(
    workspace_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> WorkspaceStats:
    stats = await coordinator.get_workspace_stats(workspace_id)
    if not stats:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return stats


@router.post("/{workspace_id}/vector-table/retry", response_model=Workspace)
async def retry_vector_table(
    workspace_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> Workspace:
    """Retry vector table creation after a failure."""
    workspace = await coordinator.retry_vector_table(workspace_id)
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return workspace


@router.post("/{workspace_id}/search", response_model=list[SearchResult])
async def search_workspace(
    workspace_id: str,
    request: SearchRequest,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> list[SearchResult]:
    try:
        return await coordinator.search_workspace(
            workspace_id, request.query, request.limit, request.threshold
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Workspace not found") from e
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except UpstreamStoreError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
