"""Document API endpoints, nested under a workspace."""

from fastapi import APIRouter, Depends, HTTPException, Query

from ragspace.api.v1.deps import get_coordinator
from ragspace.components.workspace import (
    DocumentCreate,
    EmbedOptions,
    NotFoundError,
    UpdateContentRequest,
    UpstreamStoreError,
    WorkspaceDocument,
)
from ragspace.services.coordinator import WorkspaceCoordinator

router = APIRouter()


@router.post("", response_model=WorkspaceDocument)
async def create_document(
    workspace_id: str,
    request: DocumentCreate,
    embed: bool = Query(True, description="Embed the document right away"),
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> WorkspaceDocument:
    """Register a document and optionally embed it.

    An embedding failure leaves the document with status ``uploaded``.
    """
    try:
        return await coordinator.create_and_embed_document(
            workspace_id, request, EmbedOptions(embed=embed)
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Workspace not found") from e


@router.get("", response_model=list[WorkspaceDocument])
async def list_documents(
    workspace_id: str,
    limit: int | None = Query(None, ge=1),
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> list[WorkspaceDocument]:
    if not await coordinator.get_workspace(workspace_id):
        raise HTTPException(status_code=404, detail="Workspace not found")
    return await coordinator.list_documents(workspace_id, limit)


@router.get("/{document_id}", response_model=WorkspaceDocument)
async def get_document(
    workspace_id: str,
    document_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> WorkspaceDocument:
    document = await coordinator.get_document(workspace_id, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.delete("/{document_id}")
async def delete_document(
    workspace_id: str,
    document_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
):
    try:
        deleted = await coordinator.delete_document_coordinated(workspace_id, document_id)
    except UpstreamStoreError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    if not deleted:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"status": "deleted", "id": document_id}


@router.post("/{document_id}/embed", response_model=WorkspaceDocument)
async def embed_document(
    workspace_id: str,
    document_id: str,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
) -> WorkspaceDocument:
    """Embed (or re-embed) a document's stored content."""
    try:
        document = await coordinator.embed_document_and_update_status(workspace_id, document_id)
    except UpstreamStoreError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.put("/{document_id}/content")
async def update_document_content(
    workspace_id: str,
    document_id: str,
    request: UpdateContentRequest,
    coordinator: WorkspaceCoordinator = Depends(get_coordinator),
):
    """Replace the document content; re-embeds only when it changed."""
    try:
        changed = await coordinator.reembed_if_content_changed(workspace_id, document_id, request.content)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Document not found") from e
    except UpstreamStoreError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    document = await coordinator.get_document(workspace_id, document_id)
    return {"changed": changed, "document": document}
