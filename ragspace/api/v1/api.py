"""API v1 Router Aggregator.

Aggregates all v1 API endpoints into a single router.
"""

from fastapi import APIRouter

from ragspace.api.v1.endpoints import documents, health, workspaces

api_router = APIRouter()

# Mount endpoint routers
api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(workspaces.router, prefix="/workspaces", tags=["Workspaces"])
api_router.include_router(
    documents.router,
    prefix="/workspaces/{workspace_id}/documents",
    tags=["Documents"],
)
