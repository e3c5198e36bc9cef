"""Health check API endpoint."""

from fastapi import APIRouter

from ragspace.settings import settings

router = APIRouter(tags=["Health"])


@router.get("")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "backends": {
            "metadata": settings.metadata_backend,
            "vector": settings.vector_backend,
            "blob": settings.blob_backend,
            "embedding": settings.embedding_backend,
        },
    }
