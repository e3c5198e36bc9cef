"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ragspace.api.v1.api import api_router
from ragspace.services.provider import close_coordinator
from ragspace.settings import settings
from ragspace.utils import setup_logging

logger = setup_logging("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting RAGSpace API ({settings.environment}): metadata={settings.metadata_backend}, "
        f"vector={settings.vector_backend}, blob={settings.blob_backend}"
    )
    yield
    await close_coordinator()
    logger.info("RAGSpace API stopped")


app = FastAPI(
    title="RAGSpace API",
    description="Workspaces and documents over metadata, vector and blob stores",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "status": "ok",
        "service": "RAGSpace API",
        "version": "0.1.0",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ragspace.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
