"""Coordinator provider.

Builds a WorkspaceCoordinator wired to the backends selected in settings and
keeps one shared instance per process:

    metadata_backend   memory | redis
    vector_backend     memory | lancedb
    embedding_backend  mock | openai
    blob_backend       memory | filesystem | s3

Usage:
    from ragspace.services.provider import get_coordinator

    coordinator = get_coordinator()
    workspace = await coordinator.create_workspace_coordinated("Docs")
"""

from ragspace.components.blobstore import (
    BlobStoreProtocol,
    FilesystemBlobStore,
    InMemoryBlobStore,
    S3BlobStore,
    create_s3_client,
)
from ragspace.components.embeddings import (
    EmbeddingServiceProtocol,
    MockEmbeddingService,
    OpenAIEmbeddingService,
)
from ragspace.components.vectorstore import (
    InMemoryVectorStore,
    LanceDBVectorStore,
    VectorStoreProtocol,
)
from ragspace.components.workspace.redis_storage import RedisMetadataStore
from ragspace.components.workspace.storage import InMemoryMetadataStore, MetadataStoreProtocol
from ragspace.db.redis_factory import create_redis_client
from ragspace.repositories.workspace import WorkspaceRepository
from ragspace.services.coordinator import WorkspaceCoordinator
from ragspace.settings import Settings, settings as default_settings
from ragspace.utils import get_logger

logger = get_logger(__name__)


def create_metadata_store(config: Settings) -> MetadataStoreProtocol:
    if config.metadata_backend == "redis":
        logger.info("Metadata store: Redis (multi-instance safe)")
        return RedisMetadataStore(create_redis_client(config))
    logger.info("Metadata store: in-memory (single instance only)")
    return InMemoryMetadataStore()


def create_embedding_service(config: Settings) -> EmbeddingServiceProtocol:
    if config.embedding_backend == "openai":
        logger.info(f"Embeddings: OpenAI {config.embedding_model} ({config.embedding_dimensions} dims)")
        return OpenAIEmbeddingService(
            api_key=config.openai_api_key,
            model=config.embedding_model,
            dimensions=config.embedding_dimensions,
            base_url=config.openai_base_url,
        )
    logger.info("Embeddings: mock hash embeddings")
    return MockEmbeddingService()


def create_vector_store(config: Settings, embeddings: EmbeddingServiceProtocol) -> VectorStoreProtocol:
    if config.vector_backend == "lancedb":
        uri = config.get_lancedb_uri()
        logger.info(f"Vector store: LanceDB at {uri}")
        return LanceDBVectorStore(
            uri,
            embeddings,
            api_key=config.lancedb_api_key,
            region=config.lancedb_region,
        )
    logger.info("Vector store: in-memory")
    return InMemoryVectorStore(embeddings)


def create_blob_store(config: Settings) -> BlobStoreProtocol:
    if config.blob_backend == "s3":
        if not config.is_s3_configured():
            raise ValueError("S3 blob store requires s3_bucket, s3_access_key and s3_secret_key")
        logger.info(f"Blob store: S3 bucket {config.s3_bucket}")
        client = create_s3_client(
            access_key=config.s3_access_key,
            secret_key=config.s3_secret_key,
            region=config.s3_region,
            endpoint_url=config.s3_endpoint,
            force_path_style=config.s3_force_path_style,
        )
        return S3BlobStore(client, config.s3_bucket)
    if config.blob_backend == "filesystem":
        root = config.get_blob_root()
        logger.info(f"Blob store: filesystem at {root}")
        return FilesystemBlobStore(root)
    logger.info("Blob store: in-memory")
    return InMemoryBlobStore()


def create_coordinator(config: Settings | None = None) -> WorkspaceCoordinator:
    """Build a coordinator with every backend chosen from ``config``."""
    config = config or default_settings

    embeddings = create_embedding_service(config)
    return WorkspaceCoordinator(
        repository=WorkspaceRepository(create_metadata_store(config)),
        vector_store=create_vector_store(config, embeddings),
        blob_store=create_blob_store(config),
        embedding_service=embeddings,
        vector_delete_policy=config.vector_delete_policy,
        blob_delete_concurrency=config.blob_delete_concurrency,
    )


# Singleton coordinator instance
_coordinator: WorkspaceCoordinator | None = None


def get_coordinator() -> WorkspaceCoordinator:
    """Get the process-wide coordinator, creating it on first use."""
    global _coordinator

    if _coordinator is None:
        _coordinator = create_coordinator()
    return _coordinator


async def close_coordinator() -> None:
    """Close backend connections and drop the singleton."""
    global _coordinator

    if _coordinator is not None:
        await _coordinator.repository.store.close()
    _coordinator = None


def reset_coordinator() -> None:
    """Reset the coordinator singleton (for testing)."""
    global _coordinator
    _coordinator = None
