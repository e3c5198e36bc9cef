#!/usr/bin/env python
"""
pytest configuration file

This file contains shared fixtures for all tests.
"""

import fakeredis
import pytest

from ragspace.components.blobstore import InMemoryBlobStore
from ragspace.components.embeddings import MockEmbeddingService
from ragspace.components.vectorstore import InMemoryVectorStore
from ragspace.components.workspace import InMemoryMetadataStore
from ragspace.repositories import WorkspaceRepository
from ragspace.services.coordinator import WorkspaceCoordinator
from ragspace.settings import VectorDeletePolicy


@pytest.fixture
def metadata_store() -> InMemoryMetadataStore:
    """Fresh in-memory metadata store."""
    return InMemoryMetadataStore()


@pytest.fixture
def repository(metadata_store) -> WorkspaceRepository:
    return WorkspaceRepository(metadata_store)


@pytest.fixture
def embeddings() -> MockEmbeddingService:
    """Deterministic embeddings, no network."""
    return MockEmbeddingService(dimensions=1024)


@pytest.fixture
def vector_store(embeddings) -> InMemoryVectorStore:
    return InMemoryVectorStore(embeddings)


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def coordinator(repository, vector_store, blob_store, embeddings) -> WorkspaceCoordinator:
    """Coordinator wired to in-memory backends with the best-effort policy."""
    return WorkspaceCoordinator(
        repository=repository,
        vector_store=vector_store,
        blob_store=blob_store,
        embedding_service=embeddings,
        vector_delete_policy=VectorDeletePolicy.best_effort,
        blob_delete_concurrency=4,
    )


@pytest.fixture
def fake_async_redis():
    """
    Create an async fakeredis client for unit tests.

    This provides an in-memory Redis implementation that allows
    unit tests to run without a real Redis server.
    """
    server = fakeredis.FakeServer()
    return fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
