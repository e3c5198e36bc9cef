"""Embedding providers.

- base.py: EmbeddingServiceProtocol and cosine_similarity
- openai_embeddings.py: OpenAI embeddings API (production)
- mock.py: deterministic hash embeddings (local dev, tests)
"""

from ragspace.components.embeddings.base import EmbeddingServiceProtocol, cosine_similarity
from ragspace.components.embeddings.mock import MockEmbeddingService
from ragspace.components.embeddings.openai_embeddings import OpenAIEmbeddingService

__all__ = [
    "EmbeddingServiceProtocol",
    "cosine_similarity",
    "MockEmbeddingService",
    "OpenAIEmbeddingService",
]
