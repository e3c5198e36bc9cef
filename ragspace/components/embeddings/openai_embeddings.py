"""OpenAI embeddings integration.

Requires: RAGSPACE_OPENAI_API_KEY (or an injected AsyncOpenAI client).

Default model is text-embedding-3-small at 1536 dimensions. Any
OpenAI-compatible endpoint works through ``base_url``.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from ragspace.components.workspace.errors import UpstreamStoreError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"
DEFAULT_DIMENSIONS = 1536


class OpenAIEmbeddingService:
    """Embedding provider backed by the OpenAI embeddings API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        dimensions: int = DEFAULT_DIMENSIONS,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        if client is None and not api_key:
            raise ValueError("OpenAI API key required. Set RAGSPACE_OPENAI_API_KEY")

        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._model = model
        self._dimensions = dimensions

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        vectors = await self.embed_many([text])
        return vectors[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts in one request, preserving input order."""
        if not texts:
            return []

        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=texts,
                dimensions=self._dimensions,
            )
        except OpenAIError as e:
            raise UpstreamStoreError("embeddings", f"OpenAI embedding request failed: {e}") from e

        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(texts):
            raise UpstreamStoreError(
                "embeddings",
                f"Invalid response from OpenAI API: expected {len(texts)} embeddings, got {len(data)}",
            )

        logger.debug(f"Embedded {len(texts)} text(s) with {self._model}")
        return [list(item.embedding) for item in data]
