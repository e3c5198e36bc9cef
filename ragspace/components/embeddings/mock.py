"""Mock embedding service for local development and tests.

Produces deterministic vectors without any network call: every token is
hashed into a bucket and the bucket counts are L2-normalised. Texts sharing
words therefore score higher under cosine similarity than unrelated texts,
which is enough to exercise search end to end.
"""

import hashlib
import math
import re

MOCK_MODEL = "mock-hash-embedding"

_TOKEN_PATTERN = re.compile(r"\w+")


class MockEmbeddingService:
    """Deterministic hash-based embedding provider."""

    def __init__(self, dimensions: int = 256, model: str = MOCK_MODEL):
        if dimensions < 1:
            raise ValueError("dimensions must be >= 1")
        self._dimensions = dimensions
        self._model = model
        self.calls = 0

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> list[float]:
        self.calls += 1
        return self._vectorize(text)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        return [self._vectorize(text) for text in texts]

    def _vectorize(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        for token in _TOKEN_PATTERN.findall(text.lower()):
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "big") % self._dimensions
            vector[bucket] += 1.0

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]
