"""Embedding service interface."""

import math
from typing import Protocol


class EmbeddingServiceProtocol(Protocol):
    """Turns text into fixed-size vectors."""

    @property
    def model(self) -> str: ...

    @property
    def dimensions(self) -> int: ...

    async def embed(self, text: str) -> list[float]: ...

    async def embed_many(self, texts: list[str]) -> list[list[float]]: ...


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two equally sized vectors (0.0 if either is zero)."""
    if len(a) != len(b):
        raise ValueError("Embeddings must have the same dimensions")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)
