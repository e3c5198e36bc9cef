"""In-memory vector store for local development and tests.

Brute-force cosine similarity over all rows of a table. Data is lost on restart.
"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ragspace.components.embeddings.base import EmbeddingServiceProtocol, cosine_similarity
from ragspace.components.workspace.errors import UpstreamStoreError
from ragspace.components.workspace.models import SearchResult

logger = logging.getLogger(__name__)


@dataclass
class _VectorRow:
    content: str
    vector: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


class InMemoryVectorStore:
    """Thread-safe in-memory vector store."""

    def __init__(self, embeddings: EmbeddingServiceProtocol):
        self._embeddings = embeddings
        self._lock = threading.RLock()
        self._tables: dict[str, dict[str, _VectorRow]] = {}

    async def create_table(self, name: str) -> None:
        """Create an empty table; existing tables are left untouched."""
        with self._lock:
            if name in self._tables:
                logger.debug(f"Table already exists: {name}")
                return
            self._tables[name] = {}
        logger.info(f"Table created: {name}")

    async def drop_table(self, name: str) -> None:
        with self._lock:
            self._tables.pop(name, None)
        logger.info(f"Dropped table: {name}")

    async def upsert_document(
        self,
        table: str,
        document_id: str,
        content: str,
        metadata: dict[str, Any],
    ) -> None:
        self._require_table(table)
        vector = await self._embeddings.embed(content)
        with self._lock:
            rows = self._tables.get(table)
            if rows is None:
                raise UpstreamStoreError("vector", f"Table not found: {table}")
            rows[document_id] = _VectorRow(content=content, vector=vector, metadata=copy.deepcopy(metadata))

    async def delete_document(self, table: str, document_id: str) -> None:
        self._require_table(table)
        with self._lock:
            self._tables[table].pop(document_id, None)

    async def search(
        self,
        table: str,
        query: str,
        limit: int = 10,
        threshold: float | None = None,
    ) -> list[SearchResult]:
        self._require_table(table)
        query_vector = await self._embeddings.embed(query)
        with self._lock:
            rows = list(self._tables[table].items())

        results = [
            SearchResult(
                id=document_id,
                content=row.content,
                metadata=copy.deepcopy(row.metadata),
                score=cosine_similarity(query_vector, row.vector),
            )
            for document_id, row in rows
        ]
        if threshold is not None:
            results = [r for r in results if r.score >= threshold]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    async def list_tables(self) -> list[str]:
        with self._lock:
            return sorted(self._tables)

    async def count_rows(self, table: str) -> int:
        with self._lock:
            self._require_table(table)
            return len(self._tables[table])

    def _require_table(self, table: str) -> None:
        with self._lock:
            if table not in self._tables:
                raise UpstreamStoreError("vector", f"Table not found: {table}")
