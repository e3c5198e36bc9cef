"""LanceDB vector store.

Supports local LanceDB directories and LanceDB Cloud (URIs starting with
``db://``, which require an API key). One row per document, modelled by
document_row_model() (a LanceModel sized to the embedding dimensions).

All LanceDB/Arrow failures are raised as UpstreamStoreError("vector", ...).
"""

import json
import logging
from functools import lru_cache
from typing import Any

import lancedb
from lancedb.pydantic import LanceModel, Vector

from ragspace.components.embeddings.base import EmbeddingServiceProtocol
from ragspace.components.workspace.errors import UpstreamStoreError
from ragspace.components.workspace.models import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


@lru_cache(maxsize=None)
def document_row_model(dimensions: int) -> type[LanceModel]:
    """Row schema for a workspace table with ``dimensions``-wide vectors."""

    class DocumentRow(LanceModel):
        id: str
        content: str
        vector: Vector(dimensions)  # type: ignore[valid-type]
        metadata: str  # JSON object as string

    return DocumentRow


def _quote(value: str) -> str:
    """Quote a string literal for a LanceDB filter expression."""
    return "'" + value.replace("'", "''") + "'"


class LanceDBVectorStore:
    """Async LanceDB-backed vector store."""

    def __init__(
        self,
        uri: str,
        embeddings: EmbeddingServiceProtocol,
        api_key: str | None = None,
        region: str = DEFAULT_REGION,
    ):
        if uri.startswith("db://") and not api_key:
            raise ValueError("API key required for LanceDB Cloud")

        self._uri = uri
        self._api_key = api_key
        self._region = region
        self._embeddings = embeddings
        self._connection: lancedb.AsyncConnection | None = None

    @property
    def is_cloud(self) -> bool:
        return self._uri.startswith("db://")

    async def _connect(self) -> lancedb.AsyncConnection:
        """Lazy connection, opened on first use."""
        if self._connection is None:
            try:
                if self.is_cloud:
                    self._connection = await lancedb.connect_async(
                        self._uri, api_key=self._api_key, region=self._region
                    )
                else:
                    self._connection = await lancedb.connect_async(self._uri)
            except Exception as e:
                raise UpstreamStoreError("vector", f"Cannot connect to LanceDB at {self._uri}: {e}") from e
            logger.info(f"LanceDB connected: {self._uri}")
        return self._connection

    @property
    def row_model(self) -> type[LanceModel]:
        return document_row_model(self._embeddings.dimensions)

    async def _open(self, table: str):
        db = await self._connect()
        try:
            return await db.open_table(table)
        except Exception as e:
            raise UpstreamStoreError("vector", f"Cannot open table {table}: {e}") from e

    async def create_table(self, name: str) -> None:
        """Create an empty table; an existing table is left as is."""
        db = await self._connect()
        try:
            await db.create_table(name, schema=self.row_model.to_arrow_schema(), exist_ok=True)
        except Exception as e:
            raise UpstreamStoreError("vector", f"Failed to create table {name}: {e}") from e
        logger.info(f"Table ready: {name}")

    async def drop_table(self, name: str) -> None:
        db = await self._connect()
        logger.debug(f"Attempting to drop table: {name}")
        try:
            await db.drop_table(name, ignore_missing=True)
        except Exception as e:
            raise UpstreamStoreError("vector", f"Failed to drop table {name}: {e}") from e
        logger.info(f"Dropped table: {name}")

    async def upsert_document(
        self,
        table: str,
        document_id: str,
        content: str,
        metadata: dict[str, Any],
    ) -> None:
        """Embed ``content`` and replace any existing row for ``document_id``."""
        handle = await self._open(table)
        vector = await self._embeddings.embed(content)
        try:
            row = self.row_model(
                id=document_id,
                content=content,
                vector=vector,
                metadata=json.dumps(metadata, default=str),
            )
            await handle.delete(f"id = {_quote(document_id)}")
            await handle.add([row.model_dump()])
        except Exception as e:
            raise UpstreamStoreError("vector", f"Failed to upsert {document_id} into {table}: {e}") from e

    async def delete_document(self, table: str, document_id: str) -> None:
        handle = await self._open(table)
        try:
            await handle.delete(f"id = {_quote(document_id)}")
        except Exception as e:
            raise UpstreamStoreError("vector", f"Failed to delete {document_id} from {table}: {e}") from e

    async def search(
        self,
        table: str,
        query: str,
        limit: int = 10,
        threshold: float | None = None,
    ) -> list[SearchResult]:
        """Cosine-similarity search; score = 1 - cosine distance."""
        handle = await self._open(table)
        query_vector = await self._embeddings.embed(query)
        try:
            rows = await handle.query().nearest_to(query_vector).distance_type("cosine").limit(limit).to_list()
        except Exception as e:
            raise UpstreamStoreError("vector", f"Search failed on {table}: {e}") from e

        results = []
        for row in rows:
            score = 1 - row["_distance"]
            if threshold is not None and score < threshold:
                continue
            results.append(
                SearchResult(
                    id=row["id"],
                    content=row["content"],
                    metadata=json.loads(row["metadata"]) if row.get("metadata") else {},
                    score=score,
                )
            )
        return results

    async def list_tables(self) -> list[str]:
        db = await self._connect()
        try:
            return list(await db.table_names())
        except Exception as e:
            raise UpstreamStoreError("vector", f"Failed to list tables: {e}") from e

    async def count_rows(self, table: str) -> int:
        handle = await self._open(table)
        try:
            return await handle.count_rows()
        except Exception as e:
            raise UpstreamStoreError("vector", f"Failed to count rows in {table}: {e}") from e
