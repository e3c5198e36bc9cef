"""Vector store interface.

Each workspace owns one table named ``workspace_{workspace_id}``. Documents
are embedded through the store's embedding service on upsert, so the
coordinator never calls the embedding provider directly.
"""

from typing import Any, Protocol

from ragspace.components.workspace.models import SearchResult

WORKSPACE_TABLE_PREFIX = "workspace_"


def workspace_table_name(workspace_id: str) -> str:
    """Vector table name of a workspace."""
    return f"{WORKSPACE_TABLE_PREFIX}{workspace_id}"


class VectorStoreProtocol(Protocol):
    """Per-workspace table lifecycle plus per-document upsert/delete/search."""

    async def create_table(self, name: str) -> None: ...

    async def drop_table(self, name: str) -> None: ...

    async def upsert_document(
        self,
        table: str,
        document_id: str,
        content: str,
        metadata: dict[str, Any],
    ) -> None: ...

    async def delete_document(self, table: str, document_id: str) -> None: ...

    async def search(
        self,
        table: str,
        query: str,
        limit: int = 10,
        threshold: float | None = None,
    ) -> list[SearchResult]: ...

    async def list_tables(self) -> list[str]: ...

    async def count_rows(self, table: str) -> int: ...
