"""Vector stores.

- base.py: VectorStoreProtocol and workspace_table_name
- memory.py: in-memory brute-force store (local dev, tests)
- lancedb_store.py: LanceDB local/cloud store (production)
"""

from ragspace.components.vectorstore.base import VectorStoreProtocol, workspace_table_name
from ragspace.components.vectorstore.lancedb_store import LanceDBVectorStore
from ragspace.components.vectorstore.memory import InMemoryVectorStore

__all__ = [
    "VectorStoreProtocol",
    "workspace_table_name",
    "InMemoryVectorStore",
    "LanceDBVectorStore",
]
