"""
Redis Key Prefix Strategy (Single DB + Key Prefix Pattern)

All metadata lives in db=0; entity types are separated by key prefix, which
keeps the layout Redis Cluster compatible and lets one SCAN enumerate a
workspace's documents.

Usage:
    from ragspace.db.redis_db import RedisKeyPrefix

    key = RedisKeyPrefix.workspace_key("3f9a1c0b")
    # -> "ragspace:workspace:3f9a1c0b"

    prefix = RedisKeyPrefix.document_prefix("3f9a1c0b")
    # -> "ragspace:document:3f9a1c0b:"
"""

from enum import Enum


class RedisKeyPrefix(str, Enum):
    """Key prefixes for metadata records.

    Key format:
        {prefix}:{entity_type}:{entity_id}
        {prefix}:{entity_type}:{parent_id}:{entity_id}

    Examples:
        ragspace:workspace:3f9a1c0b
        ragspace:document:3f9a1c0b:a1b2c3d4
    """

    WORKSPACE = "ragspace:workspace"  # Workspace record (String/JSON)
    DOCUMENT = "ragspace:document"  # WorkspaceDocument record (String/JSON)

    # ==================== Helpers ====================

    @classmethod
    def workspace_key(cls, workspace_id: str) -> str:
        """Key of a workspace record."""
        return f"{cls.WORKSPACE.value}:{workspace_id}"

    @classmethod
    def workspace_prefix(cls) -> str:
        """Prefix matching every workspace record."""
        return f"{cls.WORKSPACE.value}:"

    @classmethod
    def document_key(cls, workspace_id: str, document_id: str) -> str:
        """Key of a document record, nested under its workspace."""
        return f"{cls.DOCUMENT.value}:{workspace_id}:{document_id}"

    @classmethod
    def document_prefix(cls, workspace_id: str) -> str:
        """Prefix matching every document of one workspace."""
        return f"{cls.DOCUMENT.value}:{workspace_id}:"
