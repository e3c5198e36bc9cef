"""Error taxonomy for workspace coordination.

Metadata errors always reach the caller; vector/blob errors are raised as
UpstreamStoreError and the coordinator decides whether they are fatal.
"""


class WorkspaceError(Exception):
    """Base class for all workspace errors."""


class CollisionError(WorkspaceError):
    """Raised when a generated workspace/document id already exists."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Record already exists: {key}")


class NotFoundError(WorkspaceError):
    """Raised when a required parent workspace or document is missing.

    Read and delete paths return None/False instead of raising.
    """

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class UpstreamStoreError(WorkspaceError):
    """Failure from the vector store, blob store or embedding provider."""

    def __init__(self, store: str, message: str):
        self.store = store
        super().__init__(f"[{store}] {message}")


class MetadataStoreError(WorkspaceError):
    """Failure from the metadata store backend. Always propagated."""


class WorkspaceValidationError(WorkspaceError, ValueError):
    """Raised for malformed creation/update input."""
