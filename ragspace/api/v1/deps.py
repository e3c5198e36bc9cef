"""Shared API dependencies."""

from ragspace.services.coordinator import WorkspaceCoordinator
from ragspace.services.provider import get_coordinator as _get_coordinator


def get_coordinator() -> WorkspaceCoordinator:
    """FastAPI dependency returning the shared coordinator (override in tests)."""
    return _get_coordinator()
