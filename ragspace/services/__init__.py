from .batch import BatchResult, run_best_effort
from .coordinator import WorkspaceCoordinator
from .provider import close_coordinator, create_coordinator, get_coordinator, reset_coordinator

__all__ = [
    "BatchResult",
    "run_best_effort",
    "WorkspaceCoordinator",
    "create_coordinator",
    "get_coordinator",
    "close_coordinator",
    "reset_coordinator",
]
