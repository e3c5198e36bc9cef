"""Metadata store interface and the in-memory implementation.

Records are plain JSON-compatible dicts addressed by string keys. The store
provides:
- create-if-absent (the only cross-call concurrency guard)
- atomic read-modify-write (used for counters and status flags)
- prefix listing (a workspace's documents share a key prefix)
"""

import copy
import threading
from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol

from ragspace.components.workspace.errors import CollisionError

Record = dict[str, Any]
Mutator = Callable[[Record], Record]


class MetadataStoreProtocol(Protocol):
    """Protocol defining the metadata key-value store interface."""

    async def get(self, key: str) -> Record | None: ...

    async def create_if_absent(self, key: str, record: Record) -> Record: ...

    async def set(self, key: str, record: Record) -> None: ...

    async def update(self, key: str, mutate: Mutator) -> Record | None: ...

    async def delete(self, *keys: str) -> int: ...

    def list_by_prefix(self, prefix: str) -> AsyncIterator[Record]: ...

    async def close(self) -> None: ...


class InMemoryMetadataStore:
    """Thread-safe in-memory metadata store.

    Uses a reentrant lock (RLock) so every operation, including update(),
    is atomic with respect to other threads and coroutines. Data is lost on
    restart; not safe for multi-instance deployments.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._records: dict[str, Record] = {}

    async def get(self, key: str) -> Record | None:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    async def create_if_absent(self, key: str, record: Record) -> Record:
        """Store ``record`` under ``key``. Raises CollisionError if the key exists."""
        with self._lock:
            if key in self._records:
                raise CollisionError(key)
            self._records[key] = copy.deepcopy(record)
            return copy.deepcopy(record)

    async def set(self, key: str, record: Record) -> None:
        with self._lock:
            self._records[key] = copy.deepcopy(record)

    async def update(self, key: str, mutate: Mutator) -> Record | None:
        """Apply ``mutate`` to the stored record atomically. None if the key is absent."""
        with self._lock:
            current = self._records.get(key)
            if current is None:
                return None
            updated = mutate(copy.deepcopy(current))
            self._records[key] = copy.deepcopy(updated)
            return updated

    async def delete(self, *keys: str) -> int:
        """Delete keys. Returns the number of keys that existed."""
        with self._lock:
            deleted = 0
            for key in keys:
                if self._records.pop(key, None) is not None:
                    deleted += 1
            return deleted

    async def list_by_prefix(self, prefix: str) -> AsyncIterator[Record]:
        """Yield records whose key starts with ``prefix``, in key order."""
        with self._lock:
            snapshot = [
                copy.deepcopy(self._records[key])
                for key in sorted(self._records)
                if key.startswith(prefix)
            ]
        for record in snapshot:
            yield record

    async def close(self) -> None:
        pass

    def clear_all(self) -> None:
        """Clear all data (useful for testing)."""
        with self._lock:
            self._records.clear()
