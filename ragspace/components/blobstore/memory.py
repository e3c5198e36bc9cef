"""In-memory blob store for local development and tests."""

import logging
import threading

logger = logging.getLogger(__name__)


class InMemoryBlobStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._blobs: dict[str, bytes] = {}

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> int:
        with self._lock:
            self._blobs[key] = bytes(data)
        logger.debug(f"Stored blob {key} ({len(data)} bytes)")
        return len(data)

    async def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._blobs.get(key)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._blobs.pop(key, None)

    async def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._blobs

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._blobs)
