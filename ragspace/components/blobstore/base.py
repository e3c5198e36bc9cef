"""Blob store interface.

Keys are opaque, slash-separated strings (a document's ``storageKey``).
``delete`` of a missing key is not an error.
"""

from typing import Protocol


class BlobStoreProtocol(Protocol):
    async def put(self, key: str, data: bytes, content_type: str | None = None) -> int: ...

    async def get(self, key: str) -> bytes | None: ...

    async def delete(self, key: str) -> None: ...

    async def exists(self, key: str) -> bool: ...
