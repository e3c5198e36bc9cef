"""Filesystem blob store.

Each key maps to a file under ``root``. Writes are atomic (temp file + rename
in the target directory), so a concurrent reader never sees a partial blob.
Keys that would resolve outside ``root`` are rejected.

Blocking file I/O runs in a worker thread via ``asyncio.to_thread``.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from ragspace.components.workspace.errors import UpstreamStoreError

logger = logging.getLogger(__name__)


class FilesystemBlobStore:
    def __init__(self, root: Path | str):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _path_for(self, key: str) -> Path:
        if not key or key.startswith("/"):
            raise UpstreamStoreError("blob", f"Invalid blob key: {key!r}")
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise UpstreamStoreError("blob", f"Blob key escapes storage root: {key!r}")
        return path

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> int:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(self._write_atomic, path, data)
        except OSError as e:
            raise UpstreamStoreError("blob", f"Failed to write {key}: {e}") from e

    def _write_atomic(self, path: Path, data: bytes) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path_str = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=f".{path.name}.")
        tmp_path = Path(tmp_path_str)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # Atomic on POSIX within one filesystem
            tmp_path.replace(path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        size = path.stat().st_size
        logger.debug(f"Wrote blob atomically: {path} ({size} bytes)")
        return size

    async def get(self, key: str) -> bytes | None:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise UpstreamStoreError("blob", f"Failed to read {key}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise UpstreamStoreError("blob", f"Failed to delete {key}: {e}") from e
        logger.debug(f"Deleted blob: {key}")

    async def exists(self, key: str) -> bool:
        path = self._path_for(key)
        return await asyncio.to_thread(path.is_file)
