"""Blob stores for uploaded document files.

- base.py: BlobStoreProtocol
- memory.py: in-memory store (local dev, tests)
- filesystem.py: local directory with atomic writes
- s3.py: S3-compatible object storage via boto3
"""

from ragspace.components.blobstore.base import BlobStoreProtocol
from ragspace.components.blobstore.filesystem import FilesystemBlobStore
from ragspace.components.blobstore.memory import InMemoryBlobStore
from ragspace.components.blobstore.s3 import S3BlobStore, create_s3_client

__all__ = [
    "BlobStoreProtocol",
    "FilesystemBlobStore",
    "InMemoryBlobStore",
    "S3BlobStore",
    "create_s3_client",
]
