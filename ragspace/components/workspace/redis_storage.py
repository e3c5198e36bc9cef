"""Redis-backed metadata store.

Provides distributed storage for multi-instance deployments:
- Records are JSON strings under RedisKeyPrefix keys
- create-if-absent uses SET NX
- update() is an optimistic WATCH/MULTI transaction retried on conflict
- list_by_prefix() uses SCAN (prefix glob-escaped) + MGET

Unlike a cache, every Redis failure is raised as MetadataStoreError: the
metadata store is the system of record and callers must see its failures.
"""

import json
import logging
from collections.abc import AsyncIterator

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

from ragspace.components.workspace.errors import CollisionError, MetadataStoreError
from ragspace.components.workspace.storage import Mutator, Record

logger = logging.getLogger(__name__)

# Give up on a contended key after this many WATCH conflicts
MAX_UPDATE_RETRIES = 16

SCAN_BATCH_SIZE = 200

# Characters with a meaning in Redis glob patterns
_GLOB_SPECIAL = frozenset("\\*?[]^")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so ``value`` matches literally."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in value)


class RedisMetadataStore:
    """Redis-backed metadata store.

    Designed for multi-instance deployments where all pods share one Redis.
    """

    def __init__(self, client: aioredis.Redis):
        self._client = client

    @property
    def client(self) -> aioredis.Redis:
        return self._client

    async def get(self, key: str) -> Record | None:
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            raise MetadataStoreError(f"Redis get failed for {key}: {e}") from e
        if raw is None:
            return None
        return json.loads(raw)

    async def create_if_absent(self, key: str, record: Record) -> Record:
        """Store ``record`` only if ``key`` is absent. Raises CollisionError otherwise."""
        try:
            created = await self.client.set(key, json.dumps(record), nx=True)
        except RedisError as e:
            raise MetadataStoreError(f"Redis create failed for {key}: {e}") from e
        if not created:
            raise CollisionError(key)
        logger.debug(f"Created record: {key}")
        return record

    async def set(self, key: str, record: Record) -> None:
        try:
            await self.client.set(key, json.dumps(record))
        except RedisError as e:
            raise MetadataStoreError(f"Redis set failed for {key}: {e}") from e

    async def update(self, key: str, mutate: Mutator) -> Record | None:
        """Atomically read, mutate and write a record.

        Returns the written record, or None if the key does not exist.
        """
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                for _ in range(MAX_UPDATE_RETRIES):
                    try:
                        await pipe.watch(key)
                        raw = await pipe.get(key)
                        if raw is None:
                            return None
                        updated = mutate(json.loads(raw))
                        pipe.multi()
                        pipe.set(key, json.dumps(updated))
                        await pipe.execute()
                        return updated
                    except WatchError:
                        logger.debug(f"Concurrent write on {key}, retrying update")
                        continue
        except RedisError as e:
            raise MetadataStoreError(f"Redis update failed for {key}: {e}") from e

        raise MetadataStoreError(f"Update of {key} abandoned after {MAX_UPDATE_RETRIES} conflicts")

    async def delete(self, *keys: str) -> int:
        """Delete keys in one DEL command. Returns how many existed."""
        if not keys:
            return 0
        try:
            deleted = await self.client.delete(*keys)
        except RedisError as e:
            raise MetadataStoreError(f"Redis delete failed for {keys[0]}: {e}") from e
        logger.debug(f"Deleted {deleted} record(s), first key: {keys[0]}")
        return deleted

    async def list_by_prefix(self, prefix: str) -> AsyncIterator[Record]:
        """Yield records whose key starts with ``prefix``, in key order."""
        pattern = f"{escape_glob(prefix)}*"
        try:
            keys = sorted(
                {
                    key
                    async for key in self.client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE)
                    if key.startswith(prefix)
                }
            )
        except RedisError as e:
            raise MetadataStoreError(f"Redis scan failed for {prefix}: {e}") from e

        for start in range(0, len(keys), SCAN_BATCH_SIZE):
            batch = keys[start : start + SCAN_BATCH_SIZE]
            try:
                values = await self.client.mget(batch)
            except RedisError as e:
                raise MetadataStoreError(f"Redis mget failed for {prefix}: {e}") from e
            for raw in values:
                # Deleted between SCAN and MGET
                if raw is not None:
                    yield json.loads(raw)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("RedisMetadataStore closed")
