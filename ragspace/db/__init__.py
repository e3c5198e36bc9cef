"""Database module for ragspace.

Components:
- redis_db: key prefix layout for metadata records
- redis_factory: asyncio Redis client construction (FakeRedis or real Redis)
"""

from ragspace.db.redis_db import RedisKeyPrefix
from ragspace.db.redis_factory import create_redis_client

__all__ = [
    "RedisKeyPrefix",
    "create_redis_client",
]
