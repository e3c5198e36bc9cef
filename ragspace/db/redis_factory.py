"""Redis client factory for different deployment modes.

Creates asyncio Redis clients based on the deployment mode (FakeRedis for
development and tests, real Redis for production).
"""

import logging

import fakeredis
import redis.asyncio as aioredis

from ragspace.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def create_redis_client(config: Settings | None = None) -> aioredis.Redis:
    """Create an asyncio Redis client based on settings.

    Args:
        config: Settings to read from (defaults to the global settings)

    Returns:
        Redis client (either fakeredis or real redis), decoding responses to str
    """
    config = config or default_settings

    if config.redis_type == "in_memory":
        client = fakeredis.FakeAsyncRedis(decode_responses=True)
        logger.info("Using FakeRedis (in-memory)")
        return client

    redis_config = {
        "host": config.redis_host,
        "port": config.redis_port,
        "db": config.redis_index,
        "socket_connect_timeout": config.redis_socket_connect_timeout,
        "socket_timeout": config.redis_socket_timeout,
        "decode_responses": True,
    }
    if config.redis_password:
        redis_config["password"] = config.redis_password

    client = aioredis.Redis(**redis_config)
    logger.info(f"Using real Redis: {config.redis_host}:{config.redis_port}, db={config.redis_index}")
    return client
