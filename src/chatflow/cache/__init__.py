"""Cache module for Redis-based caching.

Provides the async Redis client and the chat WebSocket connection registry.
"""

from .connection_cache import ChatConnectionCache
from .redis_client import RedisClient, close_redis, get_redis, init_redis

__all__ = [
    "RedisClient",
    "ChatConnectionCache",
    "get_redis",
    "init_redis",
    "close_redis",
]
