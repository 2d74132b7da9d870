"""Redis connectivity for the redis cache resolver."""

from filtercache.redis.client import RedisClient
from filtercache.redis.keys import RedisKeys

__all__ = ["RedisClient", "RedisKeys"]
