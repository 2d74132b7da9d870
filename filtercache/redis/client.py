"""Redis client with connection pooling."""

import logging

import redis
from redis import ConnectionPool, Redis

from filtercache.config import Settings

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Redis client backing the "redis" cache resolver.

    Features:
    - Lazy initialization
    - Connection pooling
    """

    def __init__(self, settings: Settings) -> None:
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None
        self._initialized = False
        self._settings = settings

    def connect(self) -> None:
        """Initialize connection pool."""
        if self._initialized:
            return

        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis_url,
                socket_timeout=self._settings.redis_socket_timeout,
                socket_connect_timeout=self._settings.redis_socket_timeout,
            )
            self._client = Redis(connection_pool=self._pool)

            # Verify connection
            self._client.ping()
            self._initialized = True
            logger.info("Redis connection established")

        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def disconnect(self) -> None:
        """Close connection pool."""
        if self._pool:
            self._pool.disconnect()
            self._initialized = False
            logger.info("Redis connection closed")

    @property
    def client(self) -> Redis:
        """Get Redis client instance."""
        if not self._client or not self._initialized:
            raise RuntimeError("Redis client not initialized. Call connect() first.")
        return self._client
