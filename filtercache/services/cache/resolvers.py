"""Cache resolvers: where filtered images are stored and how they are addressed."""

import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol
from urllib.parse import quote

import redis
from redis import Redis

from filtercache.exceptions import CacheBackendError
from filtercache.models import Binary
from filtercache.redis.keys import RedisKeys

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    def is_stored(self, path: str, filter: str) -> bool: ...

    def resolve(self, path: str, filter: str) -> str: ...

    def store(self, binary: Binary, path: str, filter: str) -> None: ...

    def remove(self, path: str, filter: str) -> None: ...


def _url(prefix: str, filter: str, path: str) -> str:
    return f"{prefix.rstrip('/')}/{quote(filter)}/{quote(path.lstrip('/'))}"


class WebPathResolver:
    """
    Stores images under ``cache_root/<filter>/<path>`` and resolves them to
    ``<url_prefix>/<filter>/<path>``, for a web server serving ``cache_root``.
    """

    def __init__(self, cache_root: str | Path, url_prefix: str = "/media/cache"):
        self._root = Path(cache_root).resolve()
        self._url_prefix = url_prefix

    def _file_path(self, path: str, filter: str) -> Path:
        target = (self._root / filter / path.lstrip("/")).resolve()
        if self._root not in target.parents:
            raise CacheBackendError(
                f'Cache path for "{path}" escapes the cache root',
                details={"path": path, "filter": filter},
            )
        return target

    def is_stored(self, path: str, filter: str) -> bool:
        return self._file_path(path, filter).is_file()

    def resolve(self, path: str, filter: str) -> str:
        return _url(self._url_prefix, filter, path)

    def store(self, binary: Binary, path: str, filter: str) -> None:
        """Write the image, replacing the target only once it is complete."""
        target = self._file_path(path, filter)
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(binary.content)
            # readable by the web server serving cache_root
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise CacheBackendError(f"Failed to write {target}: {e}") from e
        logger.debug(f"Stored {filter}/{path} ({binary.size_bytes / 1024:.1f}KB)")

    def remove(self, path: str, filter: str) -> None:
        target = self._file_path(path, filter)
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            raise CacheBackendError(f"Failed to remove {target}: {e}") from e


class RedisResolver:
    """
    Stores images in Redis hashes (content, mime type, format).

    Features:
    - Optional TTL-based expiration
    - Namespaced keys per filter
    """

    def __init__(
        self,
        client: Redis,
        url_prefix: str = "/media/redis",
        prefix: str = RedisKeys.PREFIX,
        ttl_seconds: int = 0,
    ):
        self._redis = client
        self._url_prefix = url_prefix
        self._prefix = prefix
        self._ttl = ttl_seconds

    def _key(self, path: str, filter: str) -> str:
        return RedisKeys.artifact(filter, path, self._prefix)

    def is_stored(self, path: str, filter: str) -> bool:
        try:
            return self._redis.exists(self._key(path, filter)) > 0
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis lookup failed: {e}") from e

    def resolve(self, path: str, filter: str) -> str:
        return _url(self._url_prefix, filter, path)

    def store(self, binary: Binary, path: str, filter: str) -> None:
        key = self._key(path, filter)
        try:
            with self._redis.pipeline(transaction=True) as pipe:
                pipe.hset(
                    key,
                    mapping={
                        "content": binary.content,
                        "mime_type": binary.mime_type,
                        "format": binary.format,
                    },
                )
                if self._ttl:
                    pipe.expire(key, self._ttl)
                pipe.execute()
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis cache write failed: {e}") from e
        logger.debug(f"Image cached: {key}")

    def remove(self, path: str, filter: str) -> None:
        try:
            self._redis.delete(self._key(path, filter))
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis cache delete failed: {e}") from e
