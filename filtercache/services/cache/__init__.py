"""Cache resolvers and the cache manager."""

from filtercache.services.cache.manager import CacheManager
from filtercache.services.cache.resolvers import RedisResolver, Resolver, WebPathResolver
from filtercache.services.cache.signer import Signer

__all__ = [
    "CacheManager",
    "RedisResolver",
    "Resolver",
    "Signer",
    "WebPathResolver",
]
