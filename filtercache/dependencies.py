"""Factories wiring the services from settings."""

import logging

import redis

from filtercache.config import Settings, get_settings
from filtercache.exceptions import CacheBackendError
from filtercache.redis.client import RedisClient
from filtercache.services.cache import CacheManager, RedisResolver, Signer, WebPathResolver
from filtercache.services.data import DataManager, FileSystemLoader
from filtercache.services.filter_service import FilterService
from filtercache.services.filters import FilterConfiguration, FilterManager

logger = logging.getLogger("filtercache")


def get_filter_configuration(settings: Settings) -> FilterConfiguration:
    """Filter sets from the configured file, or the built-in ones."""
    if settings.filter_sets_file:
        return FilterConfiguration.from_file(settings.filter_sets_file)
    return FilterConfiguration.builtin()


def get_redis_client(settings: Settings) -> RedisClient | None:
    """
    Connected Redis client when ``redis_url`` is configured, else None.

    The caller owns the client and closes it with ``disconnect()``.
    """
    if not settings.redis_url:
        return None

    redis_client = RedisClient(settings)
    try:
        redis_client.connect()
    except redis.RedisError as e:
        raise CacheBackendError(f"Redis unavailable: {e}") from e
    return redis_client


def get_data_manager(settings: Settings, filter_config: FilterConfiguration) -> DataManager:
    data_manager = DataManager(filter_config)
    data_manager.add_loader(
        "default",
        FileSystemLoader(settings.data_root, settings.allowed_image_formats),
    )
    return data_manager


def get_cache_manager(settings: Settings, redis_client: RedisClient | None = None) -> CacheManager:
    """
    Cache manager with the filesystem resolver under ``default`` and, when
    ``redis_url`` is configured, a Redis resolver under ``redis``.
    """
    cache_manager = CacheManager(Signer(settings.secret), settings.default_resolver)
    cache_manager.add_resolver(
        "default",
        WebPathResolver(settings.cache_root, settings.cache_url_prefix),
    )

    if settings.redis_url:
        if redis_client is None:
            redis_client = get_redis_client(settings)
        cache_manager.add_resolver(
            "redis",
            RedisResolver(
                redis_client.client,
                url_prefix=settings.redis_url_prefix,
                prefix=settings.redis_cache_prefix,
                ttl_seconds=settings.redis_ttl_seconds,
            ),
        )

    return cache_manager


def build_filter_service(
    settings: Settings | None = None,
    redis_client: RedisClient | None = None,
) -> FilterService:
    """Build a FilterService from settings (environment by default)."""
    settings = settings or get_settings()
    filter_config = get_filter_configuration(settings)

    return FilterService(
        data_manager=get_data_manager(settings, filter_config),
        filter_manager=FilterManager(filter_config),
        cache_manager=get_cache_manager(settings, redis_client),
        webp_generate=settings.webp_generate,
        webp_quality=settings.webp_quality,
        logger=logger,
    )
