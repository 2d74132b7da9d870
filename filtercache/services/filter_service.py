"""Cache-aside orchestration of filtered images.

Looks an artifact up in the cache store and, on a miss, loads the source
image, applies the filter set, stores the result and resolves its URL.
When WebP generation is enabled a ``<path>.webp`` variant is produced
alongside every primary artifact.
"""

from filtercache.exceptions import FilterNotFoundError
from filtercache.logging_setup import NullLogger
from filtercache.models import Binary
from filtercache.services.protocols import (
    CacheStore,
    DataSource,
    DiagnosticLogger,
    RuntimeFilters,
    Transformer,
)

WEBP_SUFFIX = ".webp"


class FilterService:
    """
    Returns URLs of filtered images, computing them on first request.

    Features:
    - Cache hits never touch the data source or the transformer
    - Runtime filter overrides cached under a signed runtime path
    - Eager WebP variant generation
    - Cache invalidation
    """

    def __init__(
        self,
        data_manager: DataSource,
        filter_manager: Transformer,
        cache_manager: CacheStore,
        webp_generate: bool = False,
        webp_quality: int = 100,
        logger: DiagnosticLogger | None = None,
    ):
        if not 0 <= webp_quality <= 100:
            raise ValueError(f"webp_quality must be between 0 and 100, got {webp_quality}")

        self._data_manager = data_manager
        self._filter_manager = filter_manager
        self._cache_manager = cache_manager
        self._webp_generate = webp_generate
        self._webp_quality = webp_quality
        self._logger = logger or NullLogger()

    def invalidate(self, path: str, filter: str) -> None:
        """Remove the cached artifact for (path, filter), if any."""
        if not self._cache_manager.is_stored(path, filter):
            return

        self._cache_manager.remove(path, filter)

    def resolve_url(
        self,
        path: str,
        filter: str,
        resolver: str | None = None,
        webp: bool = False,
    ) -> str:
        """
        Get the URL of a filtered image, creating it on a cache miss.

        Args:
            path: Source image path
            filter: Filter set name
            resolver: Cache resolver name (None = default resolver)
            webp: Return the WebP variant's URL when generation is enabled

        Returns:
            URL of the cached image
        """
        if self._cache_manager.is_stored(path, filter, resolver):
            return self._cache_manager.resolve(path, filter, resolver)

        filtered_binary = self._create_filtered_binary(path, filter)
        self._cache_manager.store(filtered_binary, path, filter, resolver)

        if self._webp_generate:
            webp_binary = self._create_filtered_webp_binary(path, filter)
            self._cache_manager.store(webp_binary, path + WEBP_SUFFIX, filter, resolver)

            if webp:
                return self._cache_manager.resolve(path + WEBP_SUFFIX, filter, resolver)

        return self._cache_manager.resolve(path, filter, resolver)

    def resolve_url_with_runtime_filters(
        self,
        path: str,
        filter: str,
        runtime_filters: RuntimeFilters | None = None,
        resolver: str | None = None,
        webp: bool = False,
    ) -> str:
        """
        Get the URL of an image filtered with per-request overrides.

        The artifact is cached under the runtime path derived from
        ``runtime_filters``; the source image is still loaded by ``path``.
        """
        runtime_filters = runtime_filters or {}
        runtime_path = self._cache_manager.get_runtime_path(path, runtime_filters)

        if self._cache_manager.is_stored(runtime_path, filter, resolver):
            return self._cache_manager.resolve(runtime_path, filter, resolver)

        filtered_binary = self._create_filtered_binary(path, filter, runtime_filters)
        self._cache_manager.store(filtered_binary, runtime_path, filter, resolver)

        if self._webp_generate:
            webp_binary = self._create_filtered_webp_binary(path, filter, runtime_filters)
            self._cache_manager.store(
                webp_binary, runtime_path + WEBP_SUFFIX, filter, resolver
            )

            if webp:
                return self._cache_manager.resolve(
                    runtime_path + WEBP_SUFFIX, filter, resolver
                )

        return self._cache_manager.resolve(runtime_path, filter, resolver)

    def _create_filtered_binary(
        self,
        path: str,
        filter: str,
        runtime_filters: RuntimeFilters | None = None,
    ) -> Binary:
        return self._apply(path, filter, {"filters": runtime_filters or {}})

    def _create_filtered_webp_binary(
        self,
        path: str,
        filter: str,
        runtime_filters: RuntimeFilters | None = None,
    ) -> Binary:
        return self._apply(
            path,
            filter,
            {
                "quality": self._webp_quality,
                "format": "webp",
                "filters": runtime_filters or {},
            },
        )

    def _apply(self, path: str, filter: str, runtime_config: dict) -> Binary:
        binary = self._data_manager.find(filter, path)

        try:
            return self._filter_manager.apply_filter(binary, filter, runtime_config)
        except FilterNotFoundError as e:
            self._logger.debug(
                f'Could not locate filter "{filter}" for path "{path}". Message was "{e}"'
            )
            raise
