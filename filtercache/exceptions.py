"""Error types raised by the cache orchestrator and its collaborators."""


class FilterCacheError(Exception):
    """Base error."""

    code = "FILTERCACHE_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class AssetNotFoundError(FilterCacheError):
    """Raised by a data loader when the source asset does not exist."""

    code = "ASSET_NOT_FOUND"

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(
            message or f'Source image not resolvable "{path}"',
            details={"path": path},
        )


class FilterNotFoundError(FilterCacheError):
    """Raised when a filter set (or a filter loader) is not configured."""

    code = "FILTER_NOT_FOUND"

    def __init__(self, filter: str, path: str | None = None, message: str | None = None):
        self.filter = filter
        self.path = path
        super().__init__(
            message or f'Could not find configuration for a filter: {filter}',
            details={"filter": filter, "path": path},
        )


class InvalidRuntimeFiltersError(FilterCacheError):
    """Runtime filters must map loader names to option mappings."""

    code = "INVALID_RUNTIME_FILTERS"


class ImageProcessingError(FilterCacheError):
    """Pillow failed to decode or encode an image."""

    code = "IMAGE_PROCESSING_ERROR"


class CacheBackendError(FilterCacheError):
    """A cache resolver failed to talk to its storage."""

    code = "CACHE_BACKEND_ERROR"


class ResolverNotFoundError(CacheBackendError):
    """No resolver is registered under the requested name."""

    code = "RESOLVER_NOT_FOUND"

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f'Could not find resolver "{name}"',
            details={"resolver": name},
        )
