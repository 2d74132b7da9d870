"""Image filtering and caching services."""

from filtercache.services.filter_service import FilterService

__all__ = ["FilterService"]
