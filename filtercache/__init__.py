"""filtercache

On-demand cache of filtered images.

Primary entrypoints:
 - services/filter_service.py (cache-aside orchestration)
 - dependencies.py (wiring from settings)
 - run.py (command line runner)
"""

from filtercache.exceptions import (
    AssetNotFoundError,
    CacheBackendError,
    FilterCacheError,
    FilterNotFoundError,
)
from filtercache.models import Binary
from filtercache.services.filter_service import FilterService

__all__ = [
    "AssetNotFoundError",
    "Binary",
    "CacheBackendError",
    "FilterCacheError",
    "FilterNotFoundError",
    "FilterService",
]
