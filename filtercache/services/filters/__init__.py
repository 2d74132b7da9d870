"""Filter sets and the Pillow transformer."""

from filtercache.services.filters.configuration import BUILTIN_FILTER_SETS, FilterConfiguration
from filtercache.services.filters.manager import FilterManager, merge_filters

__all__ = [
    "BUILTIN_FILTER_SETS",
    "FilterConfiguration",
    "FilterManager",
    "merge_filters",
]
