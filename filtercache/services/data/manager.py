"""Selects the loader for a filter set and loads source images."""

from typing import Protocol

from filtercache.exceptions import FilterCacheError
from filtercache.models import Binary
from filtercache.services.filters.configuration import FilterConfiguration


class Loader(Protocol):
    def find(self, path: str) -> Binary: ...


class DataManager:
    """
    Loads source images for filter sets.

    A filter set may name its loader with the ``data_loader`` key; every
    other filter set, including unknown names, uses the default loader.
    """

    def __init__(
        self,
        filter_config: FilterConfiguration,
        default_loader: str = "default",
    ):
        self._filter_config = filter_config
        self._default_loader = default_loader
        self._loaders: dict[str, Loader] = {}

    def add_loader(self, name: str, loader: Loader) -> None:
        self._loaders[name] = loader

    def get_loader(self, filter: str) -> Loader:
        filter_set = self._filter_config.find(filter) or {}
        name = filter_set.get("data_loader") or self._default_loader

        if name not in self._loaders:
            raise FilterCacheError(f'Could not find data loader "{name}" for "{filter}" filter type')

        return self._loaders[name]

    def find(self, filter: str, path: str) -> Binary:
        """Load the source image at ``path`` for ``filter``."""
        return self.get_loader(filter).find(path)
