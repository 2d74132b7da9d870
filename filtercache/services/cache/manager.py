"""Dispatches cache operations to named resolvers."""

import logging
from collections.abc import Mapping
from typing import Any

from filtercache.exceptions import ResolverNotFoundError
from filtercache.models import Binary
from filtercache.services.cache.resolvers import Resolver
from filtercache.services.cache.signer import Signer

logger = logging.getLogger(__name__)

RUNTIME_PATH_PREFIX = "rc"


class CacheManager:
    """
    Cache store over a set of named resolvers.

    ``resolver=None`` selects the default resolver.
    """

    def __init__(self, signer: Signer, default_resolver: str = "default"):
        self._signer = signer
        self._default_resolver = default_resolver
        self._resolvers: dict[str, Resolver] = {}

    def add_resolver(self, name: str, resolver: Resolver) -> None:
        self._resolvers[name] = resolver
        logger.debug(f"Registered cache resolver: {name}")

    def get_resolver(self, name: str | None = None) -> Resolver:
        name = name or self._default_resolver
        if name not in self._resolvers:
            raise ResolverNotFoundError(name)
        return self._resolvers[name]

    def resolver_names(self) -> list[str]:
        return list(self._resolvers.keys())

    def get_runtime_path(
        self,
        path: str,
        runtime_filters: Mapping[str, Mapping[str, Any]],
    ) -> str:
        """Path under which an image filtered with ``runtime_filters`` is cached."""
        signature = self._signer.sign(path, runtime_filters)
        return f"{RUNTIME_PATH_PREFIX}/{signature}/{path.lstrip('/')}"

    def is_stored(self, path: str, filter: str, resolver: str | None = None) -> bool:
        return self.get_resolver(resolver).is_stored(path, filter)

    def resolve(self, path: str, filter: str, resolver: str | None = None) -> str:
        return self.get_resolver(resolver).resolve(path, filter)

    def store(
        self,
        binary: Binary,
        path: str,
        filter: str,
        resolver: str | None = None,
    ) -> None:
        self.get_resolver(resolver).store(binary, path, filter)

    def remove(self, path: str, filter: str) -> None:
        """Remove the image from every resolver; absent entries are ignored."""
        for name, resolver in self._resolvers.items():
            resolver.remove(path, filter)
            logger.debug(f"Removed {filter}/{path} from resolver {name}")
