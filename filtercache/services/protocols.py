"""Collaborator interfaces consumed by FilterService."""

from collections.abc import Mapping
from typing import Any, Protocol

from filtercache.models import Binary

RuntimeFilters = Mapping[str, Mapping[str, Any]]


class DataSource(Protocol):
    def find(self, filter: str, path: str) -> Binary:
        """Load the source image; raises AssetNotFoundError."""
        ...


class Transformer(Protocol):
    def apply_filter(
        self,
        binary: Binary,
        filter: str,
        runtime_config: Mapping[str, Any] | None = None,
    ) -> Binary:
        """Apply a named filter set; raises FilterNotFoundError."""
        ...


class CacheStore(Protocol):
    def is_stored(self, path: str, filter: str, resolver: str | None = None) -> bool: ...

    def resolve(self, path: str, filter: str, resolver: str | None = None) -> str: ...

    def store(
        self,
        binary: Binary,
        path: str,
        filter: str,
        resolver: str | None = None,
    ) -> None: ...

    def remove(self, path: str, filter: str) -> None: ...

    def get_runtime_path(self, path: str, runtime_filters: RuntimeFilters) -> str: ...


class DiagnosticLogger(Protocol):
    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
