"""Registry of named filter sets.

A filter set is a mapping with these keys (all optional):

- ``filters``: ordered mapping of filter loader name -> options
- ``format``: output format (defaults to the source format)
- ``quality``: output quality for lossy formats
- ``data_loader``: name of the loader used to read source images
"""

import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from filtercache.exceptions import FilterNotFoundError

logger = logging.getLogger(__name__)

FilterSet = dict[str, Any]


BUILTIN_FILTER_SETS: dict[str, FilterSet] = {
    "thumbnail": {
        "quality": 75,
        "filters": {
            "strip": {},
            "thumbnail": {"size": [150, 150], "mode": "outbound"},
        },
    },
    "small": {
        "quality": 85,
        "filters": {
            "thumbnail": {"size": [480, 480], "mode": "inset"},
        },
    },
    "grayscale": {
        "filters": {
            "grayscale": {},
        },
    },
}


class FilterConfiguration:
    """Holds the configured filter sets by name."""

    def __init__(self, filter_sets: dict[str, FilterSet] | None = None):
        self._filter_sets: dict[str, FilterSet] = {}
        for name, filter_set in (filter_sets or {}).items():
            self.set(name, filter_set)

    @classmethod
    def from_file(cls, path: str | Path) -> "FilterConfiguration":
        """
        Load filter sets from a JSON object of name -> filter set.

        Raises:
            ValueError: The file does not hold valid filter sets
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Filter sets file {path} must contain a JSON object")

        logger.info(f"Loaded {len(data)} filter sets from {path}")
        return cls(data)

    @classmethod
    def builtin(cls) -> "FilterConfiguration":
        return cls(BUILTIN_FILTER_SETS)

    def set(self, name: str, filter_set: FilterSet) -> None:
        """
        Add or replace a filter set.

        Raises:
            ValueError: The filter set is not a mapping, or its ``filters``
                do not map loader names to option mappings
        """
        if not isinstance(filter_set, Mapping):
            raise ValueError(f'Filter set "{name}" must be a mapping')

        filter_set = copy.deepcopy(dict(filter_set))
        filters = filter_set.setdefault("filters", {})
        if not isinstance(filters, Mapping) or not all(
            isinstance(options, Mapping) for options in filters.values()
        ):
            raise ValueError(
                f'Filter set "{name}": "filters" must map loader names to options'
            )
        self._filter_sets[name] = filter_set

    def find(self, name: str) -> FilterSet | None:
        """Get a copy of a filter set, or None when it is not configured."""
        if name not in self._filter_sets:
            return None
        return copy.deepcopy(self._filter_sets[name])

    def get(self, name: str) -> FilterSet:
        """
        Get a copy of a filter set.

        Raises:
            FilterNotFoundError: No filter set with this name
        """
        filter_set = self.find(name)
        if filter_set is None:
            raise FilterNotFoundError(name)
        return filter_set

    def all(self) -> dict[str, FilterSet]:
        return copy.deepcopy(self._filter_sets)

    def names(self) -> list[str]:
        return list(self._filter_sets.keys())
