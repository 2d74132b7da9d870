"""Domain models."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from filtercache.exceptions import InvalidRuntimeFiltersError

MIME_TYPES = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def mime_type_for(format: str) -> str:
    """MIME type for a Pillow/extension format name."""
    fmt = format.lower()
    return MIME_TYPES.get(fmt, f"image/{fmt}")


def validate_runtime_filters(filters: Any) -> Mapping[str, Mapping[str, Any]]:
    """
    Check that runtime filters map loader names to option mappings.

    Returns:
        The filters, or an empty mapping for None

    Raises:
        InvalidRuntimeFiltersError: Any other shape
    """
    if filters is None:
        return {}
    if not isinstance(filters, Mapping):
        raise InvalidRuntimeFiltersError(
            f"Runtime filters must be a mapping, got {type(filters).__name__}"
        )
    for name, options in filters.items():
        if not isinstance(name, str) or not isinstance(options, Mapping):
            raise InvalidRuntimeFiltersError(
                f'Runtime filter "{name}" must map a loader name to an options mapping'
            )
    return filters


@dataclass(frozen=True)
class Binary:
    """Image payload with its format metadata."""

    content: bytes
    mime_type: str
    format: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)
