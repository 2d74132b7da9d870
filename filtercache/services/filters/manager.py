"""Applies filter sets to image binaries."""

import logging
from collections.abc import Mapping
from io import BytesIO
from typing import Any

from PIL import Image, UnidentifiedImageError

from filtercache.exceptions import FilterNotFoundError, ImageProcessingError
from filtercache.models import Binary, mime_type_for, validate_runtime_filters
from filtercache.services.filters.configuration import FilterConfiguration
from filtercache.services.filters.loaders import BUILTIN_LOADERS, FilterLoader

logger = logging.getLogger(__name__)

# Pillow encoder names for the formats we write
PIL_FORMATS = {
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
}

LOSSY_FORMATS = {"jpeg", "jpg", "webp"}


def merge_filters(
    configured: Mapping[str, Mapping[str, Any]],
    runtime: Mapping[str, Mapping[str, Any]],
) -> dict[str, dict[str, Any]]:
    """
    Layer runtime filters over configured ones.

    Options of a loader present in both are merged key by key, keeping the
    configured position; loaders only present at runtime are appended in
    their given order.
    """
    merged = {name: dict(options) for name, options in configured.items()}
    for name, options in runtime.items():
        merged[name] = {**merged.get(name, {}), **options}
    return merged


class FilterManager:
    """
    Runs the filter loaders of a filter set over an image.

    Features:
    - Runtime filter overrides
    - Output format and quality overrides
    - Pluggable filter loaders
    """

    def __init__(
        self,
        filter_config: FilterConfiguration,
        loaders: Mapping[str, FilterLoader] | None = None,
    ):
        self._filter_config = filter_config
        self._loaders: dict[str, FilterLoader] = dict(
            BUILTIN_LOADERS if loaders is None else loaders
        )

    def add_loader(self, name: str, loader: FilterLoader) -> None:
        self._loaders[name] = loader
        logger.debug(f"Registered filter loader: {name}")

    def apply_filter(
        self,
        binary: Binary,
        filter: str,
        runtime_config: Mapping[str, Any] | None = None,
    ) -> Binary:
        """
        Apply the named filter set to ``binary``.

        Args:
            binary: Source image
            filter: Filter set name
            runtime_config: Optional overrides: ``filters`` (merged over the
                configured filters), ``format`` and ``quality``

        Returns:
            Filtered image

        Raises:
            FilterNotFoundError: Unknown filter set or filter loader
            InvalidRuntimeFiltersError: Malformed runtime filters
            ImageProcessingError: Image could not be decoded or encoded
        """
        runtime_config = runtime_config or {}
        config = self._filter_config.get(filter)

        filters = merge_filters(
            config["filters"],
            validate_runtime_filters(runtime_config.get("filters")),
        )
        output_format = (
            runtime_config.get("format") or config.get("format") or binary.format
        ).lower()
        quality = runtime_config.get("quality", config.get("quality"))

        for name in filters:
            if name not in self._loaders:
                raise FilterNotFoundError(
                    filter,
                    message=f'Could not find filter loader for "{name}" filter type',
                )

        try:
            with Image.open(BytesIO(binary.content)) as source:
                source.load()
                image = source
                for name, options in filters.items():
                    image = self._loaders[name](image, options)
                content = self._encode(image, output_format, quality)
        except UnidentifiedImageError as e:
            raise ImageProcessingError(f"Invalid or corrupted image: {e}") from e
        except (ValueError, TypeError, ZeroDivisionError, OSError) as e:
            raise ImageProcessingError(f'Filter set "{filter}" failed: {e}') from e

        logger.debug(
            f'Applied filter set "{filter}": {binary.size_bytes / 1024:.1f}KB '
            f"{binary.format} -> {len(content) / 1024:.1f}KB {output_format}"
        )

        return Binary(
            content=content,
            mime_type=mime_type_for(output_format),
            format=output_format,
        )

    def _encode(self, image: Image.Image, format: str, quality: int | None) -> bytes:
        if format not in PIL_FORMATS:
            raise ValueError(f"Unsupported output format: {format}")

        if format in ("jpeg", "jpg"):
            image = _flatten_alpha(image)

        save_kwargs: dict[str, Any] = {}
        if format in LOSSY_FORMATS and quality is not None:
            save_kwargs["quality"] = int(quality)
        if format in ("png", "jpeg", "jpg", "webp"):
            save_kwargs["optimize"] = True

        output = BytesIO()
        image.save(output, format=PIL_FORMATS[format], **save_kwargs)
        return output.getvalue()


def _flatten_alpha(image: Image.Image) -> Image.Image:
    """Composite transparent images onto white for formats without alpha."""
    if image.mode == "P":
        image = image.convert("RGBA")
    if image.mode == "LA":
        image = image.convert("RGBA")
    if image.mode == "RGBA":
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[3])
        return background
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    return image
