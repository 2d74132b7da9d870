"""Filesystem image loader."""

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from filtercache.exceptions import AssetNotFoundError, ImageProcessingError
from filtercache.models import Binary, mime_type_for

logger = logging.getLogger(__name__)


class FileSystemLoader:
    """
    Loads source images from a directory.

    Paths are resolved relative to ``data_root``; anything resolving
    outside of it is reported as not found.
    """

    def __init__(self, data_root: str | Path, allowed_formats: list[str] | None = None):
        self._root = Path(data_root).resolve()
        self._allowed_formats = set(allowed_formats) if allowed_formats else None

    def _absolute_path(self, path: str) -> Path:
        candidate = (self._root / path.lstrip("/")).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            raise AssetNotFoundError(path, f'Source image outside of data root "{path}"')
        return candidate

    def find(self, path: str) -> Binary:
        """
        Read and identify the image at ``path``.

        Raises:
            AssetNotFoundError: Missing file or path outside the data root
            ImageProcessingError: File is not a supported image
        """
        absolute = self._absolute_path(path)
        if not absolute.is_file():
            raise AssetNotFoundError(path)

        content = absolute.read_bytes()

        try:
            with Image.open(BytesIO(content)) as img:
                detected_format = img.format.lower() if img.format else None
        except UnidentifiedImageError as e:
            raise ImageProcessingError(f'Invalid or corrupted image "{path}": {e}') from e

        if not detected_format or (
            self._allowed_formats and detected_format not in self._allowed_formats
        ):
            raise ImageProcessingError(f"Unsupported image format: {detected_format}")

        logger.debug(f"Loaded {path} ({detected_format}, {len(content) / 1024:.1f}KB)")

        return Binary(
            content=content,
            mime_type=mime_type_for(detected_format),
            format=detected_format,
        )
