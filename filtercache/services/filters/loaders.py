"""Pillow implementations of the filter loaders.

Each loader takes an image and its options mapping and returns a new
image. Sizes are ``[width, height]`` pairs.
"""

from collections.abc import Callable, Mapping
from typing import Any

from PIL import ExifTags, Image, ImageColor, ImageOps

FilterLoader = Callable[[Image.Image, Mapping[str, Any]], Image.Image]

_ORIENTATION_TRANSPOSE = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}


def _size(
    options: Mapping[str, Any], key: str = "size", positive: bool = True
) -> tuple[int, int]:
    try:
        width, height = options[key]
        width, height = int(width), int(height)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f'Option "{key}" must be a [width, height] pair') from e

    if positive and (width <= 0 or height <= 0):
        raise ValueError(f'Option "{key}" must be positive, got [{width}, {height}]')
    return width, height


def thumbnail(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """
    Fit the image into ``size``.

    ``mode`` "inset" keeps the whole image inside the box; "outbound"
    fills the box and crops the overflow. Images are never upscaled
    unless ``allow_upscale`` is set.
    """
    width, height = _size(options)
    mode = options.get("mode", "inset")

    if not options.get("allow_upscale", False):
        if image.width <= width and image.height <= height:
            return image.copy()

    if mode == "outbound":
        return ImageOps.fit(image, (width, height), Image.Resampling.LANCZOS)

    result = image.copy()
    result.thumbnail((width, height), Image.Resampling.LANCZOS)
    return result


def resize(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Resize to exactly ``size``."""
    return image.resize(_size(options), Image.Resampling.LANCZOS)


def scale(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Scale both dimensions by the ratio ``to``."""
    ratio = float(options.get("to", 1.0))
    if ratio <= 0:
        raise ValueError('Option "to" must be positive')

    new_size = (max(1, round(image.width * ratio)), max(1, round(image.height * ratio)))
    return image.resize(new_size, Image.Resampling.LANCZOS)


def crop(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Cut a ``size`` box starting at ``start`` (defaults to the origin)."""
    x, y = _size(options, "start", positive=False) if "start" in options else (0, 0)
    width, height = _size(options)
    return image.crop((x, y, min(x + width, image.width), min(y + height, image.height)))


def rotate(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Rotate clockwise by ``angle`` degrees."""
    angle = float(options.get("angle", 0))
    if angle % 360 == 0:
        return image.copy()
    # Pillow rotates counter-clockwise
    return image.rotate(-angle, expand=True)


def flip(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Mirror along ``axis``: "x" flips left/right, "y" flips top/bottom."""
    axis = options.get("axis", "x")
    if axis in ("x", "horizontal"):
        return ImageOps.mirror(image)
    if axis in ("y", "vertical"):
        return ImageOps.flip(image)
    raise ValueError(f'Option "axis" must be "x" or "y", got {axis!r}')


def grayscale(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    if image.mode in ("RGBA", "LA", "P"):
        return image.convert("LA")
    return ImageOps.grayscale(image)


def strip(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Drop EXIF metadata, applying the EXIF orientation first."""
    exif = image.getexif()
    orientation = None
    for tag, value in exif.items():
        if ExifTags.TAGS.get(tag) == "Orientation":
            orientation = value
            break

    if orientation in _ORIENTATION_TRANSPOSE:
        image = image.transpose(_ORIENTATION_TRANSPOSE[orientation])

    if image.mode in ("RGBA", "LA", "P"):
        # Preserve alpha channel
        new_image = Image.new(image.mode, image.size)
        if image.mode == "P":
            new_image.putpalette(image.getpalette())
    else:
        new_image = Image.new("RGB", image.size)

    new_image.paste(image)
    return new_image


def background(image: Image.Image, options: Mapping[str, Any]) -> Image.Image:
    """Paste the image centered on a ``color`` canvas, optionally of ``size``."""
    color = ImageColor.getrgb(options.get("color", "#fff"))
    size = _size(options) if "size" in options else image.size

    canvas = Image.new("RGB", size, color[:3])
    rgba = image.convert("RGBA")
    offset = ((size[0] - image.width) // 2, (size[1] - image.height) // 2)
    canvas.paste(rgba, offset, mask=rgba.split()[3])
    return canvas


BUILTIN_LOADERS: dict[str, FilterLoader] = {
    "thumbnail": thumbnail,
    "resize": resize,
    "scale": scale,
    "crop": crop,
    "rotate": rotate,
    "flip": flip,
    "grayscale": grayscale,
    "strip": strip,
    "background": background,
}
