from io import BytesIO

import pytest
from PIL import Image

from filtercache.models import Binary


def make_image_bytes(size=(400, 300), color=(200, 30, 30), format="JPEG", mode="RGB"):
    img = Image.new(mode, size, color)
    out = BytesIO()
    img.save(out, format=format)
    return out.getvalue()


def open_binary(binary):
    return Image.open(BytesIO(binary.content))


class MemoryResolver:
    """Dict-backed resolver for tests."""

    def __init__(self, url_prefix="mem://"):
        self.entries = {}
        self.url_prefix = url_prefix

    def is_stored(self, path, filter):
        return (path, filter) in self.entries

    def resolve(self, path, filter):
        return f"{self.url_prefix}{filter}/{path}"

    def store(self, binary, path, filter):
        self.entries[(path, filter)] = binary

    def remove(self, path, filter):
        self.entries.pop((path, filter), None)


@pytest.fixture
def jpeg_binary():
    return Binary(content=make_image_bytes(), mime_type="image/jpeg", format="jpeg")


@pytest.fixture
def image_dir(tmp_path):
    root = tmp_path / "images"
    (root / "img").mkdir(parents=True)
    (root / "img" / "a.jpg").write_bytes(make_image_bytes())
    (root / "img" / "b.png").write_bytes(
        make_image_bytes(size=(64, 32), color=(0, 0, 255, 128), format="PNG", mode="RGBA")
    )
    return root
