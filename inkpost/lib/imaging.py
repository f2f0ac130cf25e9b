"""Image inspection helpers using Pillow."""

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

_FORMAT_TO_EXTENSION = {
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "GIF": "gif",
}


@dataclass
class ImageInfo:
    width: int
    height: int
    format: str
    extension: str


def probe_image(data: bytes) -> ImageInfo | None:
    """Read dimensions and format without decoding pixel data.

    Returns ``None`` when Pillow cannot identify the bytes as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            orig_format = img.format or "PNG"
            width, height = img.size
    except (UnidentifiedImageError, OSError):
        return None

    return ImageInfo(
        width=width,
        height=height,
        format=orig_format.lower(),
        extension=_FORMAT_TO_EXTENSION.get(orig_format, orig_format.lower()),
    )
