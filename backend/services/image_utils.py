from __future__ import annotations

from pathlib import Path

from PIL import Image


def read_dimensions(path: Path) -> tuple[int, int]:
    # Image.open only parses the header; pixel data is never decoded.
    with Image.open(path) as image:
        return image.size
