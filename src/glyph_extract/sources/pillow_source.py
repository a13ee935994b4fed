from __future__ import annotations

import io
from pathlib import Path
from typing import Iterator

import numpy as np
from PIL import Image, UnidentifiedImageError

from .base import PageDecodeError, PageSource


def _to_rgb_array(img: Image.Image) -> np.ndarray:
    if img.mode != "RGB":
        img = img.convert("RGB")
    return np.asarray(img, dtype=np.uint8).copy()


def decode_page_bytes(data: bytes) -> np.ndarray:
    """
    Decode an in-memory image (PNG, JPEG or anything Pillow reads) to RGB.
    """

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return _to_rgb_array(img)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise PageDecodeError(f"Could not decode image buffer ({len(data)} bytes): {e}") from e


class PillowPageSource(PageSource):
    """Single-page raster scans (PNG, JPEG, TIFF, ...)."""

    def backend_id(self) -> str:
        return "pillow"

    def load_pages(self, *, path: Path, dpi: int) -> Iterator[np.ndarray]:
        # Raster scans carry their own resolution; `dpi` only describes it.
        _ = dpi
        try:
            with Image.open(path) as img:
                img.load()
                page = _to_rgb_array(img)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise PageDecodeError(f"Could not decode image {path}: {e}") from e
        yield page
