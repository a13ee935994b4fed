from __future__ import annotations

from pathlib import Path

from .base import PageDecodeError, PageSource
from .pillow_source import PillowPageSource, decode_page_bytes
from .pypdfium2_source import Pypdfium2PageSource


def get_page_source(path: Path) -> PageSource:
    if path.suffix.lower() == ".pdf":
        return Pypdfium2PageSource()
    return PillowPageSource()


__all__ = [
    "PageDecodeError",
    "PageSource",
    "PillowPageSource",
    "Pypdfium2PageSource",
    "decode_page_bytes",
    "get_page_source",
]
