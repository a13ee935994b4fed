from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from PIL import Image

from charsets import CharacterSet

from .contracts import GlyphResult


class GlyphSink(ABC):
    """
    Receives every glyph the pipeline produces and decides how to persist it.

    `save` returns the filename recorded in the manifest, or raises on failure;
    the pipeline records the failure and moves on to the next glyph.
    """

    @abstractmethod
    def save(self, glyph: GlyphResult) -> str:
        raise NotImplementedError

    def verify(self, filename: str) -> bool:
        """
        Whether a filename returned by `save` still resolves to a stored glyph.
        Sinks that cannot check their storage accept every filename.
        """

        return True


class PngDirectorySink(GlyphSink):
    """Writes `<charset filename>.png` files into one directory."""

    def __init__(self, *, out_dir: Path, charset: CharacterSet) -> None:
        self.out_dir = out_dir
        self.charset = charset

    def filename_for(self, ch: str) -> str:
        return self.charset.char_to_filename(ch) + ".png"

    def save(self, glyph: GlyphResult) -> str:
        h, w = glyph.raster.shape[:2]
        if h == 0 or w == 0:
            raise ValueError(f"empty glyph raster for {glyph.char!r} (cell outside the page)")

        filename = self.filename_for(glyph.char)
        Image.fromarray(glyph.raster).save(self.out_dir / filename, format="PNG")
        return filename

    def verify(self, filename: str) -> bool:
        return (self.out_dir / filename).is_file()
