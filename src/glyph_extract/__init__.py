"""
Glyph extraction - scanned handwriting grid -> one transparent PNG per character.

Pipeline per page, per cell (row-major):
  geometry (mm -> px cell rect) -> extract (crop, clipped to page)
  -> trim (tight ink bbox + 2 px) -> make_transparent (3-zone alpha)

The character bound to each cell is purely positional: cell k across all pages
gets the k-th character of the configured character set. No recognition and
no deskew happen here.
"""

from .contracts import (
    ExtractConfig,
    ExtractError,
    ExtractPageSummary,
    ExtractResult,
    GlyphResult,
    GridGeometry,
    Rect,
    mm_to_px,
)
from .geometry import cell_pixel_rect, iter_cells
from .module import extract_glyphs, iter_page_glyphs, page_cursor_ranges, run_extract
from .raster import alpha_for_lightness, extract, ink_opaque_threshold, make_transparent, trim_whitespace

__all__ = [
    "ExtractConfig",
    "ExtractError",
    "ExtractPageSummary",
    "ExtractResult",
    "GlyphResult",
    "GridGeometry",
    "Rect",
    "alpha_for_lightness",
    "cell_pixel_rect",
    "extract",
    "extract_glyphs",
    "ink_opaque_threshold",
    "iter_cells",
    "iter_page_glyphs",
    "make_transparent",
    "mm_to_px",
    "page_cursor_ranges",
    "run_extract",
    "trim_whitespace",
]
