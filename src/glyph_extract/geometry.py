from __future__ import annotations

from typing import Iterator

from .contracts import GridGeometry, Rect


def cell_pixel_rect(geometry: GridGeometry, row: int, col: int) -> Rect:
    """
    Pixel rectangle of cell (row, col) on a page scanned at `geometry.dpi`.

    Out-of-range positions raise instead of being clamped.
    """

    if not (0 <= row < geometry.rows):
        raise IndexError(f"row out of range: {row} (0..{geometry.rows - 1})")
    if not (0 <= col < geometry.columns):
        raise IndexError(f"col out of range: {col} (0..{geometry.columns - 1})")

    cell_w = geometry.cell_width_px
    cell_h = geometry.cell_height_px
    x = geometry.margin_left_px + col * cell_w
    y = geometry.margin_top_px + row * cell_h
    return Rect(x0=x, y0=y, x1=x + cell_w, y1=y + cell_h)


def iter_cells(geometry: GridGeometry) -> Iterator[tuple[int, int]]:
    # Row-major: left to right, then top to bottom.
    for row in range(geometry.rows):
        for col in range(geometry.columns):
            yield row, col
