from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0


@dataclass(frozen=True, slots=True)
class TemplateConfig:
    """
    Printable template layout, in millimeters.

    The cell grid must match the `GridGeometry` used for extraction (same cell
    size, counts and margins); `dpi` only sets the raster resolution of the
    rendered PDF pages.
    """

    cell_width_mm: float = 22.5
    cell_height_mm: float = 26.2
    columns: int = 8
    rows: int = 10
    margin_top_mm: float = 15.0
    margin_left_mm: float = 15.0
    font_size_pt: float = 8.0
    title_font_size_pt: float = 12.0
    page_width_mm: float = A4_WIDTH_MM
    page_height_mm: float = A4_HEIGHT_MM
    dpi: int = 300
    font_path: Path | None = None  # None => DejaVuSans from the system, else Pillow's default font

    # Dashed baseline guide, as a fraction of cell height from the cell top.
    baseline_ratio: float = 0.75
    dash_mm: float = 2.0
    gap_mm: float = 1.0

    def __post_init__(self) -> None:
        if self.cell_width_mm <= 0 or self.cell_height_mm <= 0:
            raise ValueError("cell width/height must be > 0 mm")
        if self.columns < 1 or self.rows < 1:
            raise ValueError("columns and rows must be >= 1")
        if self.dpi <= 0:
            raise ValueError("dpi must be a positive integer")
        if self.font_size_pt <= 0 or self.title_font_size_pt <= 0:
            raise ValueError("font sizes must be > 0 pt")
        if not (0.0 < self.baseline_ratio < 1.0):
            raise ValueError("baseline_ratio must be within (0, 1)")
        if self.dash_mm <= 0 or self.gap_mm < 0:
            raise ValueError("dash_mm must be > 0 and gap_mm >= 0")

    @property
    def cells_per_page(self) -> int:
        return self.columns * self.rows

    @property
    def grid_width_mm(self) -> float:
        return self.margin_left_mm + self.columns * self.cell_width_mm

    @property
    def grid_height_mm(self) -> float:
        return self.margin_top_mm + self.rows * self.cell_height_mm
