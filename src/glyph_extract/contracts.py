from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from charsets import DEFAULT_CHARSET, CharacterSet

MM_PER_INCH = 25.4


def mm_to_px(mm: float, dpi: int) -> int:
    """
    Millimeters -> whole pixels at `dpi`, truncated (never rounded).
    """

    return int(mm / MM_PER_INCH * dpi)


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Integer pixel bounds (inclusive-exclusive):
    - (x0, y0) is top-left
    - (x1, y1) is one past bottom-right
    """

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def is_empty(self) -> bool:
        return self.x0 >= self.x1 or self.y0 >= self.y1

    def intersect(self, other: Rect) -> Rect:
        r = Rect(
            x0=max(self.x0, other.x0),
            y0=max(self.y0, other.y0),
            x1=min(self.x1, other.x1),
            y1=min(self.y1, other.y1),
        )
        if r.is_empty:
            return Rect(0, 0, 0, 0)
        return r

    @classmethod
    def of_raster(cls, raster: np.ndarray) -> Rect:
        h, w = raster.shape[:2]
        return cls(0, 0, int(w), int(h))


@dataclass(frozen=True, slots=True)
class GridGeometry:
    """
    Physical layout of the handwriting grid plus the scan resolution.

    Pixel values are derived on access; only millimeters and DPI are stored.
    """

    cell_width_mm: float = 22.5
    cell_height_mm: float = 26.2
    columns: int = 8
    rows: int = 10
    dpi: int = 300
    margin_top_mm: float = 10.0
    margin_left_mm: float = 10.0

    def __post_init__(self) -> None:
        if self.cell_width_mm <= 0 or self.cell_height_mm <= 0:
            raise ValueError("cell width/height must be > 0 mm")
        if self.dpi <= 0:
            raise ValueError("dpi must be a positive integer")
        if self.columns < 1 or self.rows < 1:
            raise ValueError("columns and rows must be >= 1")
        if self.margin_top_mm < 0 or self.margin_left_mm < 0:
            raise ValueError("margins must be >= 0 mm")

    @property
    def cell_width_px(self) -> int:
        return mm_to_px(self.cell_width_mm, self.dpi)

    @property
    def cell_height_px(self) -> int:
        return mm_to_px(self.cell_height_mm, self.dpi)

    @property
    def margin_top_px(self) -> int:
        return mm_to_px(self.margin_top_mm, self.dpi)

    @property
    def margin_left_px(self) -> int:
        return mm_to_px(self.margin_left_mm, self.dpi)

    @property
    def cells_per_page(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True, slots=True, eq=False)
class GlyphResult:
    index: int  # position in the character sequence (0-indexed, across pages)
    char: str
    page_num: int  # 1-indexed
    row: int
    col: int
    cell_rect: Rect  # page coordinates, clipped to the page
    trim_rect: Rect  # cell-local coordinates
    raster: np.ndarray  # (h, w, 3|4) uint8


@dataclass(frozen=True, slots=True)
class ExtractError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ExtractPageSummary:
    page_num: int  # 1-indexed, across all inputs
    source_path: str
    backend: str
    width_px: int
    height_px: int
    cursor_start: int
    glyph_count: int


@dataclass(frozen=True, slots=True)
class ExtractResult:
    """
    Machine-readable outcome of one extraction run.

    `glyphs` maps character -> filename for every glyph that was persisted,
    in cursor order. On a fatal error `ok` is False and `glyphs` holds what was
    persisted before the failure.
    """

    ok: bool
    glyphs: dict[str, str]
    pages: list[ExtractPageSummary]
    errors: list[ExtractError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ExtractConfig:
    """
    Extraction run configuration.

    All inputs are explicit; this package reads no environment variables and
    writes only under `out_root`.
    """

    out_root: Path
    geometry: GridGeometry = field(default_factory=GridGeometry)
    threshold: int = 240
    transparent: bool = True
    charset: CharacterSet = DEFAULT_CHARSET
    compute_source_sha256: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.out_root, Path):
            raise TypeError("out_root must be a pathlib.Path")
        if not (0 <= self.threshold <= 255):
            raise ValueError("threshold must be within [0, 255]")

    @property
    def glyphs_dir(self) -> Path:
        return self.out_root / "glyphs"

    @property
    def manifest_file(self) -> Path:
        return self.out_root / "glyphs.json"
