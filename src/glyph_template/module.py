from __future__ import annotations

import math
from pathlib import Path

from loguru import logger
from PIL import Image, ImageDraw, ImageFont

from charsets import CharacterSet
from glyph_extract.module import page_cursor_ranges

from .contracts import TemplateConfig

GRID_COLOR = (180, 180, 180)
LABEL_COLOR = (150, 150, 150)
BASELINE_COLOR = (200, 200, 255)
FOOTER_COLOR = (128, 128, 128)
TITLE_COLOR = (0, 0, 0)

# Labels for characters that would print as nothing.
DISPLAY_LABELS = {" ": "SP", "\t": "TAB", "\n": "NL"}

FOOTER_Y_MM = 285.0
TITLE_Y_MM = 7.0


def display_label(ch: str) -> str:
    return DISPLAY_LABELS.get(ch, ch)


class _Canvas:
    """mm-based drawing on one raster page."""

    def __init__(self, config: TemplateConfig) -> None:
        self.config = config
        self.image = Image.new(
            "RGB",
            (self.px(config.page_width_mm), self.px(config.page_height_mm)),
            (255, 255, 255),
        )
        self.draw = ImageDraw.Draw(self.image)

    def px(self, mm: float) -> int:
        return int(round(mm / 25.4 * self.config.dpi))

    def pt_px(self, pt: float) -> int:
        return max(1, int(round(pt / 72.0 * self.config.dpi)))

    def rect(self, x: float, y: float, w: float, h: float, *, color: tuple[int, int, int], width_mm: float) -> None:
        self.draw.rectangle(
            [self.px(x), self.px(y), self.px(x + w), self.px(y + h)],
            outline=color,
            width=max(1, self.px(width_mm)),
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: tuple[int, int, int], width_mm: float) -> None:
        self.draw.line(
            [self.px(x1), self.px(y1), self.px(x2), self.px(y2)],
            fill=color,
            width=max(1, self.px(width_mm)),
        )

    def text(self, x: float, y: float, s: str, *, font, color: tuple[int, int, int]) -> None:
        self.draw.text((self.px(x), self.px(y)), s, font=font, fill=color, anchor="lt")


def _load_font(font_path: Path | None, size_px: int):
    if font_path is not None:
        return ImageFont.truetype(str(font_path), size_px)
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size_px)
    except OSError:
        return ImageFont.load_default(size=size_px)


def _draw_page(canvas: _Canvas, chars: tuple[str, ...], title: str) -> None:
    config = canvas.config
    title_font = _load_font(config.font_path, canvas.pt_px(config.title_font_size_pt))
    label_font = _load_font(config.font_path, canvas.pt_px(config.font_size_pt))

    canvas.text(config.margin_left_mm, TITLE_Y_MM, title, font=title_font, color=TITLE_COLOR)

    i = 0
    for row in range(config.rows):
        for col in range(config.columns):
            x = config.margin_left_mm + col * config.cell_width_mm
            y = config.margin_top_mm + row * config.cell_height_mm
            canvas.rect(x, y, config.cell_width_mm, config.cell_height_mm, color=GRID_COLOR, width_mm=0.3)
            if i < len(chars):
                canvas.text(x + 1.0, y + 1.0, display_label(chars[i]), font=label_font, color=LABEL_COLOR)
                i += 1

    baseline_offset = config.cell_height_mm * config.baseline_ratio
    x_end = config.grid_width_mm
    for row in range(config.rows):
        y = config.margin_top_mm + row * config.cell_height_mm + baseline_offset
        x = config.margin_left_mm
        while x < x_end:
            canvas.line(x, y, min(x + config.dash_mm, x_end), y, color=BASELINE_COLOR, width_mm=0.2)
            x += config.dash_mm + config.gap_mm

    footer = (
        f"Políčko: {config.cell_width_mm:.1f} × {config.cell_height_mm:.1f} mm | "
        f"Mřížka: {config.columns} × {config.rows} | Modrá čára = účaří"
    )
    canvas.text(config.margin_left_mm, FOOTER_Y_MM, footer, font=label_font, color=FOOTER_COLOR)


def template_page_count(*, config: TemplateConfig, charset: CharacterSet) -> int:
    return max(1, math.ceil(len(charset) / config.cells_per_page))


def render_template_pages(*, config: TemplateConfig, charset: CharacterSet) -> list[Image.Image]:
    """
    One RGB page per `cells_per_page` characters, cells labelled in the same
    row-major order the extractor consumes them.
    """

    if config.grid_width_mm > config.page_width_mm or config.grid_height_mm > config.page_height_mm:
        logger.warning(
            f"Grid ({config.grid_width_mm:.1f}x{config.grid_height_mm:.1f} mm) exceeds the page "
            f"({config.page_width_mm:.1f}x{config.page_height_mm:.1f} mm)"
        )

    page_count = template_page_count(config=config, charset=charset)
    ranges = page_cursor_ranges(
        page_count=page_count, cells_per_page=config.cells_per_page, char_count=len(charset)
    )

    pages: list[Image.Image] = []
    for page_index, (start, stop) in enumerate(ranges):
        canvas = _Canvas(config)
        _draw_page(canvas, charset.chars[start:stop], charset.page_title(page_index))
        pages.append(canvas.image)
    return pages


def write_template_pdf(*, config: TemplateConfig, charset: CharacterSet, out_file: Path) -> int:
    """
    Render and save the multi-page template PDF. Returns the page count.
    """

    # Palette pages are stored losslessly; RGB pages would be JPEG-compressed.
    pages = [
        page.convert("P", palette=Image.Palette.ADAPTIVE, colors=256)
        for page in render_template_pages(config=config, charset=charset)
    ]
    out_file.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Generating template: {out_file} ({len(pages)} pages)")
    pages[0].save(
        out_file,
        format="PDF",
        save_all=True,
        append_images=pages[1:],
        resolution=float(config.dpi),
    )
    return len(pages)
