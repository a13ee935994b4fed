from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Sequence

import numpy as np
from loguru import logger

from .contracts import (
    ExtractConfig,
    ExtractError,
    ExtractPageSummary,
    ExtractResult,
    GlyphResult,
    GridGeometry,
    Rect,
)
from .data_access import sha256_file
from .geometry import cell_pixel_rect, iter_cells
from .raster import extract, make_transparent, trim_whitespace
from .sink import GlyphSink, PngDirectorySink
from .sources import PageDecodeError, PageSource, get_page_source


def page_cursor_ranges(*, page_count: int, cells_per_page: int, char_count: int) -> list[tuple[int, int]]:
    """
    Character cursor range [start, stop) consumed by each page.

    Page i starts at i * cells_per_page; both ends are clamped to the number of
    characters, so pages past the end of the sequence get an empty range.
    """

    ranges: list[tuple[int, int]] = []
    for i in range(page_count):
        start = min(i * cells_per_page, char_count)
        stop = min((i + 1) * cells_per_page, char_count)
        ranges.append((start, stop))
    return ranges


def iter_page_glyphs(
    page: np.ndarray,
    *,
    page_num: int,
    geometry: GridGeometry,
    chars: Sequence[str],
    start: int,
    threshold: int,
    transparent: bool,
) -> Iterator[GlyphResult]:
    """
    Extract -> trim -> (optionally) make transparent every cell of one page,
    in row-major order, binding cell k to chars[start + k].

    Every visited cell consumes one character, empty cells included. Once
    the sequence is exhausted the remaining cells are skipped.
    """

    page_bounds = Rect.of_raster(page)
    cursor = start
    for row, col in iter_cells(geometry):
        if cursor >= len(chars):
            logger.warning(
                f"More cells than characters: page {page_num} stops at cell [{row},{col}] "
                f"after character #{cursor}"
            )
            return

        rect = cell_pixel_rect(geometry, row, col)
        cell = extract(page, rect)
        trimmed, trim_rect = trim_whitespace(cell, threshold)
        final = make_transparent(trimmed, threshold) if transparent else trimmed

        yield GlyphResult(
            index=cursor,
            char=chars[cursor],
            page_num=page_num,
            row=row,
            col=col,
            cell_rect=rect.intersect(page_bounds),
            trim_rect=trim_rect,
            raster=final,
        )
        cursor += 1


def extract_glyphs(
    pages: Iterable[np.ndarray],
    *,
    geometry: GridGeometry,
    chars: Sequence[str],
    threshold: int = 240,
    transparent: bool = True,
) -> Iterator[GlyphResult]:
    """
    In-memory pipeline over already decoded pages (caller order).

    Pages are pulled lazily; once the character sequence is exhausted no
    further page is requested from `pages`.
    """

    cursor = 0
    page_iter = iter(pages)
    page_num = 0
    while cursor < len(chars):
        try:
            page = next(page_iter)
        except StopIteration:
            break
        page_num += 1
        yield from iter_page_glyphs(
            page,
            page_num=page_num,
            geometry=geometry,
            chars=chars,
            start=cursor,
            threshold=threshold,
            transparent=transparent,
        )
        cursor = min(cursor + geometry.cells_per_page, len(chars))


def _iter_input_pages(
    input_files: Sequence[Path],
    *,
    dpi: int,
    source_factory: Callable[[Path], PageSource],
) -> Iterator[tuple[Path, str, np.ndarray]]:
    for path in input_files:
        source = source_factory(path)
        backend = source.backend_id()
        for page in source.load_pages(path=path, dpi=dpi):
            yield path, backend, page


def validate_extract_result(
    *, config: ExtractConfig, result: ExtractResult, sink: GlyphSink
) -> list[ExtractError]:
    """
    Post-run consistency checks:
    - the sink still holds every manifest filename
    - no two characters share a filename
    - every manifest character belongs to the configured character set
    """

    errs: list[ExtractError] = []
    seen: dict[str, str] = {}
    known = set(config.charset.chars)
    for ch, filename in result.glyphs.items():
        if ch not in known:
            errs.append(
                ExtractError(
                    code="EXTRACT_UNKNOWN_CHARACTER",
                    message="Manifest character is not part of the character set",
                    detail={"char": ch, "charset": config.charset.name},
                )
            )
        if filename in seen:
            errs.append(
                ExtractError(
                    code="EXTRACT_DUPLICATE_FILENAME",
                    message="Two characters map to the same glyph file",
                    detail={"filename": filename, "chars": [seen[filename], ch]},
                )
            )
        seen[filename] = ch
        if not sink.verify(filename):
            errs.append(
                ExtractError(
                    code="EXTRACT_OUTPUT_MISSING",
                    message="Glyph sink does not hold the saved glyph",
                    detail={"char": ch, "filename": filename},
                )
            )
    return errs


def _collect_source_hashes(input_files: Sequence[Path], meta: dict[str, Any]) -> None:
    hashes: list[dict[str, str]] = []
    for path in input_files:
        try:
            hashes.append({"path": str(path), "sha256": sha256_file(path)})
        except OSError as e:
            meta.setdefault("audit_warnings", []).append(
                {"code": "EXTRACT_SOURCE_HASH_FAILED", "path": str(path), "error": repr(e)}
            )
    meta["sources"] = hashes


def run_extract(
    *,
    config: ExtractConfig,
    input_files: Sequence[Path],
    sink: GlyphSink | None = None,
    source_factory: Callable[[Path], PageSource] = get_page_source,
) -> ExtractResult:
    """
    Preferred programmatic entrypoint.

    Input: scanned pages (image files, or PDFs with one grid page per PDF
    page), in the order their cells should consume characters.
    Output: one PNG per glyph under `config.glyphs_dir` (via `sink`) and the
    JSON-ready result; writing the manifest is left to the caller.

    A page that cannot be decoded stops the run; a glyph that cannot be saved
    is recorded and skipped.
    """

    geometry = config.geometry
    chars = config.charset.chars
    meta: dict[str, Any] = {
        "charset": config.charset.name,
        "threshold": config.threshold,
        "transparent": config.transparent,
        "dpi": geometry.dpi,
        "cell_px": {"width": geometry.cell_width_px, "height": geometry.cell_height_px},
        "margin_px": {"top": geometry.margin_top_px, "left": geometry.margin_left_px},
    }
    if config.compute_source_sha256:
        _collect_source_hashes(input_files, meta)

    glyphs: dict[str, str] = {}
    pages: list[ExtractPageSummary] = []
    errors: list[ExtractError] = []

    try:
        config.glyphs_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create output directory {config.glyphs_dir}: {e}")
        return ExtractResult(
            ok=False,
            glyphs={},
            pages=[],
            errors=[
                ExtractError(
                    code="EXTRACT_OUTPUT_DIR_FAILED",
                    message="Could not create the output directory",
                    detail={"glyphs_dir": str(config.glyphs_dir), "error": repr(e)},
                )
            ],
            meta=meta,
        )

    if sink is None:
        sink = PngDirectorySink(out_dir=config.glyphs_dir, charset=config.charset)

    logger.info(f"Cell size: {geometry.cell_width_px}x{geometry.cell_height_px} pixels")

    page_iter = _iter_input_pages(input_files, dpi=geometry.dpi, source_factory=source_factory)
    cursor = 0
    page_num = 0
    while cursor < len(chars):
        try:
            path, backend, page = next(page_iter)
        except StopIteration:
            break
        except PageDecodeError as e:
            logger.error(f"Error loading page {page_num + 1}: {e}")
            errors.append(
                ExtractError(
                    code="EXTRACT_PAGE_DECODE_FAILED",
                    message="Failed to decode page image",
                    detail={"page_num": page_num + 1, "error": str(e)},
                )
            )
            return ExtractResult(ok=False, glyphs=glyphs, pages=pages, errors=errors, meta=meta)
        except Exception as e:
            logger.error(f"Page source failed on page {page_num + 1}: {e!r}")
            errors.append(
                ExtractError(
                    code="EXTRACT_PAGE_SOURCE_FAILED",
                    message="Page source failed",
                    detail={"page_num": page_num + 1, "error": repr(e)},
                )
            )
            return ExtractResult(ok=False, glyphs=glyphs, pages=pages, errors=errors, meta=meta)

        page_num += 1
        height, width = page.shape[:2]
        logger.info(f"Processing page {page_num}: {path} ({width}x{height} pixels)")

        emitted = 0
        for glyph in iter_page_glyphs(
            page,
            page_num=page_num,
            geometry=geometry,
            chars=chars,
            start=cursor,
            threshold=config.threshold,
            transparent=config.transparent,
        ):
            emitted += 1
            try:
                filename = sink.save(glyph)
            except Exception as e:
                logger.error(f"Error saving glyph {glyph.char!r} [{glyph.row},{glyph.col}]: {e}")
                errors.append(
                    ExtractError(
                        code="GLYPH_SAVE_FAILED",
                        message="Failed to persist glyph image",
                        detail={
                            "char": glyph.char,
                            "page_num": page_num,
                            "row": glyph.row,
                            "col": glyph.col,
                            "error": str(e),
                        },
                    )
                )
                continue

            glyphs[glyph.char] = filename
            logger.info(
                f"[{glyph.row},{glyph.col}] {glyph.char!r} -> {filename} "
                f"({glyph.trim_rect.width}x{glyph.trim_rect.height})"
            )

        pages.append(
            ExtractPageSummary(
                page_num=page_num,
                source_path=str(path),
                backend=backend,
                width_px=int(width),
                height_px=int(height),
                cursor_start=cursor,
                glyph_count=emitted,
            )
        )
        cursor += emitted

    if cursor < len(chars):
        meta["unassigned_chars"] = len(chars) - cursor

    # Per-glyph save failures are not fatal; only inconsistencies fail the run.
    result = ExtractResult(ok=True, glyphs=glyphs, pages=pages, errors=errors, meta=meta)
    validation_errors = validate_extract_result(config=config, result=result, sink=sink)
    if validation_errors:
        return ExtractResult(
            ok=False,
            glyphs=result.glyphs,
            pages=result.pages,
            errors=result.errors + validation_errors,
            meta=result.meta,
        )

    logger.info(f"Extracted {len(glyphs)} glyphs to {config.out_root}")
    return result
