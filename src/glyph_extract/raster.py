from __future__ import annotations

import numpy as np

from .contracts import Rect

TRIM_PADDING_PX = 2


def ink_opaque_threshold(threshold: int) -> int:
    """
    Lightness at or below which a pixel is solid ink: 3/4 of the background
    threshold (floor), clamped to 255.
    """

    return min(int(threshold) * 3 // 4, 255)


def _rgb8(raster: np.ndarray) -> np.ndarray:
    # First three channels as int32 so channel arithmetic cannot wrap.
    return raster[:, :, :3].astype(np.int32)


def extract(page: np.ndarray, rect: Rect) -> np.ndarray:
    """
    Copy of the part of `page` covered by `rect`, clipped to the page bounds.

    A rect entirely outside the page yields a zero-sized raster with the
    page's channel count.
    """

    r = rect.intersect(Rect.of_raster(page))
    if r.is_empty:
        return np.zeros((0, 0, page.shape[2]), dtype=np.uint8)
    return page[r.y0 : r.y1, r.x0 : r.x1].copy()


def trim_whitespace(cell: np.ndarray, threshold: int) -> tuple[np.ndarray, Rect]:
    """
    Crop `cell` to the bounding box of its ink plus a 2 px margin.

    Ink is stricter than background: a pixel counts only when every channel is
    below `ink_opaque_threshold(threshold)`, so light JPEG ringing around the
    strokes does not widen the box.

    Returns (cropped raster, rect used in cell-local coordinates). A cell with
    no ink is returned unchanged together with its full bounds.
    """

    bounds = Rect.of_raster(cell)
    if bounds.is_empty:
        return cell, bounds

    ink_t = ink_opaque_threshold(threshold)
    ink = np.all(_rgb8(cell) < ink_t, axis=2)

    ys = np.flatnonzero(ink.any(axis=1))
    xs = np.flatnonzero(ink.any(axis=0))
    if xs.size == 0 or ys.size == 0:
        return cell, bounds

    min_x, max_x = int(xs[0]), int(xs[-1])
    min_y, max_y = int(ys[0]), int(ys[-1])

    # Pad, clamp the minimums, then the (exclusive) maximums.
    min_x = max(bounds.x0, min_x - TRIM_PADDING_PX)
    min_y = max(bounds.y0, min_y - TRIM_PADDING_PX)
    max_x = min(bounds.x1, max_x + TRIM_PADDING_PX + 1)
    max_y = min(bounds.y1, max_y + TRIM_PADDING_PX + 1)

    trim_rect = Rect(x0=min_x, y0=min_y, x1=max_x, y1=max_y)
    return extract(cell, trim_rect), trim_rect


def alpha_for_lightness(lightness: int, threshold: int) -> int:
    """
    Alpha for a pixel whose lightness (max of R, G, B) is `lightness`.

    Zones, first match wins:
    - lightness >= threshold      -> 0 (background)
    - lightness <= ink_opaque     -> 255 (solid ink)
    - otherwise                   -> linear ramp from 255 down to 0
    """

    ink_opaque = ink_opaque_threshold(threshold)
    if lightness >= threshold:
        return 0
    if lightness <= ink_opaque:
        return 255
    span = threshold - ink_opaque
    return 255 * (threshold - lightness) // span


def make_transparent(raster: np.ndarray, threshold: int) -> np.ndarray:
    """
    Replace the paper background with transparency, keeping soft stroke edges.

    Vectorized form of `alpha_for_lightness` over the whole raster. Background
    pixels become (0, 0, 0, 0); ink and edge pixels keep their color. The
    result always has 4 channels and the input's width and height.
    """

    h, w = raster.shape[:2]
    out = np.zeros((h, w, 4), dtype=np.uint8)
    if h == 0 or w == 0:
        return out

    threshold = int(threshold)
    ink_opaque = ink_opaque_threshold(threshold)
    rgb = _rgb8(raster)
    lightness = rgb.max(axis=2)

    background = lightness >= threshold
    solid = ~background & (lightness <= ink_opaque)
    edge = ~background & ~solid

    span = max(threshold - ink_opaque, 1)
    alpha = np.zeros((h, w), dtype=np.int32)
    alpha[solid] = 255
    alpha[edge] = 255 * (threshold - lightness[edge]) // span

    keep = ~background
    out[keep, :3] = rgb[keep].astype(np.uint8)
    out[:, :, 3] = alpha.astype(np.uint8)
    return out
