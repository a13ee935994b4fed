from __future__ import annotations

from pathlib import Path
from typing import Iterator

import numpy as np

from .base import PageDecodeError, PageSource


class Pypdfium2PageSource(PageSource):
    """Scanned pages delivered as a PDF; each PDF page is one grid page."""

    def backend_id(self) -> str:
        return "pypdfium2"

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError("Missing dependency: pypdfium2 is required to read PDF scans.") from e

    def load_pages(self, *, path: Path, dpi: int) -> Iterator[np.ndarray]:
        pdfium = self._require_pdfium()
        try:
            doc = pdfium.PdfDocument(str(path))
        except Exception as e:
            raise PageDecodeError(f"Could not open PDF {path}: {e!r}") from e

        scale = dpi / 72.0  # PDF points are 1/72 inch

        try:
            for i in range(len(doc)):
                try:
                    bitmap = doc[i].render(scale=scale)
                    pil_img = bitmap.to_pil().convert("RGB")
                except Exception as e:
                    raise PageDecodeError(f"Could not render page {i + 1} of {path}: {e!r}") from e
                yield np.asarray(pil_img, dtype=np.uint8).copy()
        finally:
            doc.close()
