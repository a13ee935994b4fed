from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

import numpy as np


class PageDecodeError(Exception):
    """A page image could not be read or decoded. Fatal for the run."""


class PageSource(ABC):
    """
    Decodes scanned pages into RGB rasters.

    Sources must:
    - yield pages of one input in their natural order
    - yield (h, w, 3) uint8 arrays, already aligned to the grid (no deskew)
    - raise PageDecodeError for unreadable or corrupt input
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def load_pages(self, *, path: Path, dpi: int) -> Iterator[np.ndarray]:
        """
        `dpi` is the resolution the grid geometry assumes; raster inputs are
        taken as already scanned at it, vector inputs are rendered at it.
        """

        raise NotImplementedError
