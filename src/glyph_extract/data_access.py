from __future__ import annotations

import hashlib
from pathlib import Path


def split_input_list(value: str) -> list[Path]:
    """
    "page1.png, page2.png" -> [Path("page1.png"), Path("page2.png")].
    Order is preserved; it decides which characters land on which page.
    """

    return [Path(part.strip()) for part in value.split(",") if part.strip()]


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()
