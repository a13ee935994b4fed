from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .contracts import ExtractResult

MANIFEST_VERSION = 1


def build_glyph_manifest(*, glyphs: dict[str, str], cell_width_mm: float, cell_height_mm: float) -> dict[str, Any]:
    """
    Manifest consumed by the sticker app: nominal cell size in mm plus
    character -> PNG filename.
    """

    return {
        "version": MANIFEST_VERSION,
        "cellSize": {"width": cell_width_mm, "height": cell_height_mm},
        "glyphs": dict(glyphs),
    }


def serialize_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_glyph_manifest_json(
    *, glyphs: dict[str, str], cell_width_mm: float, cell_height_mm: float, out_file: Path
) -> None:
    payload = build_glyph_manifest(glyphs=glyphs, cell_width_mm=cell_width_mm, cell_height_mm=cell_height_mm)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_json(payload), encoding="utf-8")


def load_glyph_manifest(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def serialize_extract_result(result: ExtractResult) -> str:
    return serialize_json(result.to_dict())


def write_extract_report_json(*, result: ExtractResult, out_file: Path) -> None:
    """
    Write the run report (pages, errors, meta) next to the manifest or wherever
    the caller points it; no fixed artifact root is assumed.
    """

    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_extract_result(result), encoding="utf-8")
