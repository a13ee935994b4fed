from __future__ import annotations

import unicodedata
from pathlib import Path

from loguru import logger

from charsets import CharacterSet
from glyph_extract.artifacts import write_glyph_manifest_json

from .contracts import RenameError, RenameResult

MANIFEST_NAME = "glyphs.json"


def _index_existing_files(glyphs_dir: Path, charset: CharacterSet) -> dict[str, str]:
    """
    character -> existing PNG filename, keyed by both NFC and NFD forms so
    files written on macOS (decomposed names) are found too.
    """

    existing: dict[str, str] = {}
    for entry in sorted(glyphs_dir.iterdir()):
        if entry.is_dir() or not entry.name.endswith(".png"):
            continue
        ch = charset.filename_to_char(entry.name[: -len(".png")])
        nfc = unicodedata.normalize("NFC", ch)
        existing[nfc] = entry.name
        nfd = unicodedata.normalize("NFD", ch)
        if nfd != nfc:
            existing[nfd] = entry.name
    return existing


def _fail(code: str, message: str, detail: dict) -> RenameResult:
    return RenameResult(
        ok=False,
        glyphs={},
        renamed=[],
        missing=[],
        conflicts=[],
        removed=[],
        errors=[RenameError(code=code, message=message, detail=detail)],
    )


def rename_glyphs(
    *,
    glyphs_dir: Path,
    charset: CharacterSet,
    cell_width_mm: float = 22.5,
    cell_height_mm: float = 26.2,
) -> RenameResult:
    """
    Bring a glyph directory from an earlier run in line with the current
    filename table:

    1. map every `*.png` stem back to its character (aliases included)
    2. rename each charset character's file to `char_to_filename(ch) + ".png"`
       unless that name is already taken
    3. rewrite `glyphs.json` inside `glyphs_dir`
    4. delete PNGs the new manifest does not reference
    """

    try:
        existing = _index_existing_files(glyphs_dir, charset)
    except OSError as e:
        return _fail(
            "RENAME_DIR_UNREADABLE",
            "Could not read glyph directory",
            {"glyphs_dir": str(glyphs_dir), "error": repr(e)},
        )

    logger.info(f"Found {len(set(existing.values()))} PNG files in {glyphs_dir}")

    glyphs: dict[str, str] = {}
    renamed: list[dict[str, str]] = []
    missing: list[str] = []
    conflicts: list[dict[str, str]] = []
    errors: list[RenameError] = []

    for ch in charset.chars:
        new_name = charset.char_to_filename(ch) + ".png"
        old_name = existing.get(unicodedata.normalize("NFC", ch))
        if old_name is None:
            old_name = existing.get(unicodedata.normalize("NFD", ch))
        if old_name is None:
            logger.info(f"MISSING: {ch!r} (U+{ord(ch):04X})")
            missing.append(ch)
            continue

        if old_name == new_name:
            glyphs[ch] = new_name
            continue

        new_path = glyphs_dir / new_name
        if new_path.exists():
            logger.warning(f"CONFLICT: {new_name} already exists, skipping {old_name}")
            conflicts.append({"from": old_name, "to": new_name})
            glyphs[ch] = new_name
            continue

        try:
            (glyphs_dir / old_name).rename(new_path)
        except OSError as e:
            logger.error(f"Error renaming {old_name} -> {new_name}: {e}")
            errors.append(
                RenameError(
                    code="RENAME_FAILED",
                    message="Could not rename glyph file",
                    detail={"from": old_name, "to": new_name, "error": repr(e)},
                )
            )
            # Keep the file under its old name rather than losing it in cleanup.
            glyphs[ch] = old_name
            continue

        logger.info(f"RENAMED: {old_name} -> {new_name}")
        renamed.append({"from": old_name, "to": new_name})
        glyphs[ch] = new_name

    try:
        write_glyph_manifest_json(
            glyphs=glyphs,
            cell_width_mm=cell_width_mm,
            cell_height_mm=cell_height_mm,
            out_file=glyphs_dir / MANIFEST_NAME,
        )
    except OSError as e:
        errors.append(
            RenameError(
                code="RENAME_MANIFEST_WRITE_FAILED",
                message="Could not write glyphs.json",
                detail={"glyphs_dir": str(glyphs_dir), "error": repr(e)},
            )
        )
        return RenameResult(
            ok=False,
            glyphs=glyphs,
            renamed=renamed,
            missing=missing,
            conflicts=conflicts,
            removed=[],
            errors=errors,
        )

    keep = set(glyphs.values()) | {MANIFEST_NAME}
    removed: list[str] = []
    for entry in sorted(glyphs_dir.iterdir()):
        if entry.name in keep or entry.is_dir() or not entry.name.endswith(".png"):
            continue
        try:
            entry.unlink()
        except OSError as e:
            errors.append(
                RenameError(
                    code="RENAME_CLEANUP_FAILED",
                    message="Could not remove unused glyph file",
                    detail={"filename": entry.name, "error": repr(e)},
                )
            )
            continue
        logger.info(f"REMOVING unused: {entry.name}")
        removed.append(entry.name)

    return RenameResult(
        ok=not errors,
        glyphs=glyphs,
        renamed=renamed,
        missing=missing,
        conflicts=conflicts,
        removed=removed,
        errors=errors,
    )
