from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class RenameError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RenameResult:
    """
    Outcome of re-normalizing a glyph directory.

    `glyphs` is the regenerated manifest mapping (character -> filename).
    `missing` lists charset characters with no glyph file, in charset order.
    `conflicts` are renames skipped because the target name already existed.
    """

    ok: bool
    glyphs: dict[str, str]
    renamed: list[dict[str, str]]
    missing: list[str]
    conflicts: list[dict[str, str]]
    removed: list[str]
    errors: list[RenameError]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
