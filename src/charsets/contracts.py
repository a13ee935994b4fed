from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class CharacterSet:
    """
    Ordered character sequence laid out cell by cell across template pages.

    The position of a character in `chars` is the only link between a grid cell
    and the character written in it (row-major, pages concatenated).

    `filenames` maps characters that cannot appear in a filename to an ASCII
    name; every other character is used as its own filename stem.
    `aliases` maps additional (legacy) stems back to characters; it is only
    consulted when reading filenames, never when writing them.
    """

    name: str
    chars: tuple[str, ...]
    filenames: Mapping[str, str] = field(default_factory=dict)
    aliases: Mapping[str, str] = field(default_factory=dict)
    page_titles: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for ch in self.chars:
            if len(ch) != 1:
                raise ValueError(f"character set entries must be single characters, got {ch!r}")
        if len(set(self.chars)) != len(self.chars):
            dupes = sorted({ch for ch in self.chars if self.chars.count(ch) > 1})
            raise ValueError(f"character set {self.name!r} repeats characters: {dupes!r}")
        names = list(self.filenames.values())
        if len(set(names)) != len(names):
            raise ValueError("filename table must map characters to unique names")
        object.__setattr__(self, "filenames", MappingProxyType(dict(self.filenames)))
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))

    def __len__(self) -> int:
        return len(self.chars)

    def char_to_filename(self, ch: str) -> str:
        return self.filenames.get(ch, ch)

    def filename_to_char(self, stem: str) -> str:
        """
        Inverse of `char_to_filename`, also accepting legacy aliases.
        Unknown stems are returned unchanged (the stem is the character).
        """

        for ch, name in self.filenames.items():
            if name == stem:
                return ch
        return self.aliases.get(stem, stem)

    def page_title(self, page_index: int) -> str:
        if page_index < len(self.page_titles):
            return self.page_titles[page_index]
        return f"{self.name} - page {page_index + 1}"
