"""
Re-normalize glyph filenames produced by an earlier extractor run.
"""

from .contracts import RenameError, RenameResult
from .module import rename_glyphs

__all__ = ["RenameError", "RenameResult", "rename_glyphs"]
