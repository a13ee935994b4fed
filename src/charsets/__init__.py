"""
Character sets: which character is expected in each successive grid cell.

A character set is an explicit immutable value passed into the extractor,
template renderer and rename utility; alternate scripts only need a new
`CharacterSet` instance.
"""

from .contracts import CharacterSet
from .czech import CZECH

DEFAULT_CHARSET = CZECH

__all__ = ["CZECH", "CharacterSet", "DEFAULT_CHARSET"]
