from __future__ import annotations

from .contracts import CharacterSet

# Page 1: uppercase with diacritics, digits, punctuation.
_PAGE_1 = (
    "AÁBCČDĎE"
    "ÉĚFGHIÍJ"
    "KLMNŇOÓP"
    "QRŘSŠTŤU"
    "ÚŮVWXYÝZ"
    "Ž0123456"
    "789.,!?:"
    ";-()\"'/@"
    "#&+=%*€$"
    "[]{}<>\\_"
)

# Page 2: lowercase with diacritics, typographic and foreign symbols.
_PAGE_2 = (
    "aábcčdďe"
    "éěfghiíj"
    "klmnňoóp"
    "qrřsštťu"
    "úůvwxyýz"
    "ž~`^|©®™"
    "°§¶•…–—„"
    "“‚’«»×÷±"
    "¼½¾¹²³µ¿"
    "¡ñÑßæÆøØ"
)

# Characters that are unsafe in filenames on at least one target platform.
FILENAMES = {
    "/": "slash",
    "\\": "backslash",
    ":": "colon",
    "*": "asterisk",
    "?": "question",
    '"': "doublequote",
    "<": "less",
    ">": "greater",
    "|": "pipe",
    ".": "dot",
    ",": "comma",
    "'": "apostrophe",
    " ": "space",
}

# Names written by earlier extractor versions.
LEGACY_ALIASES = {
    "exclaim": "!",
    "semicolon": ";",
    "hyphen": "-",
    "underscore": "_",
    "at": "@",
    "hash": "#",
    "ampersand": "&",
    "plus": "+",
    "equals": "=",
    "percent": "%",
    "dollar": "$",
    "lparen": "(",
    "rparen": ")",
    "lbracket": "[",
    "rbracket": "]",
    "lbrace": "{",
    "rbrace": "}",
    "tilde": "~",
    "backtick": "`",
    "caret": "^",
}

CZECH = CharacterSet(
    name="czech",
    chars=tuple(_PAGE_1 + _PAGE_2),
    filenames=FILENAMES,
    aliases=LEGACY_ALIASES,
    page_titles=(
        "Strana 1 - Velká písmena, čísla, interpunkce",
        "Strana 2 - Malá písmena, speciální znaky",
    ),
)
