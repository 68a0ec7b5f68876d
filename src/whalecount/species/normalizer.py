"""Text normalization for species labels.

Alias indexing and label lookup must both go through :func:`normalize`;
a key built any other way will silently never match.
"""

import re
import unicodedata

_CHARACTER_MAP = str.maketrans(
    {
        "\u00a0": " ",  # no-break space
        "\u2013": "-",  # en dash
        "\u2014": "-",  # em dash
        "\u2212": "-",  # minus sign
        "\u00ad": " ",  # soft hyphen
        "\u2018": "'",
        "\u2019": "'",
    }
)
# UTF-8 right single quote decoded as cp1252; must be replaced before NFKC folds U+2122
_MOJIBAKE_APOSTROPHE = "\u00e2\u20ac\u2122"
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """Canonicalize a raw label into a comparable lowercase key.

    >>> normalize("  Risso\u2019s   Dolphin ")
    "risso's dolphin"
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKC", text.replace(_MOJIBAKE_APOSTROPHE, "'"))
    normalized = normalized.translate(_CHARACTER_MAP)
    return _WHITESPACE.sub(" ", normalized.strip().lower())
