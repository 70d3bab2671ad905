# content/slug.py
"""URL slugs for memorial pages."""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")

FALLBACK_SLUG = "memorial"


def slugify(text: str) -> str:
    """
    Lower-case ASCII slug: diacritics stripped, runs of anything else
    collapsed to a single dash, no leading or trailing dashes.

    >>> slugify("Café  Rex!")
    'cafe-rex'
    """
    decomposed = unicodedata.normalize("NFKD", text.lower())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALPHANUMERIC.sub("-", ascii_only).strip("-")


def unique_slug(text: str, is_taken: Callable[[str], bool]) -> str:
    """
    Slugify text and append -2, -3, ... until is_taken says the slug is free.
    """
    base = slugify(text) or FALLBACK_SLUG
    if not is_taken(base):
        return base

    suffix = 2
    candidate = f"{base}-{suffix}"
    while is_taken(candidate):
        suffix += 1
        candidate = f"{base}-{suffix}"

    return candidate
