# character_admin/slugs.py
"""
Slug derivation for character records.

A slug is the shared filename base of a character's markdown document and its image.
Everything here is pure: existence checks are passed in as predicates.
"""
from __future__ import annotations

import re
from typing import Callable, Optional

from .errors import SlugExhausted

Exists = Callable[[str], bool]

# Upper bound on "-N" suffixes tried before giving up
UNIQUIFY_LIMIT = 100_000

_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")
_MULTI_UNDERSCORE = re.compile(r"_{2,}")
_EDGE_UNDERSCORE = re.compile(r"^_|_$")


def normalize(text: str) -> str:
    """
    Turn arbitrary display text into a snake_case slug.

    "Half-Orc Barbarian!!" -> "half_orc_barbarian", "MyCoolHero" -> "my_cool_hero".
    Returns "" when the text has no ASCII letters or digits.
    """
    s = _CAMEL_BOUNDARY.sub(r"\1_\2", text or "")
    s = _NON_ALNUM.sub("_", s)
    s = _MULTI_UNDERSCORE.sub("_", s)
    s = _EDGE_UNDERSCORE.sub("", s)
    return s.lower()


def compose(*fragments: Optional[str], fallback: str = "") -> str:
    """Join the non-empty normalized fragments with '_' (e.g. race, subrace, name)."""
    parts = [normalize(f) for f in fragments if f]
    joined = "_".join(p for p in parts if p)
    return joined or fallback


def namespace(*predicates: Exists) -> Exists:
    """Combine several existence checks into one shared slug space."""
    def exists(slug: str) -> bool:
        return any(p(slug) for p in predicates)
    return exists


def uniquify(candidate: str, exists: Exists, limit: int = UNIQUIFY_LIMIT) -> str:
    """
    Return `candidate` if it is free, otherwise the first free `candidate-N` (N >= 1).

    Raises SlugExhausted if `limit` suffixes are all taken.
    """
    if not exists(candidate):
        return candidate
    for i in range(1, limit + 1):
        attempt = f"{candidate}-{i}"
        if not exists(attempt):
            return attempt
    raise SlugExhausted(candidate, limit)


def shorten(slug: str, max_tokens: int = 6, max_length: int = 40) -> str:
    """Keep the first `max_tokens` underscore tokens, then cut to `max_length` chars."""
    tokens = [t for t in slug.split("_") if t]
    if len(tokens) <= max_tokens:
        return slug
    short = "_".join(tokens[:max_tokens])
    return short[:max_length].lower()
