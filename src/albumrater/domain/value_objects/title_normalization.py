"""Album and artist title normalization for catalog matching.

Hey future me - Spotify and Discogs name the same record differently!
- Spotify: "Abbey Road (Remastered)", "The Wall - Deluxe Edition (2011 Remaster)"
- Discogs: "Abbey Road", "The Wall"

Three tools live here:
- light_clean(): strip (...) and [...] only, keeps punctuation and case for search queries
- normalize(): aggressive canonical form for equality/containment comparisons
- generate_variants(): ordered list of progressively simpler album names

Examples:
    >>> normalize("Abbey Road (Remastered)")
    'abbey road'
    >>> normalize("ABBEY ROAD")
    'abbey road'
    >>> generate_variants("The Wall - Deluxe Edition (2011 Remaster)")
    ['The Wall - Deluxe Edition (2011 Remaster)', 'The Wall - Deluxe Edition', 'The Wall', 'Wall']
"""

import re
from dataclasses import dataclass

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)")
_BRACKETED = re.compile(r"\s*\[[^\]]*\]")
_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

_EDITION_WORDS = r"(Deluxe|Expanded|Remastered|Anniversary|Special|Limited|Collector's?)"
_PERFORMANCE_WORDS = r"(Live|Acoustic|Unplugged|MTV)"


@dataclass(frozen=True, slots=True)
class CleanupRule:
    """One step of the album-name cleanup cascade.

    Attributes:
        name: Short identifier (shows up in debug logs and tests)
        pattern: Compiled pattern whose matches are removed
        count: Max replacements (0 = all, like a global regex)
    """

    name: str
    pattern: re.Pattern[str]
    count: int = 1

    def apply(self, value: str) -> str:
        """Remove the pattern from value and trim the result."""
        return self.pattern.sub("", value, count=self.count).strip()


# Order matters! Most specific noise first, the leading article last.
ALBUM_CLEANUP_RULES: tuple[CleanupRule, ...] = (
    CleanupRule("parenthetical", _PARENTHETICAL, count=0),
    CleanupRule("bracketed", _BRACKETED, count=0),
    CleanupRule(
        "dash_edition",
        re.compile(rf"\s*-\s*{_EDITION_WORDS}.*$", re.IGNORECASE),
    ),
    CleanupRule(
        "edition_suffix",
        re.compile(rf"\s*{_EDITION_WORDS}\s*(Edition|Version|Release).*$", re.IGNORECASE),
    ),
    CleanupRule(
        "dash_performance",
        re.compile(rf"\s*-\s*{_PERFORMANCE_WORDS}.*$", re.IGNORECASE),
    ),
    CleanupRule(
        "performance_venue",
        re.compile(rf"\s*{_PERFORMANCE_WORDS}\s*(at|from|in|on).*$", re.IGNORECASE),
    ),
    CleanupRule("year_suffix", re.compile(r"\s*-?\s*[0-9]{4}.*$")),
    CleanupRule("parenthesized_year", re.compile(r"\s*\([0-9]{4}\).*$")),
    CleanupRule("leading_article", re.compile(r"^The\s+", re.IGNORECASE)),
)


def light_clean(text: str) -> str:
    """Strip parenthesized and bracketed substrings, nothing else.

    >>> light_clean("OK Computer [OKNOTOK] (Remastered)")
    'OK Computer'
    """
    cleaned = _PARENTHETICAL.sub("", text)
    cleaned = _BRACKETED.sub("", cleaned)
    return cleaned.strip()


def normalize(text: str) -> str:
    """Canonical form for comparisons.

    Lowercase, drop (...) and [...], drop punctuation, collapse whitespace.

    >>> normalize("  Sgt. Pepper's Lonely Hearts Club Band [Deluxe] ")
    'sgt peppers lonely hearts club band'
    """
    if not text:
        return ""
    normalized = text.lower()
    normalized = _PARENTHETICAL.sub("", normalized)
    normalized = _BRACKETED.sub("", normalized)
    normalized = _NON_WORD.sub("", normalized)
    normalized = _WHITESPACE.sub(" ", normalized)
    return normalized.strip()


def generate_variants(
    album_name: str,
    rules: tuple[CleanupRule, ...] = ALBUM_CLEANUP_RULES,
) -> list[str]:
    """Build progressively simplified album names, original first.

    Each rule runs on the CURRENT (already cleaned) name. A result is kept only when
    it's non-empty, differs from the current name and isn't already in the list -
    only then does the current name advance.

    Args:
        album_name: Album title as the streaming service reports it
        rules: Cleanup cascade (defaults to ALBUM_CLEANUP_RULES)

    Returns:
        Ordered, de-duplicated, non-empty variants (most specific first)
    """
    variants = [album_name]
    current = album_name

    for rule in rules:
        cleaned = rule.apply(current)
        if cleaned and cleaned != current and cleaned not in variants:
            variants.append(cleaned)
            current = cleaned

    return [variant for variant in dict.fromkeys(variants) if variant]


__all__ = [
    "ALBUM_CLEANUP_RULES",
    "CleanupRule",
    "generate_variants",
    "light_clean",
    "normalize",
]
