"""Title matching for Discogs search candidates."""

import logging
from collections.abc import Sequence
from enum import Enum

from albumrater.domain.entities import SearchCandidate
from albumrater.domain.value_objects import normalize

logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    """How closely two titles agree after normalization."""

    EXACT = "exact"
    PARTIAL = "partial"
    NONE = "none"


def classify_title_match(query: str, title: str) -> MatchKind:
    """Compare two titles on their normalized forms.

    PARTIAL means one normalized string contains the other. Names made only of
    punctuation ("!!!") normalize to "" and still match each other exactly.

    Examples:
        >>> classify_title_match("The Wall", "the wall")
        <MatchKind.EXACT: 'exact'>
        >>> classify_title_match("Wall", "The Wall (Remastered)")
        <MatchKind.PARTIAL: 'partial'>
    """
    normalized_query = normalize(query)
    normalized_title = normalize(title)
    if normalized_query == normalized_title:
        return MatchKind.EXACT
    if normalized_query in normalized_title or normalized_title in normalized_query:
        return MatchKind.PARTIAL
    return MatchKind.NONE


# Hey future me - candidate order is Discogs' relevance order and we keep it!
# Two passes: an exact hit anywhere in the list beats a partial hit earlier in the list,
# but within a pass the first one wins. No fuzzy scoring, no re-ranking.
def find_best_artist_match(
    artist_name: str, candidates: Sequence[SearchCandidate]
) -> SearchCandidate | None:
    """Pick the artist search hit that best matches the requested name.

    Args:
        artist_name: Artist name as we know it (from the streaming library)
        candidates: Search hits in the order Discogs returned them

    Returns:
        First exact match, else first partial match, else None
    """
    for candidate in candidates:
        if classify_title_match(artist_name, candidate.title) is MatchKind.EXACT:
            logger.info("Found exact artist match: %s", candidate.title)
            return candidate

    for candidate in candidates:
        if classify_title_match(artist_name, candidate.title) is MatchKind.PARTIAL:
            logger.info("Found partial artist match: %s", candidate.title)
            return candidate

    return None


__all__ = ["MatchKind", "classify_title_match", "find_best_artist_match"]
