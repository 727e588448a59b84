"""Tests for title matching."""

import pytest

from albumrater.application.services.title_matcher import (
    MatchKind,
    classify_title_match,
    find_best_artist_match,
)
from albumrater.domain.entities import SearchCandidate


class TestClassifyTitleMatch:
    """Test exact/partial classification."""

    @pytest.mark.parametrize(
        ("query", "title", "expected"),
        [
            ("OK Computer", "ok computer", MatchKind.EXACT),
            ("Abbey Road (Remastered)", "ABBEY ROAD", MatchKind.EXACT),
            ("Kid A", "Kid A Mnesia", MatchKind.PARTIAL),
            ("Kid A Mnesia", "Kid A", MatchKind.PARTIAL),
            ("Kid A", "Amnesiac", MatchKind.NONE),
            ("!!!", "!!!", MatchKind.EXACT),
            ("÷", "÷", MatchKind.EXACT),
            ("Anything", "", MatchKind.PARTIAL),
        ],
    )
    def test_classification(self, query: str, title: str, expected: MatchKind) -> None:
        """Titles are compared on their normalized forms."""
        assert classify_title_match(query, title) is expected


class TestFindBestArtistMatch:
    """Test two-pass artist selection."""

    def test_exact_match_beats_earlier_partial(self) -> None:
        """Pass 1 scans the whole list before partial matches are considered."""
        candidates = [
            SearchCandidate(1, "Radiohead Tribute Band"),
            SearchCandidate(2, "Radiohead"),
        ]

        assert find_best_artist_match("Radiohead", candidates) == candidates[1]

    def test_first_partial_match_wins(self) -> None:
        """Without an exact hit, the first substring match is taken."""
        candidates = [
            SearchCandidate(1, "Portishead"),
            SearchCandidate(2, "The Beatles (2)"),
            SearchCandidate(3, "Beatles Revival"),
        ]

        match = find_best_artist_match("Beatles", candidates)

        assert match == SearchCandidate(2, "The Beatles (2)")

    def test_containment_in_either_direction(self) -> None:
        """The query may also contain the candidate title."""
        candidates = [SearchCandidate(7, "Prince")]

        assert find_best_artist_match("Prince and the Revolution", candidates) == candidates[0]

    def test_no_match_returns_none(self) -> None:
        """Unrelated candidates yield None."""
        candidates = [SearchCandidate(1, "Portishead"), SearchCandidate(2, "Massive Attack")]

        assert find_best_artist_match("Radiohead", candidates) is None

    def test_punctuation_only_artist_matches_exactly(self) -> None:
        """"!!!" normalizes to "" and is still found by the exact pass."""
        candidates = [SearchCandidate(2, "Other"), SearchCandidate(1, "!!!")]

        assert find_best_artist_match("!!!", candidates) == SearchCandidate(1, "!!!")

    def test_empty_candidates(self) -> None:
        """Nothing to choose from yields None."""
        assert find_best_artist_match("Radiohead", []) is None
