"""Tests for album title normalization and variant generation."""

import pytest

from albumrater.domain.value_objects import (
    ALBUM_CLEANUP_RULES,
    generate_variants,
    light_clean,
    normalize,
)


def _rule(name: str):
    return next(rule for rule in ALBUM_CLEANUP_RULES if rule.name == name)


class TestNormalize:
    """Test the aggressive comparison form."""

    def test_remastered_suffix_and_case_collapse(self) -> None:
        """Parenthetical noise and case don't matter."""
        assert normalize("Abbey Road (Remastered)") == normalize("ABBEY ROAD")
        assert normalize("ABBEY ROAD") == "abbey road"

    def test_strips_brackets_punctuation_and_whitespace(self) -> None:
        """Brackets, punctuation and whitespace runs are removed."""
        assert normalize("  Sgt. Pepper's   Lonely Hearts [Deluxe] ") == (
            "sgt peppers lonely hearts"
        )

    def test_keeps_unicode_letters(self) -> None:
        """Non-ASCII word characters survive."""
        assert normalize("Björk - Homogenic") == "björk homogenic"

    @pytest.mark.parametrize("text", ["", "   ", "(Live)", "!!!"])
    def test_noise_only_input_is_empty(self, text: str) -> None:
        """Inputs made only of noise normalize to an empty string."""
        assert normalize(text) == ""


class TestLightClean:
    """Test the search-query form."""

    def test_keeps_case_and_punctuation(self) -> None:
        """Only (...) and [...] are removed."""
        assert light_clean("OK Computer [OKNOTOK] (Remastered)") == "OK Computer"
        assert light_clean("Sgt. Pepper's") == "Sgt. Pepper's"


class TestGenerateVariants:
    """Test the cleanup cascade."""

    def test_deluxe_remaster_cascade(self) -> None:
        """Each rule works on the previous result, most specific first."""
        variants = generate_variants("The Wall - Deluxe Edition (2011 Remaster)")

        assert variants == [
            "The Wall - Deluxe Edition (2011 Remaster)",
            "The Wall - Deluxe Edition",
            "The Wall",
            "Wall",
        ]

    def test_first_variant_is_original(self) -> None:
        """The untouched name always comes first."""
        assert generate_variants("Kid A")[0] == "Kid A"

    def test_plain_title_has_single_variant(self) -> None:
        """Nothing to clean means no extra variants."""
        assert generate_variants("Kid A") == ["Kid A"]

    def test_no_duplicates_and_no_empty_variants(self) -> None:
        """A rule that empties the name is skipped."""
        variants = generate_variants("1989 (Taylor's Version)")

        assert variants == ["1989 (Taylor's Version)", "1989"]
        assert len(variants) == len(set(variants))
        assert all(variants)

    def test_live_at_venue_removed(self) -> None:
        """Live performance qualifiers are stripped."""
        variants = generate_variants("Nirvana Unplugged in New York")

        assert variants[-1] == "Nirvana"

    def test_year_suffix_removed(self) -> None:
        """A trailing year (with dash) and everything after it goes."""
        assert "Abbey Road" in generate_variants("Abbey Road - 2019 Mix")


class TestCleanupRules:
    """Each rule is testable on its own."""

    def test_dash_edition(self) -> None:
        """Dash-introduced edition noise is removed."""
        assert _rule("dash_edition").apply("Rumours - Super Deluxe") == "Rumours - Super Deluxe"
        assert _rule("dash_edition").apply("Rumours - Expanded Edition") == "Rumours"

    def test_edition_suffix(self) -> None:
        """Edition/Version/Release suffixes are removed."""
        assert _rule("edition_suffix").apply("Nevermind Deluxe Edition") == "Nevermind"

    def test_performance_venue(self) -> None:
        """Live at/from/in/on qualifiers are removed."""
        assert _rule("performance_venue").apply("Frampton Live at Winterland") == (
            "Frampton"
        )

    def test_leading_article_only_at_start(self) -> None:
        """Only a leading 'The ' is removed."""
        assert _rule("leading_article").apply("The Wall") == "Wall"
        assert _rule("leading_article").apply("Meet The Beatles") == "Meet The Beatles"
