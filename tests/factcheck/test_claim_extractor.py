"""Tests for rule-based claim extraction."""

import pytest

from placecheck.factcheck.claim_extractor import (
    ClaimExtractor,
    detect_address,
    detect_subject,
    find_year,
    normalize_claim,
    normalize_dates,
    to_ordinal,
)


@pytest.fixture
def extractor() -> ClaimExtractor:
    return ClaimExtractor(locality="Vienna", locality_aliases=["Vienna", "Wien"], min_claims=4)


class TestHelpers:
    def test_detect_address(self):
        assert detect_address("Beethoven lived at Ungargasse 5 for a while") == "Ungargasse 5"
        assert detect_address("The house at Am Hof 2a is old") == "Am Hof 2a"
        assert detect_address("no address here") is None

    def test_detect_subject(self):
        assert detect_subject("Ungargasse 5 was completed in 1871") == "Ungargasse 5"
        assert detect_subject("Beethoven lived there") == "Beethoven"
        assert detect_subject("served as a hospital") is None

    def test_find_year(self):
        assert find_year("completed in 1871") == "1871"
        assert find_year("the 3rd district") is None

    @pytest.mark.parametrize(
        "n,expected",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (21, "21st")],
    )
    def test_to_ordinal(self, n, expected):
        assert to_ordinal(n) == expected

    def test_normalize_dates(self):
        assert normalize_dates("opened on 1.2.1871") == "opened on 1871-02-01"
        assert normalize_dates("opened on 3 March 1871") == "opened on 1871-03-03"
        assert normalize_dates("eröffnet am 1. Mai 1900") == "eröffnet am 1900-05-01"

    def test_normalize_claim(self):
        assert normalize_claim("  it’s   there.  ") == "It's there"
        assert normalize_claim("...") == ""


class TestExtract:
    def test_empty_input_yields_no_claims(self, extractor):
        assert extractor.extract("") == []
        assert extractor.extract("   \n\t ") == []

    @pytest.mark.parametrize("paragraph", ["...", "  ...  ", ";;"])
    def test_punctuation_only_input_is_kept_as_one_claim(self, extractor, paragraph):
        assert extractor.extract(paragraph) == [paragraph.strip()]

    def test_completion_and_former_use(self, extractor):
        claims = extractor.extract(
            "Ungargasse 5 was completed in 1871 and served as the Rothschild Hospital."
        )
        assert claims == [
            "Ungargasse 5 was completed in 1871",
            "The completion year of Ungargasse 5 was 1871",
            "Ungargasse 5 served as the Rothschild Hospital",
            "The Rothschild Hospital was located at Ungargasse 5",
        ]

    def test_district_and_residence(self, extractor):
        claims = extractor.extract(
            "Ungargasse 5 is in Vienna's 3rd district and Beethoven lived there."
        )
        assert claims == [
            "Ungargasse 5 is in Vienna's 3rd district",
            "Ungargasse 5 is located in Vienna",
            "Ungargasse 5 is part of Vienna's 3rd district",
            "Beethoven lived at Ungargasse 5",
            "Beethoven resided at Ungargasse 5",
        ]

    def test_german_bezirk_is_rendered_as_ordinal_district(self, extractor):
        claims = extractor.extract("Ungargasse 5 liegt im 3. Bezirk von Wien.")
        assert "Ungargasse 5 is part of Vienna's 3rd district" in claims
        assert "Ungargasse 5 is located in Vienna" in claims

    def test_leading_it_is_anchored(self, extractor):
        claims = extractor.extract("Ungargasse 5 is a listed house. It was built in 1871.")
        assert "Ungargasse 5 was built in 1871" in claims

    def test_served_as_needs_a_building_subject(self, extractor):
        claims = extractor.extract("Mozart served as a court composer.")
        assert not any("was located at" in c for c in claims)

    def test_claims_are_unique_case_insensitively(self, extractor):
        claims = extractor.extract("Ungargasse 5 is old. ungargasse 5 is old.")
        lowered = [c.lower() for c in claims]
        assert len(lowered) == len(set(lowered))

    def test_claim_count_bounds(self, extractor):
        text = ". ".join(f"Ungargasse {i} was completed in 18{i:02d}" for i in range(1, 20))
        claims = extractor.extract(text)
        assert 1 <= len(claims) <= 12

    def test_unparseable_text_falls_back_to_whole_paragraph(self):
        extractor = ClaimExtractor(min_claims=0)
        assert extractor.extract("lovely weather") == ["Lovely weather"]

    def test_short_lists_are_padded(self, extractor):
        claims = extractor.extract("Beethoven lived at Ungargasse 5.")
        assert claims[0] == "Beethoven lived at Ungargasse 5"
        assert "Ungargasse 5 is associated with Vienna" in claims

    def test_padding_can_be_disabled(self):
        extractor = ClaimExtractor(min_claims=0)
        claims = extractor.extract("Beethoven lived at Ungargasse 5.")
        assert claims == ["Beethoven lived at Ungargasse 5", "Beethoven resided at Ungargasse 5"]

    def test_extraction_is_deterministic(self, extractor):
        text = "Ungargasse 5 is in Vienna's 3rd district and Beethoven lived there."
        assert extractor.extract(text) == extractor.extract(text)
