"""Tests for source-quality classification."""

import pytest

from placecheck.config.source_quality import TITLE_ESCALATION_WHY, UNPARSEABLE_WHY
from placecheck.evidence.quality import SourceQualityClassifier, classify_source
from placecheck.evidence.schemas import SourceQuality


@pytest.fixture
def classifier() -> SourceQualityClassifier:
    return SourceQualityClassifier()


class TestTiers:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.wien.gv.at/bezirke/landstrasse/",
            "https://www.gov.uk/guidance",
            "https://data.gob.es/",
        ],
    )
    def test_government_domains_are_high(self, classifier, url):
        result = classifier.classify(url)
        assert result.quality == SourceQuality.HIGH
        assert result.why == "Official government or municipal domain"

    def test_wikidata_is_high(self, classifier):
        result = classifier.classify("https://www.wikidata.org/wiki/Q123456")
        assert result.quality == SourceQuality.HIGH
        assert "Wikidata" in result.why

    def test_institution_hosts_are_high(self, classifier):
        assert classifier.classify("https://whc.unesco.org/en/list/1033").quality == SourceQuality.HIGH
        assert classifier.classify("https://www.example-museum.at/x").quality == SourceQuality.HIGH

    def test_encyclopedia_is_medium(self, classifier):
        result = classifier.classify("https://de.wikipedia.org/wiki/Haus_Beispiel")
        assert result.quality == SourceQuality.MEDIUM
        assert result.why == "Community-maintained encyclopedia"

    def test_osm_hosts_are_medium(self, classifier):
        for url in (
            "https://nominatim.openstreetmap.org/search?q=x",
            "https://overpass-api.de/api/interpreter",
        ):
            assert classifier.classify(url).quality == SourceQuality.MEDIUM

    def test_self_published_is_low(self, classifier):
        assert classifier.classify("https://viennawalks.blogspot.com/2020/01/x.html").quality == SourceQuality.LOW
        assert classifier.classify("https://medium.com/@someone/post").quality == SourceQuality.LOW

    def test_academic_is_medium(self, classifier):
        result = classifier.classify("https://www.tuwien.ac.at/")
        assert result.quality == SourceQuality.MEDIUM
        assert result.why == "Academic or educational domain"

    def test_unknown_host_defaults_to_medium(self, classifier):
        result = classifier.classify("https://example.com/page")
        assert result.quality == SourceQuality.MEDIUM
        assert result.why == "General independent source"


class TestMalformedUrls:
    @pytest.mark.parametrize("url", ["", "not a url", "/relative/path", "http://[::1"])
    def test_fails_closed_to_low(self, classifier, url):
        result = classifier.classify(url)
        assert result.quality == SourceQuality.LOW
        assert result.why == UNPARSEABLE_WHY


class TestTitleEscalation:
    def test_institutional_title_promotes_unknown_host(self, classifier):
        result = classifier.classify("https://example.com/haus", "Stadt Wien - Amt für Kultur")
        assert result.quality == SourceQuality.HIGH
        assert result.why == TITLE_ESCALATION_WHY

    def test_encyclopedia_is_not_promoted(self, classifier):
        result = classifier.classify("https://en.wikipedia.org/wiki/X", "Official museum page")
        assert result.quality == SourceQuality.MEDIUM

    def test_low_is_not_promoted(self, classifier):
        result = classifier.classify("https://x.wordpress.com/post", "Official museum blog")
        assert result.quality == SourceQuality.LOW

    def test_unrelated_title_leaves_medium(self, classifier):
        result = classifier.classify("https://example.com/haus", "Holiday photos")
        assert result.quality == SourceQuality.MEDIUM

    @pytest.mark.parametrize(
        "title",
        [
            "Stadtpark Reiseblog",
            "Amtrak travel tips",
            "Museumsquartier cafe guide",
            "Archived holiday photos",
            "Officially the best schnitzel",
        ],
    )
    def test_keyword_prefixes_do_not_promote(self, classifier, title):
        result = classifier.classify("https://example.com/x", title)
        assert result.quality == SourceQuality.MEDIUM
        assert result.why == "General independent source"

    @pytest.mark.parametrize(
        "title",
        ["Magistrat der Stadt Wien", "Bundesdenkmalamt: Denkmalliste", "WIEN MUSEUM online"],
    )
    def test_whole_word_keywords_promote(self, classifier, title):
        result = classifier.classify("https://www.example.at/x", title)
        assert result.quality == SourceQuality.HIGH
        assert result.why == TITLE_ESCALATION_WHY

    def test_escalation_can_be_disabled(self):
        classifier = SourceQualityClassifier(title_keywords=[])
        result = classifier.classify("https://example.com/haus", "Official museum")
        assert result.quality == SourceQuality.MEDIUM


class TestCustomTiers:
    def test_custom_tier_table(self):
        classifier = SourceQualityClassifier(
            tiers=[("trusted", "high", (r"(^|\.)example\.org$",), "Trusted partner")]
        )
        result = classifier.classify("https://docs.example.org/a")
        assert result.quality == SourceQuality.HIGH
        assert result.why == "Trusted partner"
        assert classifier.classify("https://www.wien.gv.at/").quality == SourceQuality.MEDIUM


def test_classify_source_uses_shared_classifier():
    assert classify_source("https://www.wien.gv.at/").quality == SourceQuality.HIGH
