"""Tests for evidence canonicalization and merging."""

from placecheck.evidence.merge import (
    ELLIPSIS,
    canonical_key,
    canonicalize_url,
    merge_evidence,
    trim_words,
)
from placecheck.evidence.schemas import Evidence, SourceQuality


# ── Helpers ──────────────────────────────────────────────────────────────


def _make_evidence(
    url: str = "https://example.com/page",
    quality: SourceQuality = SourceQuality.MEDIUM,
    snippet: str | None = None,
    publish_date: str | None = None,
    title: str = "Example",
) -> Evidence:
    return Evidence(
        title=title,
        url=url,
        publish_date=publish_date,
        access_date="2024-03-01",
        snippet=snippet,
        source_quality=quality,
        why_trustworthy="General independent source",
    )


class TestTrimWords:
    def test_short_text_is_collapsed_only(self):
        assert trim_words("  Ungargasse   5  ", 25) == "Ungargasse 5"

    def test_long_text_is_cut_with_ellipsis(self):
        text = " ".join(f"w{i}" for i in range(30))
        trimmed = trim_words(text, 25)
        assert len(trimmed.split()) == 25
        assert trimmed.endswith(ELLIPSIS)

    def test_trimming_is_idempotent(self):
        text = " ".join(f"w{i}" for i in range(30))
        once = trim_words(text, 25)
        assert trim_words(once, 25) == once


class TestCanonicalization:
    def test_fragment_is_stripped(self):
        assert canonicalize_url("https://example.com/a#section") == "https://example.com/a"

    def test_query_is_kept(self):
        assert canonicalize_url("https://example.com/a?q=1") == "https://example.com/a?q=1"

    def test_relative_url_is_rejected(self):
        assert canonicalize_url("/a/b") is None
        assert canonicalize_url("") is None

    def test_key_ignores_scheme_query_and_host_case(self):
        assert canonical_key("https://Example.com/a?x=1") == canonical_key("http://example.com/a?y=2")

    def test_key_of_unparseable_url_is_the_url(self):
        assert canonical_key("not a url") == "not a url"
        assert canonical_key("http://[::1") == "http://[::1"

    def test_host_is_lower_cased(self):
        assert canonicalize_url("https://Example.COM/a#x") == "https://example.com/a"

    def test_idna_host_spellings_share_a_key(self):
        assert canonical_key("https://müller.at/haus") == canonical_key("https://xn--mller-kva.at/haus")

    def test_percent_encoded_path_shares_a_key(self):
        assert canonical_key("https://example.at/Landstraße") == canonical_key("https://example.at/Landstra%C3%9Fe")

    def test_only_non_default_ports_are_kept(self):
        assert canonical_key("https://example.com:443/a") == "example.com/a"
        assert canonical_key("https://example.com:8443/a") == "example.com:8443/a"


class TestMergeEvidence:
    def test_duplicates_collapse_to_one(self):
        merged = merge_evidence(
            [
                _make_evidence("https://example.com/a?utm=1"),
                _make_evidence("https://example.com/a?utm=2"),
            ]
        )
        assert len(merged) == 1

    def test_higher_quality_duplicate_wins(self):
        merged = merge_evidence(
            [
                _make_evidence("https://example.com/a", SourceQuality.LOW, title="Low"),
                _make_evidence("https://example.com/a", SourceQuality.HIGH, title="High"),
            ]
        )
        assert merged[0].title == "High"
        assert merged[0].source_quality == SourceQuality.HIGH

    def test_first_seen_wins_ties(self):
        merged = merge_evidence(
            [
                _make_evidence("https://example.com/a", title="First"),
                _make_evidence("https://example.com/a", title="Second"),
            ]
        )
        assert merged[0].title == "First"

    def test_missing_fields_are_filled_from_duplicates(self):
        merged = merge_evidence(
            [
                _make_evidence("https://example.com/a", SourceQuality.HIGH),
                _make_evidence(
                    "https://example.com/a",
                    SourceQuality.LOW,
                    snippet="Built in 1871.",
                    publish_date="2020-05-01",
                ),
            ]
        )
        assert merged[0].source_quality == SourceQuality.HIGH
        assert merged[0].snippet == "Built in 1871."
        assert merged[0].publish_date == "2020-05-01"

    def test_snippets_are_trimmed(self):
        long_snippet = " ".join(["word"] * 40)
        merged = merge_evidence([_make_evidence(snippet=long_snippet)])
        assert len(merged[0].snippet.split()) == 25

    def test_first_seen_key_order(self):
        merged = merge_evidence(
            [
                _make_evidence("https://b.example/x"),
                _make_evidence("https://a.example/x"),
                _make_evidence("https://b.example/x", SourceQuality.HIGH),
            ]
        )
        assert [e.url for e in merged] == ["https://b.example/x", "https://a.example/x"]

    def test_merge_is_idempotent(self):
        items = [
            _make_evidence("https://example.com/a", snippet=" ".join(["w"] * 40)),
            _make_evidence("https://example.com/a", SourceQuality.HIGH),
            _make_evidence("https://other.org/b", publish_date="2021-01-01"),
        ]
        once = merge_evidence(items)
        assert merge_evidence(once) == once

    def test_no_two_survivors_share_a_key(self):
        items = [_make_evidence(f"https://example.com/{i % 3}#f{i}") for i in range(9)]
        merged = merge_evidence(items)
        keys = [canonical_key(e.url) for e in merged]
        assert len(keys) == len(set(keys)) == 3

    def test_empty_input(self):
        assert merge_evidence([]) == []
