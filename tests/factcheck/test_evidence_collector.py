"""Tests for EvidenceCollector search, filtering and ordering."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from placecheck.evidence.schemas import SourceQuality
from placecheck.factcheck.evidence_collector import EvidenceCollector
from placecheck.providers.base import OpenedPage, SearchHit
from placecheck.providers.memory import MemoryWebSearch


ACCESS_DATE = "2024-03-01"


def _hit(url: str, title: str = "Result", snippet: str | None = "Snippet.", publish_date: str | None = None) -> SearchHit:
    return SearchHit(title=title, url=url, snippet=snippet, publish_date=publish_date)


class TestCollect:
    @pytest.mark.asyncio
    async def test_evidence_is_stamped_and_classified(self):
        search = MemoryWebSearch(
            {"ungargasse": [_hit("https://www.wien.gv.at/a", publish_date="2023-05-01T10:00:00Z")]}
        )
        collector = EvidenceCollector(search, min_sources=2)

        collection = await collector.collect(["Ungargasse 5"], access_date=ACCESS_DATE)

        assert len(collection.evidence) == 1
        item = collection.evidence[0]
        assert item.access_date == ACCESS_DATE
        assert item.source_quality == SourceQuality.HIGH
        assert item.publish_date.startswith("2023-05-01")
        assert collection.notes == []

    @pytest.mark.asyncio
    async def test_sorted_high_to_low_quality(self):
        search = MemoryWebSearch(
            default=[
                _hit("https://someone.blogspot.com/x"),
                _hit("https://example.com/y"),
                _hit("https://www.wikidata.org/wiki/Q1"),
            ]
        )
        collector = EvidenceCollector(search, min_sources=2)

        collection = await collector.collect(["q"], access_date=ACCESS_DATE)

        qualities = [e.source_quality for e in collection.evidence]
        assert qualities == [SourceQuality.HIGH, SourceQuality.MEDIUM, SourceQuality.LOW]

    @pytest.mark.asyncio
    async def test_repeated_host_skipped_until_threshold(self):
        search = MemoryWebSearch(
            default=[
                _hit("https://example.com/1"),
                _hit("https://example.com/2"),
                _hit("https://other.org/1"),
                _hit("https://example.com/3"),
            ]
        )
        collector = EvidenceCollector(search, min_sources=2)

        collection = await collector.collect(["q"], access_date=ACCESS_DATE)

        urls = [e.url for e in collection.evidence]
        assert urls == ["https://example.com/1", "https://other.org/1", "https://example.com/3"]

    @pytest.mark.asyncio
    async def test_duplicate_urls_across_queries(self):
        search = MemoryWebSearch(default=[_hit("https://example.com/a#top"), _hit("https://example.com/a")])
        collector = EvidenceCollector(search, min_sources=1)

        collection = await collector.collect(["q1", "q2"], access_date=ACCESS_DATE)

        assert [e.url for e in collection.evidence] == ["https://example.com/a"]

    @pytest.mark.asyncio
    async def test_stops_at_item_limit(self):
        search = MemoryWebSearch(default=[_hit(f"https://site{i}.example/") for i in range(10)])
        collector = EvidenceCollector(search, min_sources=1)

        collection = await collector.collect(["q1", "q2"], access_date=ACCESS_DATE)

        assert collector.item_limit == 3
        assert len(collection.evidence) == 3
        assert len(search.queries) == 1

    @pytest.mark.asyncio
    async def test_invalid_urls_are_skipped(self):
        search = MemoryWebSearch(default=[_hit("not a url"), _hit("https://example.com/ok")])
        collector = EvidenceCollector(search, min_sources=1)

        collection = await collector.collect(["q"], access_date=ACCESS_DATE)

        assert [e.url for e in collection.evidence] == ["https://example.com/ok"]

    @pytest.mark.asyncio
    async def test_recency_is_forwarded(self):
        search = MemoryWebSearch()
        collector = EvidenceCollector(search)

        await collector.collect(["q"], access_date=ACCESS_DATE, recency_days=30)

        assert search.queries == [("q", 30)]


class TestFailures:
    @pytest.mark.asyncio
    async def test_failed_search_becomes_note(self):
        search = AsyncMock()
        search.search = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        collector = EvidenceCollector(search, min_sources=2)

        collection = await collector.collect(["first", "second"], access_date=ACCESS_DATE)

        assert collection.evidence == []
        assert collection.notes == [
            'Search failed for query "first": RuntimeError',
            'Search failed for query "second": RuntimeError',
        ]

    @pytest.mark.asyncio
    async def test_later_queries_still_run_after_failure(self):
        search = AsyncMock()
        search.search = AsyncMock(
            side_effect=[RuntimeError("boom"), [_hit("https://www.wien.gv.at/x")]]
        )
        collector = EvidenceCollector(search, min_sources=2)

        collection = await collector.collect(["first", "second"], access_date=ACCESS_DATE)

        assert len(collection.evidence) == 1
        assert len(collection.notes) == 1

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        search = AsyncMock()
        search.search = AsyncMock(side_effect=asyncio.CancelledError())
        collector = EvidenceCollector(search)

        with pytest.raises(asyncio.CancelledError):
            await collector.collect(["q"], access_date=ACCESS_DATE)


class TestOpenPages:
    @pytest.mark.asyncio
    async def test_snippet_backfilled_from_page(self):
        url = "https://example.com/haus"
        search = MemoryWebSearch(
            default=[_hit(url, snippet=None)],
            pages={
                url: (
                    "<html><head><script>var x = 1;</script></head><body>"
                    "<nav>Home</nav><p>Welcome to our site. "
                    "Ungargasse 5 was completed in 1871.</p></body></html>"
                )
            },
        )
        collector = EvidenceCollector(search, min_sources=1, open_pages=True)

        collection = await collector.collect(
            ["q"], access_date=ACCESS_DATE, keywords=["Ungargasse", "1871"]
        )

        assert collection.evidence[0].snippet == "Ungargasse 5 was completed in 1871."
        assert search.opened == [url]

    @pytest.mark.asyncio
    async def test_existing_snippets_are_not_refetched(self):
        search = MemoryWebSearch(default=[_hit("https://example.com/a", snippet="Already here.")])
        collector = EvidenceCollector(search, min_sources=1, open_pages=True)

        await collector.collect(["q"], access_date=ACCESS_DATE, keywords=["x"])

        assert search.opened == []

    @pytest.mark.asyncio
    async def test_open_failure_keeps_item(self):
        search = AsyncMock()
        search.search = AsyncMock(return_value=[_hit("https://example.com/a", snippet=None)])
        search.open_url = AsyncMock(side_effect=RuntimeError("timeout"))
        collector = EvidenceCollector(search, min_sources=1, open_pages=True)

        collection = await collector.collect(["q"], access_date=ACCESS_DATE, keywords=["x"])

        assert len(collection.evidence) == 1
        assert collection.evidence[0].snippet is None

    @pytest.mark.asyncio
    async def test_closed_page_keeps_item(self):
        search = AsyncMock()
        search.search = AsyncMock(return_value=[_hit("https://example.com/a", snippet=None)])
        search.open_url = AsyncMock(return_value=OpenedPage(ok=False, final_url="https://example.com/a"))
        collector = EvidenceCollector(search, min_sources=1, open_pages=True)

        collection = await collector.collect(["q"], access_date=ACCESS_DATE, keywords=["x"])

        assert collection.evidence[0].snippet is None
