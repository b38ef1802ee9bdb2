"""Evidence collection for one claim via a web search tool.

Queries run sequentially so evidence order (and with it every downstream
tie-break) is deterministic. A failed search is recorded as a note and the
next query is tried; cancellation propagates.
"""

from typing import Optional, Sequence

import structlog
from yarl import URL

from placecheck.config.settings import settings
from placecheck.evidence.merge import canonicalize_url, merge_evidence
from placecheck.evidence.quality import SourceQualityClassifier
from placecheck.evidence.schemas import Evidence
from placecheck.factcheck.schemas import EvidenceCollection
from placecheck.providers.base import WebSearchTool
from placecheck.utils.dates import parse_publish_date
from placecheck.utils.text import best_passage, html_to_text


class EvidenceCollector:
    """
    Gather, classify and deduplicate search hits for a claim.

    Until ``min_sources`` items are held, a second hit from an already-seen
    host is skipped so the threshold is met by independent sources.
    Collection stops at ``max(2 * min_sources, min_sources + 2)`` items.

    Attributes:
        search: Web search tool
        classifier: Source-quality classifier
        min_sources: Corroboration threshold
        max_results: Hits requested per query
        open_pages: Fetch pages of hits without a snippet to extract one
    """

    def __init__(
        self,
        search: WebSearchTool,
        classifier: Optional[SourceQualityClassifier] = None,
        min_sources: Optional[int] = None,
        max_results: int = 10,
        open_pages: bool = False,
    ) -> None:
        self.search = search
        self.classifier = classifier or SourceQualityClassifier()
        self.min_sources = max(1, min_sources if min_sources is not None else settings.min_sources)
        self.max_results = max_results
        self.open_pages = open_pages
        self._logger = structlog.get_logger().bind(component="EvidenceCollector")

    @property
    def item_limit(self) -> int:
        return max(self.min_sources * 2, self.min_sources + 2)

    async def collect(
        self,
        queries: Sequence[str],
        access_date: str,
        recency_days: Optional[int] = None,
        keywords: Sequence[str] = (),
    ) -> EvidenceCollection:
        """
        Run ``queries`` in order and return merged, quality-sorted evidence.

        Args:
            queries: Search queries, most specific first
            access_date: ISO date stamped on every evidence item
            recency_days: Optional search freshness window
            keywords: Claim keywords, used to pick snippets from opened pages

        Returns:
            EvidenceCollection with evidence sorted high -> low quality
            (stable) and notes for failed searches
        """
        evidence: list[Evidence] = []
        notes: list[str] = []
        seen_urls: set[str] = set()
        seen_hosts: set[str] = set()

        for query in queries:
            if len(evidence) >= self.item_limit:
                break
            try:
                hits = await self.search.search(
                    query,
                    recency_days=recency_days,
                    max_results=self.max_results,
                )
            except Exception as e:
                self._logger.warning("search_failed", query=query[:60], error=str(e))
                notes.append(f'Search failed for query "{query}": {type(e).__name__}')
                continue

            for hit in hits or []:
                raw_url = getattr(hit, "url", None)
                url = canonicalize_url(raw_url) if isinstance(raw_url, str) else None
                if not url or url in seen_urls:
                    continue
                host = URL(url).raw_host or ""
                if host and host in seen_hosts and len(evidence) < self.min_sources:
                    continue

                title = (hit.title or "").strip() or url
                assessment = self.classifier.classify(url, title)
                evidence.append(
                    Evidence(
                        title=title,
                        url=url,
                        publish_date=parse_publish_date(hit.publish_date),
                        access_date=access_date,
                        snippet=(hit.snippet or "").strip() or None,
                        source_quality=assessment.quality,
                        why_trustworthy=assessment.why,
                    )
                )
                seen_urls.add(url)
                if host:
                    seen_hosts.add(host)
                if len(evidence) >= self.item_limit:
                    break

        if self.open_pages:
            evidence = [await self._backfill_snippet(item, keywords) for item in evidence]

        merged = merge_evidence(evidence)
        merged.sort(key=lambda item: item.source_quality.rank, reverse=True)
        self._logger.debug(
            "evidence_collected",
            queries=len(queries),
            evidence=len(merged),
            failures=len(notes),
        )
        return EvidenceCollection(evidence=merged, notes=notes)

    async def _backfill_snippet(self, item: Evidence, keywords: Sequence[str]) -> Evidence:
        """Open the page of a snippet-less item and take its most relevant sentence."""
        if item.snippet:
            return item
        try:
            page = await self.search.open_url(item.url)
        except Exception as e:
            self._logger.debug("open_url_failed", url=item.url, error=str(e))
            return item
        if not page.ok or not page.text:
            return item
        passage = best_passage(html_to_text(page.text), keywords)
        return item.model_copy(update={"snippet": passage}) if passage else item
