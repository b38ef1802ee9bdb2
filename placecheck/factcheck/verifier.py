"""Paragraph verification: the fact-check pipeline entry point.

Verification flow per claim:
1. Extract self-contained claims (ClaimExtractor)
2. Build ranked search queries (QueryBuilder)
3. Collect, classify and merge evidence (EvidenceCollector)
4. Decide a verdict (FreeTextVerdictPolicy)
5. Aggregate claim verdicts into the paragraph verdict (aggregate_claims)

Claims are processed sequentially so evidence ordering is reproducible.

Usage:
    from placecheck.factcheck import ParagraphVerifier
    from placecheck.providers import BingWebSearch

    async with BingWebSearch() as search:
        verifier = ParagraphVerifier(search=search)
        result = await verifier.verify("Ungargasse 5 was completed in 1871.")
"""

from typing import Optional

from placecheck.config.settings import settings
from placecheck.evidence.verdict import FreeTextVerdictPolicy, VerdictPolicy
from placecheck.factcheck.aggregator import aggregate_claims
from placecheck.factcheck.claim_extractor import ClaimExtractor
from placecheck.factcheck.evidence_collector import EvidenceCollector
from placecheck.factcheck.query_builder import QueryBuilder, extract_keywords, infer_recency_days
from placecheck.factcheck.schemas import ClaimResult, FactCheckResult
from placecheck.providers.base import WebSearchTool
from placecheck.utils.dates import NowLike, resolve_access_date
from placecheck.utils.logging import get_structured_logger, new_run_id


class ParagraphVerifier:
    """Verify every claim in a narrative paragraph against web search results."""

    def __init__(
        self,
        search: WebSearchTool,
        min_sources: Optional[int] = None,
        extractor: Optional[ClaimExtractor] = None,
        query_builder: Optional[QueryBuilder] = None,
        collector: Optional[EvidenceCollector] = None,
        policy: Optional[VerdictPolicy] = None,
        timezone: Optional[str] = None,
        open_pages: bool = False,
    ) -> None:
        """Initialize ParagraphVerifier.

        Args:
            search: Web search tool used for every claim.
            min_sources: Independent sources needed per claim (default from settings).
            extractor: Claim extractor.
            query_builder: Query builder.
            collector: Evidence collector; built from ``search`` if omitted.
            policy: Verdict policy (FreeTextVerdictPolicy by default).
            timezone: Timezone for access dates (default from settings).
            open_pages: Fetch pages of snippet-less hits to extract snippets.
        """
        self.min_sources = max(1, min_sources if min_sources is not None else settings.min_sources)
        self.extractor = extractor or ClaimExtractor()
        self.query_builder = query_builder or QueryBuilder()
        self.collector = collector or EvidenceCollector(
            search,
            min_sources=self.min_sources,
            open_pages=open_pages,
        )
        self.policy = policy or FreeTextVerdictPolicy()
        self.timezone = timezone or settings.timezone

    async def verify(self, paragraph: str, now: NowLike = None) -> FactCheckResult:
        """
        Verify ``paragraph``.

        Args:
            paragraph: Narrative text about a place
            now: Fixed "now" (ISO string or datetime) for deterministic access dates

        Returns:
            FactCheckResult; an empty paragraph yields no claims and an
            UNCERTAIN verdict with confidence 0.
        """
        logger = get_structured_logger("ParagraphVerifier", run_id=new_run_id())
        question = (paragraph or "").strip()
        access_date = resolve_access_date(now, self.timezone)
        claim_texts = self.extractor.extract(question)
        logger.info("verification_started", claims=len(claim_texts), min_sources=self.min_sources)

        claims: list[ClaimResult] = []
        gaps: list[str] = []
        for text in claim_texts:
            queries = self.query_builder.build(text)
            keywords = extract_keywords(text)
            collection = await self.collector.collect(
                queries,
                access_date=access_date,
                recency_days=infer_recency_days(text, now),
                keywords=keywords,
            )
            decision = self.policy.decide(collection.evidence, self.min_sources, keywords)

            gaps.extend(collection.notes)
            if len(collection.evidence) < self.min_sources:
                gaps.append(f'Claim "{text}" lacks sufficient independent sources.')

            claims.append(
                ClaimResult(
                    text=text,
                    verdict=decision.verdict,
                    confidence=decision.confidence,
                    evidence=collection.evidence,
                    notes=decision.notes,
                )
            )
            logger.info(
                "claim_verified",
                claim=text[:60],
                verdict=decision.verdict.value,
                confidence=decision.confidence,
                evidence=len(collection.evidence),
            )

        overall = aggregate_claims(claims)
        gaps = list(dict.fromkeys(gaps))
        logger.info(
            "verification_complete",
            verdict=overall.verdict.value,
            confidence=overall.confidence,
            gaps=len(gaps),
        )
        return FactCheckResult(
            question=question,
            verdict=overall.verdict,
            confidence=overall.confidence,
            claims=claims,
            gaps_or_caveats=gaps or None,
        )
