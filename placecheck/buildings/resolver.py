"""Building-fact resolution: location descriptor -> provenance-backed facts.

Resolution flow:
1. Geocode the address when coordinates are missing (Geocoder)
2. Find the nearest tagged building around the point (FootprintProvider)
3. Harvest candidate facts from its tags
4. Resolve and fetch the knowledge-graph entity (KnowledgeGraphProvider)
5. Fetch the encyclopedia summary of the linked article (SummaryProvider)
6. Merge evidence per candidate and decide each candidate's verdict
7. Pick one winner per fact key; note conflicts
8. Derive the canonical block, overall verdict and prose summary

Every provider failure degrades to a note; only cancellation propagates.

Usage:
    from placecheck.buildings import BuildingFactsResolver

    async with BuildingFactsResolver() as resolver:
        result = await resolver.resolve(address="Ungargasse 5, 1030 Wien")
"""

from typing import Any, Optional
from urllib.parse import quote

from placecheck.buildings.candidates import (
    CandidateSet,
    WikipediaRef,
    format_value_for_note,
    humanize_tag_value,
    normalize_date_value,
    normalize_wikipedia_value,
)
from placecheck.buildings.schemas import (
    BuildingFact,
    BuildingFactsResult,
    BuildingQuery,
    Canonical,
    FactKey,
    build_fact,
)
from placecheck.buildings.summary import aggregate_facts, build_summary
from placecheck.config.settings import settings
from placecheck.evidence.merge import SNIPPET_MAX_WORDS, merge_evidence, trim_words
from placecheck.evidence.quality import SourceQualityClassifier
from placecheck.evidence.schemas import Decision, Evidence, SourceQuality, Verdict
from placecheck.evidence.verdict import StructuredVerdictPolicy, VerdictPolicy
from placecheck.providers.base import (
    EncyclopediaSummary,
    FootprintFeature,
    FootprintProvider,
    Geocoder,
    KnowledgeGraphFacts,
    KnowledgeGraphProvider,
    SummaryProvider,
)
from placecheck.providers.nominatim import NominatimGeocoder
from placecheck.providers.overpass import OverpassFootprintProvider
from placecheck.providers.wikidata import WikidataProvider
from placecheck.providers.wikipedia import WikipediaSummaryProvider
from placecheck.utils.dates import NowLike, parse_publish_date, resolve_access_date
from placecheck.utils.logging import get_structured_logger, new_run_id

SUMMARY_FACT_MAX_WORDS = 80
WIKIPEDIA_WHY = "Wikipedia article summary (community-maintained)."

GEOCODE_FAILED_NOTE = "Geocoding failed; proceeding with original coordinates if available."
FOOTPRINT_FAILED_NOTE = "Overpass data unavailable."
NO_FEATURE_NOTE = "No building feature found within {radius} m of the reference point."
RESOLVE_FAILED_NOTE = "Wikidata lookup from Wikipedia title failed."
FACTS_FAILED_NOTE = "Wikidata facts request failed."
SUMMARY_FAILED_NOTE = "Wikipedia summary could not be retrieved for the linked article."
NO_LOCATION_NOTE = "Location could not be resolved; no building facts gathered."
CONFLICT_FALLBACK_NOTE = "Conflicting evidence prevented a clear verdict."


class _Run:
    """Mutable state of one resolve() call."""

    def __init__(self, access_date: str, lang: str) -> None:
        self.access_date = access_date
        self.lang = lang
        self.candidates = CandidateSet()
        self.notes: dict[str, None] = {}
        self.address: Optional[str] = None
        self.lat: Optional[float] = None
        self.lon: Optional[float] = None
        self.feature: Optional[FootprintFeature] = None
        self.qid: Optional[str] = None
        self.osm_wikipedia: Optional[WikipediaRef] = None
        self.kg_facts: Optional[KnowledgeGraphFacts] = None

    def note(self, text: str) -> None:
        self.notes.setdefault(text, None)


class BuildingFactsResolver:
    """
    Resolve a building's facts from open geodata and knowledge sources.

    Providers are injected; omitted ones default to the httpx adapters,
    which the resolver then owns and closes in ``aclose()``.

    Attributes:
        geocoder: Address -> coordinates
        footprints: Nearest building element around a point
        knowledge_graph: Entity resolution and structured facts
        summaries: Encyclopedia article summaries
        min_sources: Independent sources needed per fact value
        policy: Verdict policy per candidate value
        classifier: Source-quality classifier for provider URLs
    """

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        footprints: Optional[FootprintProvider] = None,
        knowledge_graph: Optional[KnowledgeGraphProvider] = None,
        summaries: Optional[SummaryProvider] = None,
        min_sources: Optional[int] = None,
        policy: Optional[VerdictPolicy] = None,
        classifier: Optional[SourceQualityClassifier] = None,
        default_locale: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> None:
        self._owned: list[Any] = []
        self.geocoder = geocoder or self._own(NominatimGeocoder())
        self.footprints = footprints or self._own(OverpassFootprintProvider())
        self.knowledge_graph = knowledge_graph or self._own(WikidataProvider())
        self.summaries = summaries or self._own(WikipediaSummaryProvider())
        self.min_sources = max(1, min_sources if min_sources is not None else settings.min_sources)
        self.policy = policy or StructuredVerdictPolicy()
        self.classifier = classifier or SourceQualityClassifier()
        self.default_locale = default_locale or settings.default_locale
        self.timezone = timezone or settings.timezone

    def _own(self, provider: Any) -> Any:
        self._owned.append(provider)
        return provider

    async def aclose(self) -> None:
        """Close the adapters this resolver created."""
        for provider in self._owned:
            await provider.aclose()

    async def __aenter__(self) -> "BuildingFactsResolver":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def footprint_source_url(self) -> str:
        return getattr(self.footprints, "endpoint", None) or settings.overpass_endpoint

    @property
    def footprint_radius_m(self) -> int:
        return getattr(self.footprints, "radius_m", None) or settings.footprint_radius_m

    async def resolve(
        self,
        address: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        locale: Optional[str] = None,
        now: NowLike = None,
    ) -> BuildingFactsResult:
        """
        Resolve facts for the building at ``address`` or ``(lat, lon)``.

        Args:
            address: Free-form street address
            lat: Latitude; used together with ``lon`` instead of geocoding
            lon: Longitude
            locale: BCP-47-ish tag; its language part selects article languages
            now: Fixed "now" for deterministic access dates

        Returns:
            BuildingFactsResult; verdict is never FALSE. Without a resolvable
            location the result is UNCERTAIN with confidence 0 and no facts.
        """
        locale = locale or self.default_locale
        lang = (locale.split("-")[0] or locale).lower()
        query = BuildingQuery(address=address, lat=lat, lon=lon, locale=locale)
        run = _Run(resolve_access_date(now, self.timezone), lang)
        run.lat, run.lon = lat, lon
        run.address = address.strip() if address and address.strip() else None
        logger = get_structured_logger("BuildingFactsResolver", run_id=new_run_id())
        logger.info("resolution_started", has_address=bool(run.address), has_point=lat is not None)

        if (run.lat is None or run.lon is None) and run.address:
            await self._geocode(run, logger)

        if run.lat is None or run.lon is None:
            run.note(NO_LOCATION_NOTE)
            logger.info("resolution_unlocated")
            return BuildingFactsResult(
                query=query,
                canonical=Canonical(address=run.address),
                verdict=Verdict.UNCERTAIN,
                confidence=0.0,
                notes=list(run.notes),
            )

        await self._harvest_footprint(run, logger)
        await self._harvest_knowledge_graph(run, logger)
        await self._harvest_summary(run, logger)

        facts, decisions, has_conflict = self._decide(run)
        canonical = self._canonical(run, facts)
        overall = aggregate_facts(decisions, [fact.confidence for fact in facts], has_conflict)

        notes = list(run.notes)
        if not notes and overall.verdict == Verdict.MIXED:
            notes.append(CONFLICT_FALLBACK_NOTE)

        logger.info(
            "resolution_complete",
            facts=len(facts),
            verdict=overall.verdict.value,
            confidence=overall.confidence,
            conflict=has_conflict,
        )
        return BuildingFactsResult(
            query=query,
            canonical=canonical,
            summary=build_summary(facts),
            facts=facts,
            verdict=overall.verdict,
            confidence=overall.confidence,
            notes=notes or None,
        )

    # ── Evidence ──────────────────────────────────────────────────────

    def _evidence(
        self,
        run: _Run,
        title: str,
        url: str,
        snippet: Optional[str] = None,
        publish_date: Optional[str] = None,
        quality: Optional[SourceQuality] = None,
        why: Optional[str] = None,
    ) -> Evidence:
        assessment = self.classifier.classify(url)
        return Evidence(
            title=title,
            url=url,
            publish_date=publish_date,
            access_date=run.access_date,
            snippet=trim_words(snippet, SNIPPET_MAX_WORDS) if snippet else None,
            source_quality=quality or assessment.quality,
            why_trustworthy=why or assessment.why,
        )

    # ── Providers ─────────────────────────────────────────────────────

    async def _geocode(self, run: _Run, logger) -> None:
        try:
            result = await self.geocoder.geocode(run.address)
        except Exception as e:
            logger.warning("geocode_failed", error=str(e))
            run.note(GEOCODE_FAILED_NOTE)
            return
        if result is None:
            return
        run.lat, run.lon = result.lat, result.lon
        if result.display_name:
            url = f"{settings.nominatim_url}?format=jsonv2&q={quote(run.address)}"
            run.address = result.display_name
            run.candidates.add(
                FactKey.ADDRESS,
                result.display_name,
                self._evidence(
                    run,
                    "Nominatim result",
                    url,
                    snippet=f'display_name="{result.display_name}"',
                ),
            )

    async def _harvest_footprint(self, run: _Run, logger) -> None:
        try:
            feature = await self.footprints.find_nearest_building(run.lat, run.lon)
        except Exception as e:
            logger.warning("footprint_failed", error=str(e))
            run.note(FOOTPRINT_FAILED_NOTE)
            feature = None
        else:
            if feature is None:
                run.note(NO_FEATURE_NOTE.format(radius=self.footprint_radius_m))
        if feature is None:
            return

        run.feature = feature
        if feature.lat is not None and feature.lon is not None:
            run.lat, run.lon = feature.lat, feature.lon

        tags = feature.tags
        add = run.candidates.add

        def evidence(snippet: str) -> Evidence:
            return self._evidence(run, "Overpass building feature", self.footprint_source_url, snippet)

        if tags.get("name"):
            add(FactKey.NAME, humanize_tag_value(tags["name"]), evidence(f'name="{tags["name"]}"'))

        if tags.get("addr:full"):
            full = humanize_tag_value(tags["addr:full"])
            add(FactKey.ADDRESS, full, evidence(f'addr:full="{tags["addr:full"]}"'))
            run.address = run.address or full
        else:
            composed = compose_address(tags)
            if composed:
                add(FactKey.ADDRESS, composed, evidence("addr components from OSM"))
                run.address = run.address or composed

        start = tags.get("start_date") or tags.get("construction:start_date")
        if start:
            add(FactKey.CONSTRUCTION_START, normalize_date_value(start), evidence(f"start_date={start}"))
        end = tags.get("end_date") or tags.get("construction:end_date")
        if end:
            add(FactKey.CONSTRUCTION_END, normalize_date_value(end), evidence(f"end_date={end}"))
        if tags.get("building:levels"):
            add(FactKey.LEVELS, tags["building:levels"], evidence(f'building:levels={tags["building:levels"]}'))
        if tags.get("height"):
            add(FactKey.HEIGHT_M, tags["height"], evidence(f'height={tags["height"]}'))
        if tags.get("building"):
            add(FactKey.CURRENT_USE, humanize_tag_value(tags["building"]), evidence(f'building={tags["building"]}'))
        heritage = tags.get("heritage") or tags.get("heritage:designation") or tags.get("heritage:operator")
        if heritage:
            add(FactKey.HERITAGE_DESIGNATION, humanize_tag_value(heritage), evidence(f"heritage={heritage}"))
        if feature.lat is not None and feature.lon is not None:
            add(
                FactKey.COORDINATES,
                {"lat": feature.lat, "lon": feature.lon},
                evidence(f"center={feature.lat:.5f},{feature.lon:.5f}"),
            )
        if tags.get("wikidata", "").strip():
            run.qid = tags["wikidata"].strip().upper()
            add(FactKey.WIKIDATA_QID, run.qid, evidence(f'wikidata={tags["wikidata"]}'))
        if tags.get("wikipedia"):
            run.osm_wikipedia = normalize_wikipedia_value(tags["wikipedia"], run.lang)
            if run.osm_wikipedia:
                add(
                    FactKey.WIKIPEDIA_TITLE,
                    run.osm_wikipedia.value,
                    evidence(f'wikipedia={tags["wikipedia"]}'),
                )
        add(FactKey.OSM_ID, f"{feature.type}/{feature.id}", evidence(f"osm_id={feature.id}"))

    async def _harvest_knowledge_graph(self, run: _Run, logger) -> None:
        if not run.qid and run.osm_wikipedia:
            try:
                resolved = await self.knowledge_graph.resolve_from_wikipedia(
                    run.osm_wikipedia.title, run.osm_wikipedia.lang
                )
            except Exception as e:
                logger.warning("entity_resolution_failed", error=str(e))
                run.note(RESOLVE_FAILED_NOTE)
            else:
                if resolved:
                    run.qid = resolved.upper()

        if not run.qid:
            return
        try:
            facts = await self.knowledge_graph.fetch_facts(run.qid, run.lang)
        except Exception as e:
            logger.warning("entity_facts_failed", qid=run.qid, error=str(e))
            run.note(FACTS_FAILED_NOTE)
            return
        if facts is None:
            return

        run.kg_facts = facts
        qid = facts.qid.upper()
        title = f"Wikidata {qid}"
        url = f"https://www.wikidata.org/wiki/{qid}"
        add = run.candidates.add

        def evidence(snippet: str) -> Evidence:
            return self._evidence(run, title, url, snippet)

        add(FactKey.WIKIDATA_QID, qid, evidence(f"entity={qid}"))
        if facts.label:
            add(FactKey.NAME, facts.label, evidence(f"label={facts.label}"))
        if facts.inception:
            inception = normalize_date_value(facts.inception)
            add(FactKey.CONSTRUCTION_START, inception, evidence(f"P571 inception {inception}"))
        if facts.architect:
            add(FactKey.ARCHITECT, facts.architect, evidence(f"P84 architect {facts.architect}"))
        if facts.style:
            add(FactKey.ARCHITECTURAL_STYLE, facts.style, evidence(f"P149 style {facts.style}"))
        if facts.heritage:
            add(FactKey.HERITAGE_DESIGNATION, facts.heritage, evidence(f"P1435 heritage {facts.heritage}"))
        if facts.coords:
            add(
                FactKey.COORDINATES,
                facts.coords,
                evidence(f"P625 coordinates {facts.coords.lat:.5f},{facts.coords.lon:.5f}"),
            )
        if facts.wikipedia_title:
            ref = normalize_wikipedia_value(f"{run.lang}:{facts.wikipedia_title}", run.lang)
            if ref:
                add(FactKey.WIKIPEDIA_TITLE, ref.value, evidence(f"sitelink {ref.value}"))

    async def _harvest_summary(self, run: _Run, logger) -> None:
        attempts: list[tuple[str, str]] = []
        if run.kg_facts and run.kg_facts.wikipedia_title:
            attempts.append((run.kg_facts.wikipedia_title, run.lang))
        if run.osm_wikipedia:
            attempts.append((run.osm_wikipedia.title, run.osm_wikipedia.lang))

        seen: set[str] = set()
        summary: Optional[EncyclopediaSummary] = None
        attempted = False
        for title, lang in attempts:
            attempt_key = f"{lang}:{title}".lower()
            if attempt_key in seen:
                continue
            seen.add(attempt_key)
            attempted = True
            try:
                summary = await self.summaries.fetch_summary(title, lang)
            except Exception as e:
                logger.warning("summary_failed", title=title, lang=lang, error=str(e))
                summary = None
            if summary is not None:
                break

        if summary is None:
            if attempted:
                run.note(SUMMARY_FAILED_NOTE)
            return

        text = summary.extract or summary.description
        evidence = self._evidence(
            run,
            summary.title,
            summary.url,
            snippet=text,
            publish_date=parse_publish_date(summary.last_modified),
            quality=SourceQuality.MEDIUM,
            why=WIKIPEDIA_WHY,
        )
        ref = normalize_wikipedia_value(f"{summary.lang}:{summary.normalized_title}", summary.lang)
        if ref:
            run.candidates.add(FactKey.WIKIPEDIA_TITLE, ref.value, evidence)
        if text:
            run.candidates.add(
                FactKey.WIKIPEDIA_SUMMARY,
                trim_words(text, SUMMARY_FACT_MAX_WORDS),
                evidence,
            )

    # ── Decision ──────────────────────────────────────────────────────

    def _decide(self, run: _Run) -> tuple[list[BuildingFact], list[Decision], bool]:
        """Decide every candidate, pick one winner per key, note conflicts."""
        facts: list[BuildingFact] = []
        decisions: list[Decision] = []
        has_conflict = False

        for key in run.candidates.keys():
            entries = run.candidates.candidates(key)
            for entry in entries:
                entry.evidence = merge_evidence(entry.evidence)
                entry.decision = self.policy.decide(entry.evidence, self.min_sources)
                decisions.append(entry.decision)
                if entry.decision.notes:
                    run.note(f"{key.value}: {entry.decision.notes}")
            if len(entries) > 1:
                has_conflict = True
                values = " vs ".join(format_value_for_note(key, e.value) for e in entries)
                run.note(f"{key.value}: conflicting values {values}")

            ranked = sorted(entries, key=lambda e: (e.confidence, e.best_quality), reverse=True)
            best = ranked[0]
            facts.append(build_fact(key, best.value, best.evidence, best.confidence))

        facts.sort(key=lambda fact: (-fact.confidence, fact.key.value))
        return facts, decisions, has_conflict

    def _canonical(self, run: _Run, facts: list[BuildingFact]) -> Canonical:
        by_key = {fact.key: fact for fact in facts}
        canonical = Canonical(
            address=run.address,
            lat=run.lat,
            lon=run.lon,
            osm_id=run.feature.id if run.feature else None,
            osm_type=run.feature.type if run.feature else None,
            wikidata_qid=run.qid,
            wikipedia_title=run.osm_wikipedia.value if run.osm_wikipedia else None,
        )
        update: dict[str, Any] = {}
        if FactKey.COORDINATES in by_key:
            coords = by_key[FactKey.COORDINATES].value
            update.update(lat=coords.lat, lon=coords.lon)
        if FactKey.ADDRESS in by_key:
            update["address"] = by_key[FactKey.ADDRESS].value
        if FactKey.WIKIDATA_QID in by_key:
            update["wikidata_qid"] = by_key[FactKey.WIKIDATA_QID].value
        if FactKey.WIKIPEDIA_TITLE in by_key:
            update["wikipedia_title"] = by_key[FactKey.WIKIPEDIA_TITLE].value
        return canonical.model_copy(update=update)


def compose_address(tags: dict[str, str]) -> Optional[str]:
    """``Street Number, Postcode City`` from OSM ``addr:*`` tags."""
    parts: list[str] = []
    if tags.get("addr:street"):
        line = humanize_tag_value(tags["addr:street"])
        if tags.get("addr:housenumber"):
            line = f"{line} {tags['addr:housenumber']}"
        parts.append(line)
    city = " ".join(
        value
        for value in (tags.get("addr:postcode"), humanize_tag_value(tags.get("addr:city", "")))
        if value
    )
    if city:
        parts.append(city)
    return ", ".join(parts) or None
