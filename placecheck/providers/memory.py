"""In-memory provider doubles for tests, demos and offline runs.

Each double satisfies its Protocol from ``placecheck.providers.base`` and
records the calls it received so tests can assert on them.
"""

from typing import Mapping, Optional, Sequence

from placecheck.providers.base import (
    EncyclopediaSummary,
    FootprintFeature,
    GeocodeResult,
    KnowledgeGraphFacts,
    OpenedPage,
    SearchHit,
)


def _key(text: str) -> str:
    return " ".join(text.split()).lower()


class MemoryGeocoder:
    """Geocoder answering from a fixed address table (case/space-insensitive)."""

    def __init__(self, results: Optional[Mapping[str, GeocodeResult]] = None) -> None:
        self.results = {_key(k): v for k, v in (results or {}).items()}
        self.calls: list[str] = []

    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        self.calls.append(address)
        return self.results.get(_key(address or ""))


class MemoryFootprintProvider:
    """Returns the same feature (or None) for every point."""

    def __init__(self, feature: Optional[FootprintFeature] = None) -> None:
        self.feature = feature
        self.calls: list[tuple[float, float]] = []

    async def find_nearest_building(self, lat: float, lon: float) -> Optional[FootprintFeature]:
        self.calls.append((lat, lon))
        return self.feature


class MemoryKnowledgeGraph:
    """
    Knowledge graph over a fixed set of entities.

    Args:
        entities: QID -> facts
        sitelinks: (lang, article title) -> QID; titles compare case-insensitively
            with underscores treated as spaces
    """

    def __init__(
        self,
        entities: Optional[Mapping[str, KnowledgeGraphFacts]] = None,
        sitelinks: Optional[Mapping[tuple[str, str], str]] = None,
    ) -> None:
        self.entities = {k.upper(): v for k, v in (entities or {}).items()}
        self.sitelinks = {
            (lang.lower(), _key(title.replace("_", " "))): qid
            for (lang, title), qid in (sitelinks or {}).items()
        }
        self.resolve_calls: list[tuple[str, str]] = []
        self.fetch_calls: list[tuple[str, str]] = []

    async def resolve_from_wikipedia(self, title: str, lang: str) -> Optional[str]:
        self.resolve_calls.append((title, lang))
        return self.sitelinks.get(((lang or "en").lower(), _key((title or "").replace("_", " "))))

    async def fetch_facts(self, qid: str, lang: str) -> Optional[KnowledgeGraphFacts]:
        self.fetch_calls.append((qid, lang))
        return self.entities.get((qid or "").upper())


class MemorySummaryProvider:
    """Summaries keyed by article title (underscores and case ignored)."""

    def __init__(self, summaries: Optional[Mapping[str, EncyclopediaSummary]] = None) -> None:
        self.summaries = {_key(k.replace("_", " ")): v for k, v in (summaries or {}).items()}
        self.calls: list[tuple[str, str]] = []

    async def fetch_summary(self, title: str, lang: str) -> Optional[EncyclopediaSummary]:
        self.calls.append((title, lang))
        return self.summaries.get(_key((title or "").replace("_", " ")))


class MemoryWebSearch:
    """
    Web search over canned hits.

    A query receives the hits of every ``results`` key it contains
    (case-insensitive substring match), in table order, followed by
    ``default`` hits. Pages for ``open_url`` come from ``pages``.

    Usage:
        search = MemoryWebSearch({"district": [SearchHit(title=..., url=...)]})
    """

    def __init__(
        self,
        results: Optional[Mapping[str, Sequence[SearchHit]]] = None,
        default: Sequence[SearchHit] = (),
        pages: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.results = {k.lower(): list(v) for k, v in (results or {}).items()}
        self.default = list(default)
        self.pages = dict(pages or {})
        self.queries: list[tuple[str, Optional[int]]] = []
        self.opened: list[str] = []

    async def search(
        self,
        query: str,
        recency_days: Optional[int] = None,
        max_results: int = 10,
    ) -> list[SearchHit]:
        self.queries.append((query, recency_days))
        lowered = query.lower()
        hits: list[SearchHit] = []
        for needle, canned in self.results.items():
            if needle in lowered:
                hits.extend(canned)
        hits.extend(self.default)
        return hits[: max(1, min(max_results, 50))]

    async def open_url(self, url: str) -> OpenedPage:
        self.opened.append(url)
        text = self.pages.get(url)
        if text is None:
            return OpenedPage(ok=False, final_url=url)
        return OpenedPage(ok=True, final_url=url, text=text)
