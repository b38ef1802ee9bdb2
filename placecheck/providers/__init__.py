"""External collaborators: protocols, httpx adapters and in-memory doubles."""

from placecheck.providers.base import (
    Coordinates,
    EncyclopediaSummary,
    FootprintFeature,
    FootprintProvider,
    GeocodeResult,
    Geocoder,
    KnowledgeGraphFacts,
    KnowledgeGraphProvider,
    OpenedPage,
    SearchHit,
    SummaryProvider,
    WebSearchTool,
)
from placecheck.providers.bing import BingWebSearch
from placecheck.providers.http import AsyncHttpProvider
from placecheck.providers.memory import (
    MemoryFootprintProvider,
    MemoryGeocoder,
    MemoryKnowledgeGraph,
    MemorySummaryProvider,
    MemoryWebSearch,
)
from placecheck.providers.nominatim import NominatimGeocoder
from placecheck.providers.overpass import OverpassFootprintProvider
from placecheck.providers.wikidata import WikidataProvider
from placecheck.providers.wikipedia import WikipediaSummaryProvider

__all__ = [
    "Coordinates",
    "EncyclopediaSummary",
    "FootprintFeature",
    "GeocodeResult",
    "KnowledgeGraphFacts",
    "OpenedPage",
    "SearchHit",
    "Geocoder",
    "FootprintProvider",
    "KnowledgeGraphProvider",
    "SummaryProvider",
    "WebSearchTool",
    "AsyncHttpProvider",
    "NominatimGeocoder",
    "OverpassFootprintProvider",
    "WikidataProvider",
    "WikipediaSummaryProvider",
    "BingWebSearch",
    "MemoryGeocoder",
    "MemoryFootprintProvider",
    "MemoryKnowledgeGraph",
    "MemorySummaryProvider",
    "MemoryWebSearch",
]
