"""Provider interfaces and the value types they return.

Every external collaborator is a runtime-checkable Protocol with one httpx
adapter and one in-memory double. Adapters never raise from their public
methods: any transport, HTTP or payload failure is reported as "not found"
(``None`` or an empty list). Only cancellation propagates.
"""

from typing import Literal, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """WGS84 point."""

    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}


class GeocodeResult(BaseModel):
    """Best geocoder match for an address."""

    lat: float
    lon: float
    display_name: Optional[str] = Field(
        default=None,
        description="Geocoder's resolved address string",
    )


class FootprintFeature(BaseModel):
    """Nearest tagged building element around a point."""

    id: str = Field(..., description="OSM element id")
    type: Literal["node", "way", "relation"] = Field(..., description="OSM element type")
    lat: Optional[float] = Field(default=None, description="Node position or way/relation centre")
    lon: Optional[float] = None
    tags: dict[str, str] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "123456",
                    "type": "way",
                    "lat": 48.2,
                    "lon": 16.38,
                    "tags": {"building": "yes", "name": "Testhaus", "start_date": "1872"},
                }
            ]
        }
    }


class KnowledgeGraphFacts(BaseModel):
    """Structured fields fetched for one knowledge-graph entity."""

    qid: str
    label: Optional[str] = None
    inception: Optional[str] = Field(default=None, description="Raw inception value (P571)")
    architect: Optional[str] = Field(default=None, description="Architect label (P84)")
    style: Optional[str] = Field(default=None, description="Architectural style label (P149)")
    heritage: Optional[str] = Field(default=None, description="Heritage designation label (P1435)")
    coords: Optional[Coordinates] = Field(default=None, description="Coordinate location (P625)")
    wikipedia_title: Optional[str] = Field(
        default=None,
        description="Title of the linked article in the requested language",
    )


class EncyclopediaSummary(BaseModel):
    """Lead-section summary of an encyclopedia article."""

    title: str
    normalized_title: str
    lang: str
    url: str
    extract: Optional[str] = None
    description: Optional[str] = None
    last_modified: Optional[str] = None


class SearchHit(BaseModel):
    """One web search result."""

    title: str
    url: str
    snippet: Optional[str] = None
    publish_date: Optional[str] = Field(
        default=None,
        description="ISO publish (or crawl) timestamp when the engine reports one",
    )


class OpenedPage(BaseModel):
    """Result of fetching a page directly."""

    ok: bool
    final_url: str
    text: Optional[str] = None


@runtime_checkable
class Geocoder(Protocol):
    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        ...


@runtime_checkable
class FootprintProvider(Protocol):
    async def find_nearest_building(self, lat: float, lon: float) -> Optional[FootprintFeature]:
        ...


@runtime_checkable
class KnowledgeGraphProvider(Protocol):
    async def resolve_from_wikipedia(self, title: str, lang: str) -> Optional[str]:
        ...

    async def fetch_facts(self, qid: str, lang: str) -> Optional[KnowledgeGraphFacts]:
        ...


@runtime_checkable
class SummaryProvider(Protocol):
    async def fetch_summary(self, title: str, lang: str) -> Optional[EncyclopediaSummary]:
        ...


@runtime_checkable
class WebSearchTool(Protocol):
    async def search(
        self,
        query: str,
        recency_days: Optional[int] = None,
        max_results: int = 10,
    ) -> list[SearchHit]:
        ...

    async def open_url(self, url: str) -> OpenedPage:
        ...
