"""Building-facts pipeline schemas.

Facts form a closed tagged union keyed by FactKey: one pydantic model per
key, discriminated on ``key``. FACT_MODELS maps every key to its model and
is checked for completeness at import time, so adding a FactKey without a
model fails immediately instead of silently dropping facts.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field, field_validator

from placecheck.evidence.schemas import Evidence, Verdict
from placecheck.providers.base import Coordinates


class FactKey(str, Enum):
    """Closed vocabulary of building attributes."""

    NAME = "name"
    ADDRESS = "address"
    COORDINATES = "coordinates"
    CONSTRUCTION_START = "construction_start"
    CONSTRUCTION_END = "construction_end"
    ARCHITECT = "architect"
    ARCHITECTURAL_STYLE = "architectural_style"
    HERITAGE_DESIGNATION = "heritage_designation"
    LEVELS = "levels"
    HEIGHT_M = "height_m"
    CURRENT_USE = "current_use"
    HISTORIC_USE = "historic_use"
    NOTABLE_EVENT = "notable_event"
    OSM_ID = "osm_id"
    WIKIDATA_QID = "wikidata_qid"
    WIKIPEDIA_TITLE = "wikipedia_title"
    WIKIPEDIA_SUMMARY = "wikipedia_summary"


class _Fact(BaseModel):
    """Fields shared by every fact variant."""

    evidence: list[Evidence] = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)

    model_config = {"frozen": True}


class NameFact(_Fact):
    key: Literal[FactKey.NAME] = FactKey.NAME
    value: str


class AddressFact(_Fact):
    key: Literal[FactKey.ADDRESS] = FactKey.ADDRESS
    value: str


class CoordinatesFact(_Fact):
    key: Literal[FactKey.COORDINATES] = FactKey.COORDINATES
    value: Coordinates


class ConstructionStartFact(_Fact):
    key: Literal[FactKey.CONSTRUCTION_START] = FactKey.CONSTRUCTION_START
    value: str = Field(..., description="ISO-like date, year precision or finer")


class ConstructionEndFact(_Fact):
    key: Literal[FactKey.CONSTRUCTION_END] = FactKey.CONSTRUCTION_END
    value: str


class ArchitectFact(_Fact):
    key: Literal[FactKey.ARCHITECT] = FactKey.ARCHITECT
    value: str


class ArchitecturalStyleFact(_Fact):
    key: Literal[FactKey.ARCHITECTURAL_STYLE] = FactKey.ARCHITECTURAL_STYLE
    value: str


class HeritageDesignationFact(_Fact):
    key: Literal[FactKey.HERITAGE_DESIGNATION] = FactKey.HERITAGE_DESIGNATION
    value: str


class LevelsFact(_Fact):
    key: Literal[FactKey.LEVELS] = FactKey.LEVELS
    value: Union[int, float]


class HeightFact(_Fact):
    key: Literal[FactKey.HEIGHT_M] = FactKey.HEIGHT_M
    value: float = Field(..., description="Height in metres")


class CurrentUseFact(_Fact):
    key: Literal[FactKey.CURRENT_USE] = FactKey.CURRENT_USE
    value: str


class HistoricUseFact(_Fact):
    key: Literal[FactKey.HISTORIC_USE] = FactKey.HISTORIC_USE
    value: str


class NotableEventFact(_Fact):
    key: Literal[FactKey.NOTABLE_EVENT] = FactKey.NOTABLE_EVENT
    value: str


class OsmIdFact(_Fact):
    key: Literal[FactKey.OSM_ID] = FactKey.OSM_ID
    value: str = Field(..., description="``type/id``, e.g. ``way/123``")


class WikidataQidFact(_Fact):
    key: Literal[FactKey.WIKIDATA_QID] = FactKey.WIKIDATA_QID
    value: str


class WikipediaTitleFact(_Fact):
    key: Literal[FactKey.WIKIPEDIA_TITLE] = FactKey.WIKIPEDIA_TITLE
    value: str = Field(..., description="``lang:Title``")


class WikipediaSummaryFact(_Fact):
    key: Literal[FactKey.WIKIPEDIA_SUMMARY] = FactKey.WIKIPEDIA_SUMMARY
    value: str = Field(..., description="Article summary, at most 80 words")


BuildingFact = Annotated[
    Union[
        NameFact,
        AddressFact,
        CoordinatesFact,
        ConstructionStartFact,
        ConstructionEndFact,
        ArchitectFact,
        ArchitecturalStyleFact,
        HeritageDesignationFact,
        LevelsFact,
        HeightFact,
        CurrentUseFact,
        HistoricUseFact,
        NotableEventFact,
        OsmIdFact,
        WikidataQidFact,
        WikipediaTitleFact,
        WikipediaSummaryFact,
    ],
    Field(discriminator="key"),
]

FACT_MODELS: dict[FactKey, type[_Fact]] = {
    FactKey.NAME: NameFact,
    FactKey.ADDRESS: AddressFact,
    FactKey.COORDINATES: CoordinatesFact,
    FactKey.CONSTRUCTION_START: ConstructionStartFact,
    FactKey.CONSTRUCTION_END: ConstructionEndFact,
    FactKey.ARCHITECT: ArchitectFact,
    FactKey.ARCHITECTURAL_STYLE: ArchitecturalStyleFact,
    FactKey.HERITAGE_DESIGNATION: HeritageDesignationFact,
    FactKey.LEVELS: LevelsFact,
    FactKey.HEIGHT_M: HeightFact,
    FactKey.CURRENT_USE: CurrentUseFact,
    FactKey.HISTORIC_USE: HistoricUseFact,
    FactKey.NOTABLE_EVENT: NotableEventFact,
    FactKey.OSM_ID: OsmIdFact,
    FactKey.WIKIDATA_QID: WikidataQidFact,
    FactKey.WIKIPEDIA_TITLE: WikipediaTitleFact,
    FactKey.WIKIPEDIA_SUMMARY: WikipediaSummaryFact,
}

_unmapped = set(FactKey) - set(FACT_MODELS)
if _unmapped:
    raise RuntimeError(f"Fact keys without a model: {sorted(k.value for k in _unmapped)}")


def build_fact(
    key: FactKey,
    value: Any,
    evidence: Sequence[Evidence],
    confidence: float,
) -> BuildingFact:
    """Build the fact variant for ``key``; raises ValueError on a bad value."""
    model = FACT_MODELS[FactKey(key)]
    return model(value=value, evidence=list(evidence), confidence=confidence)


class BuildingQuery(BaseModel):
    """The location descriptor as supplied by the caller."""

    address: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    locale: Optional[str] = None


class Canonical(BaseModel):
    """Resolved identity of the building."""

    address: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    osm_id: Optional[str] = None
    osm_type: Optional[Literal["node", "way", "relation"]] = None
    wikidata_qid: Optional[str] = None
    wikipedia_title: Optional[str] = None


class BuildingFactsResult(BaseModel):
    """Resolved facts about one building, with provenance."""

    query: BuildingQuery
    canonical: Canonical = Field(default_factory=Canonical)
    summary: Optional[str] = Field(
        default=None,
        description="Prose summary built from facts with confidence >= 0.6",
    )
    facts: list[BuildingFact] = Field(default_factory=list)
    verdict: Verdict
    confidence: float = Field(..., ge=0.0, le=1.0)
    notes: Optional[list[str]] = None

    model_config = {"frozen": True}

    @field_validator("verdict")
    @classmethod
    def verdict_not_false(cls, value: Verdict) -> Verdict:
        if value == Verdict.FALSE:
            raise ValueError("building facts are never refuted, only left uncertain")
        return value

    @field_validator("facts")
    @classmethod
    def one_fact_per_key(cls, value: list[Any]) -> list[Any]:
        keys = [fact.key for fact in value]
        if len(keys) != len(set(keys)):
            raise ValueError("at most one fact per key")
        return value

    def fact(self, key: FactKey) -> Optional[Any]:
        """Return the fact for ``key``, or None."""
        return next((f for f in self.facts if f.key == key), None)
