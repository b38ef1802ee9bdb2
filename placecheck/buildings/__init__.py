"""Building-facts pipeline: location descriptor -> facts with provenance."""

from placecheck.buildings.candidates import (
    CandidateSet,
    normalize_date_value,
    normalize_wikipedia_value,
)
from placecheck.buildings.resolver import BuildingFactsResolver
from placecheck.buildings.schemas import (
    FACT_MODELS,
    BuildingFact,
    BuildingFactsResult,
    BuildingQuery,
    Canonical,
    FactKey,
    build_fact,
)
from placecheck.buildings.summary import aggregate_facts, build_summary

__all__ = [
    "BuildingFactsResolver",
    "CandidateSet",
    "FactKey",
    "FACT_MODELS",
    "BuildingFact",
    "BuildingFactsResult",
    "BuildingQuery",
    "Canonical",
    "build_fact",
    "build_summary",
    "aggregate_facts",
    "normalize_date_value",
    "normalize_wikipedia_value",
]
