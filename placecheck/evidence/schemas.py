"""Evidence domain schemas shared by the fact-check and building-facts pipelines.

Defines the citation record (Evidence), the source-quality tiers, the
verdict vocabulary and the verdict engine's output (Decision).

All models are frozen: evidence lists are built additively during a run and
never mutated once they have been attached to a fact or claim.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SourceQuality(str, Enum):
    """Trustworthiness tier of an evidence source.

    HIGH: Government, structured open data, institutional publishers.
    MEDIUM: Encyclopedias, crowd-sourced geodata, academic or unknown hosts.
    LOW: Self-published platforms and unparseable URLs.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric rank used for tie-breaks: high=3, medium=2, low=1."""
        return _QUALITY_RANK[self]


_QUALITY_RANK: dict[SourceQuality, int] = {
    SourceQuality.HIGH: 3,
    SourceQuality.MEDIUM: 2,
    SourceQuality.LOW: 1,
}


class Verdict(str, Enum):
    """Outcome of corroboration for a fact, a claim or a whole result."""

    TRUE = "true"
    FALSE = "false"
    MIXED = "mixed"
    UNCERTAIN = "uncertain"


class Evidence(BaseModel):
    """One citation backing a fact or claim.

    ``access_date`` is when this run observed the source and is always set.
    ``publish_date`` is when the source content was published, if known.
    """

    title: str = Field(..., description="Human-readable source title")
    url: str = Field(..., description="Canonicalized URL, fragment stripped")
    publish_date: Optional[str] = Field(
        default=None,
        description="ISO publication date of the source, None if unknown",
    )
    access_date: str = Field(
        ...,
        min_length=1,
        description="ISO date this run accessed the source",
    )
    snippet: Optional[str] = Field(
        default=None,
        description="Relevant excerpt, at most 25 words",
    )
    source_quality: SourceQuality = Field(..., description="Quality tier")
    why_trustworthy: str = Field(
        ...,
        min_length=1,
        description="One-sentence justification of the quality tier",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Wikidata Q123456",
                    "url": "https://www.wikidata.org/wiki/Q123456",
                    "publish_date": None,
                    "access_date": "2024-03-01",
                    "snippet": "P84 architect Max Mustermann",
                    "source_quality": "high",
                    "why_trustworthy": "Structured open data maintained by Wikidata",
                }
            ]
        },
    }

    @field_validator("access_date")
    @classmethod
    def access_date_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("access_date must not be blank")
        return value


class QualityAssessment(BaseModel):
    """Result of classifying one source URL."""

    quality: SourceQuality
    why: str

    model_config = {"frozen": True}


class Decision(BaseModel):
    """Verdict engine output for one fact value or claim."""

    verdict: Verdict
    confidence: float = Field(..., ge=0.0, le=1.0)
    notes: Optional[str] = None

    model_config = {"frozen": True}
