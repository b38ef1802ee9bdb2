"""Fact-check pipeline schemas.

ClaimResult is one atomic claim with its verdict and citations;
FactCheckResult is the envelope returned by ParagraphVerifier.verify().
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from placecheck.evidence.schemas import Evidence, Verdict


class ClaimResult(BaseModel):
    """An extracted, self-contained claim after verification."""

    text: str = Field(..., min_length=1, description="Self-contained claim text")
    verdict: Verdict
    confidence: float = Field(..., ge=0.0, le=1.0)
    evidence: list[Evidence] = Field(default_factory=list)
    notes: Optional[str] = None

    model_config = {"frozen": True}


class EvidenceCollection(BaseModel):
    """Evidence gathered for one claim plus caveats raised while gathering it."""

    evidence: list[Evidence] = Field(default_factory=list)
    notes: list[str] = Field(
        default_factory=list,
        description="Search failures and other collection caveats",
    )


class FactCheckResult(BaseModel):
    """Verification result for a narrative paragraph.

    Serialized with ``model_dump(mode="json", exclude_none=True)`` so absent
    caveats and notes are omitted rather than emitted as null.
    """

    question: str = Field(..., description="The paragraph as submitted, trimmed")
    verdict: Verdict
    confidence: float = Field(..., ge=0.0, le=1.0)
    claims: list[ClaimResult] = Field(default_factory=list)
    gaps_or_caveats: Optional[list[str]] = Field(
        default=None,
        description="Deduplicated coverage gaps, None when there are none",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "question": "Ungargasse 5 was completed in 1871.",
                    "verdict": "uncertain",
                    "confidence": 0.14,
                    "claims": [
                        {
                            "text": "Ungargasse 5 was completed in 1871",
                            "verdict": "uncertain",
                            "confidence": 0.2,
                            "evidence": [],
                            "notes": "No supporting sources found.",
                        }
                    ],
                    "gaps_or_caveats": [
                        'Claim "Ungargasse 5 was completed in 1871" lacks sufficient independent sources.'
                    ],
                }
            ]
        },
    }

    @field_validator("gaps_or_caveats")
    @classmethod
    def dedupe_caveats(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        deduped = list(dict.fromkeys(v for v in value if v))
        return deduped or None
