"""Shared evidence vocabulary and scoring used by both pipelines.

- Evidence / SourceQuality / Verdict / Decision: the data model
- SourceQualityClassifier: URL (+ title) -> quality tier with justification
- merge_evidence: canonical (host, path) dedup keeping the best duplicate
- FreeTextVerdictPolicy / StructuredVerdictPolicy: corroboration verdicts
"""

from placecheck.evidence.merge import canonical_key, canonicalize_url, merge_evidence, trim_words
from placecheck.evidence.quality import SourceQualityClassifier, classify_source
from placecheck.evidence.schemas import (
    Decision,
    Evidence,
    QualityAssessment,
    SourceQuality,
    Verdict,
)
from placecheck.evidence.verdict import (
    FreeTextVerdictPolicy,
    StructuredVerdictPolicy,
    VerdictPolicy,
    detect_conflict,
)

__all__ = [
    "Decision",
    "Evidence",
    "QualityAssessment",
    "SourceQuality",
    "Verdict",
    "SourceQualityClassifier",
    "classify_source",
    "canonical_key",
    "canonicalize_url",
    "merge_evidence",
    "trim_words",
    "VerdictPolicy",
    "FreeTextVerdictPolicy",
    "StructuredVerdictPolicy",
    "detect_conflict",
]
