"""Fact-check pipeline: narrative paragraph -> verified claims -> overall verdict."""

from placecheck.factcheck.aggregator import aggregate_claims
from placecheck.factcheck.claim_extractor import (
    ClaimExtractor,
    detect_address,
    detect_subject,
    normalize_claim,
    normalize_dates,
)
from placecheck.factcheck.evidence_collector import EvidenceCollector
from placecheck.factcheck.query_builder import (
    QueryBuilder,
    extract_keywords,
    germanize,
    infer_recency_days,
)
from placecheck.factcheck.schemas import ClaimResult, EvidenceCollection, FactCheckResult
from placecheck.factcheck.verifier import ParagraphVerifier

__all__ = [
    "ClaimExtractor",
    "QueryBuilder",
    "EvidenceCollector",
    "ParagraphVerifier",
    "aggregate_claims",
    "infer_recency_days",
    "extract_keywords",
    "germanize",
    "detect_address",
    "detect_subject",
    "normalize_claim",
    "normalize_dates",
    "ClaimResult",
    "EvidenceCollection",
    "FactCheckResult",
]
