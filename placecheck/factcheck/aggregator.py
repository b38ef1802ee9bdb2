"""Roll per-claim verdicts up into one paragraph verdict."""

from typing import Sequence

from placecheck.evidence.schemas import Decision, Verdict
from placecheck.factcheck.schemas import ClaimResult

VERDICT_SCORES: dict[Verdict, int] = {
    Verdict.TRUE: 1,
    Verdict.FALSE: -1,
    Verdict.MIXED: 0,
    Verdict.UNCERTAIN: 0,
}

TRUE_THRESHOLD = 0.4
FALSE_THRESHOLD = -0.4
MIXED_CEILING = 0.6
UNCERTAIN_CEILING = 0.5


def aggregate_claims(claims: Sequence[ClaimResult]) -> Decision:
    """
    Confidence-weighted overall verdict.

    score = sum(verdict_score * confidence) / sum(confidence), with
    true = +1 and false = -1. score >= 0.4 is TRUE, <= -0.4 is FALSE,
    otherwise MIXED if any claim is mixed, else UNCERTAIN.

    Confidence = min(1, |score| * 0.6 + mean_confidence * 0.7), capped at
    0.6 for MIXED and 0.5 for UNCERTAIN.
    """
    if not claims:
        return Decision(verdict=Verdict.UNCERTAIN, confidence=0.0)

    total = sum(c.confidence for c in claims)
    if total == 0:
        return Decision(verdict=Verdict.UNCERTAIN, confidence=0.0)

    score = sum(VERDICT_SCORES[c.verdict] * c.confidence for c in claims) / total
    has_mixed = any(c.verdict == Verdict.MIXED for c in claims)

    if score >= TRUE_THRESHOLD:
        verdict = Verdict.TRUE
    elif score <= FALSE_THRESHOLD:
        verdict = Verdict.FALSE
    elif has_mixed:
        verdict = Verdict.MIXED
    else:
        verdict = Verdict.UNCERTAIN

    confidence = min(1.0, abs(score) * 0.6 + (total / len(claims)) * 0.7)
    if verdict == Verdict.MIXED:
        confidence = min(confidence, MIXED_CEILING)
    elif verdict == Verdict.UNCERTAIN:
        confidence = min(confidence, UNCERTAIN_CEILING)

    return Decision(verdict=verdict, confidence=round(max(0.0, confidence), 2))
