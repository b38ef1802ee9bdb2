"""Corroboration-threshold verdicts with quality-weighted confidence.

Two independently tuned policies share one interface:

- FreeTextVerdictPolicy: web-search evidence for narrative claims. Can
  detect conflicting snippets and therefore return MIXED or FALSE.
- StructuredVerdictPolicy: provider tags and knowledge-graph fields for
  building facts. Values never contradict themselves within one candidate,
  so it only returns TRUE or UNCERTAIN; cross-value conflicts are handled
  by the resolver.

Both round their confidence so results are stable across runs.

Usage:
    policy = FreeTextVerdictPolicy()
    decision = policy.decide(evidence, min_sources=2, keywords=["Ungargasse"])
"""

import re
from abc import ABC, abstractmethod
from typing import Sequence

import structlog

from placecheck.evidence.schemas import Decision, Evidence, SourceQuality, Verdict

NO_SOURCES_NOTE = "No supporting sources found."
SINGLE_HIGH_NOTE = "Only one high-quality source available; corroboration advised."
HIGH_BELOW_THRESHOLD_NOTE = "High-quality coverage below corroboration threshold; corroboration advised."
SINGLE_WEAK_NOTE = "Only one medium/low-quality source available."
CONFLICT_NOTE = "Sources provide conflicting statements."
INSUFFICIENT_NOTE = "Insufficient independent coverage located."
BELOW_THRESHOLD_NOTE = "Multiple sources but below corroboration threshold."

# Negation markers, English and German
_NEGATION = re.compile(
    r"\bnot\s+(?:in|at|true|located|confirmed|built|completed)\b"
    r"|\bno\s+evidence\b"
    r"|\bnever\b"
    r"|\bdisputed\b"
    r"|\bfalse\s+claim\b"
    r"|\bkein(?:e|en)?\s+nachweis\b"
    r"|\bwurde\s+nicht\b"
    r"|\bnicht\b"
    r"|\bwiderlegt\b"
    r"|\bbestritten\b",
    re.IGNORECASE,
)
_TOKEN = re.compile(r"[\w'’\-]+", re.UNICODE)

# Tokens either side of a negation marker that count as "near"
CONFLICT_WINDOW = 10


def detect_conflict(snippet: str | None, keywords: Sequence[str] = ()) -> bool:
    """
    Decide whether a snippet contradicts the claim it was retrieved for.

    A snippet conflicts when it contains a negation marker within
    CONFLICT_WINDOW tokens of one of the claim keywords. Without keywords
    any negation marker counts.
    """
    if not snippet:
        return False
    markers = list(_NEGATION.finditer(snippet))
    if not markers:
        return False
    wanted = {k.lower() for k in keywords if k and len(k) > 1}
    if not wanted:
        return True

    token_spans = [(m.start(), m.group(0).lower()) for m in _TOKEN.finditer(snippet)]
    for marker in markers:
        index = sum(1 for start, _ in token_spans if start < marker.start())
        lo = max(0, index - CONFLICT_WINDOW)
        hi = index + CONFLICT_WINDOW + 1
        if any(token in wanted for _, token in token_spans[lo:hi]):
            return True
    return False


class VerdictPolicy(ABC):
    """Decides a verdict and confidence for the evidence of one fact or claim."""

    #: Decimal places confidences are rounded to
    precision: int = 2

    def __init__(self) -> None:
        self._logger = structlog.get_logger().bind(component=type(self).__name__)

    @abstractmethod
    def decide(
        self,
        evidence: Sequence[Evidence],
        min_sources: int,
        keywords: Sequence[str] = (),
    ) -> Decision:
        """Return the verdict for ``evidence`` given the corroboration threshold."""

    def _round(self, value: float) -> float:
        return round(min(1.0, max(0.0, value)), self.precision)


class FreeTextVerdictPolicy(VerdictPolicy):
    """Verdicts for claims checked against free-text web search results.

    Confidence = base + sum(quality weight), capped, then clamped to the
    ceiling of the chosen verdict. Below-threshold TRUE verdicts get a
    further cap so a single source never reads as fully confirmed.

    Without conflicts, adding a source never lowers confidence.
    """

    precision = 2

    def __init__(
        self,
        base: float = 0.15,
        weights: dict[SourceQuality, float] | None = None,
        cap: float = 0.95,
        no_evidence_confidence: float = 0.2,
        uncertain_ceiling: float = 0.45,
        mixed_ceiling: float = 0.6,
        false_ceiling: float = 0.7,
        below_threshold_ceiling: float = 0.5,
    ) -> None:
        super().__init__()
        self.base = base
        self.weights = weights or {
            SourceQuality.HIGH: 0.35,
            SourceQuality.MEDIUM: 0.20,
            SourceQuality.LOW: 0.10,
        }
        self.cap = cap
        self.no_evidence_confidence = no_evidence_confidence
        self.uncertain_ceiling = uncertain_ceiling
        self.mixed_ceiling = mixed_ceiling
        self.false_ceiling = false_ceiling
        self.below_threshold_ceiling = below_threshold_ceiling

    def decide(
        self,
        evidence: Sequence[Evidence],
        min_sources: int,
        keywords: Sequence[str] = (),
    ) -> Decision:
        """
        Decide a claim verdict.

        Order:
        1. No evidence -> UNCERTAIN
        2. Conflicting snippets with remaining support -> MIXED
        3. Conflicting snippets only -> FALSE
        4. At least min_sources items -> TRUE
        5. Below threshold but backed by a high-quality item -> TRUE
           (capped, corroboration advised)
        6. Anything else -> UNCERTAIN
        """
        min_sources = max(1, min_sources)
        if not evidence:
            return Decision(
                verdict=Verdict.UNCERTAIN,
                confidence=self._round(self.no_evidence_confidence),
                notes=NO_SOURCES_NOTE,
            )

        conflicts = sum(1 for item in evidence if detect_conflict(item.snippet, keywords))
        support = len(evidence) - conflicts
        has_high = any(item.source_quality == SourceQuality.HIGH for item in evidence)
        below_threshold = len(evidence) < min_sources

        if conflicts and support:
            verdict = Verdict.MIXED
        elif conflicts:
            verdict = Verdict.FALSE
        elif not below_threshold or has_high:
            verdict = Verdict.TRUE
        else:
            verdict = Verdict.UNCERTAIN

        confidence = min(
            self.cap,
            self.base + sum(self.weights.get(item.source_quality, 0.0) for item in evidence),
        )
        if verdict == Verdict.UNCERTAIN:
            confidence = min(confidence, self.uncertain_ceiling)
        elif verdict == Verdict.MIXED:
            confidence = min(confidence, self.mixed_ceiling)
        elif verdict == Verdict.FALSE:
            confidence = min(confidence, self.false_ceiling)
        elif below_threshold:
            confidence = min(confidence, self.below_threshold_ceiling)

        if conflicts:
            notes = CONFLICT_NOTE
        elif verdict == Verdict.TRUE and below_threshold:
            notes = SINGLE_HIGH_NOTE if len(evidence) == 1 else HIGH_BELOW_THRESHOLD_NOTE
        elif verdict == Verdict.UNCERTAIN:
            notes = INSUFFICIENT_NOTE
        else:
            notes = None

        self._logger.debug(
            "verdict_decided",
            verdict=verdict.value,
            evidence=len(evidence),
            conflicts=conflicts,
            confidence=self._round(confidence),
        )
        return Decision(verdict=verdict, confidence=self._round(confidence), notes=notes)


class StructuredVerdictPolicy(VerdictPolicy):
    """Verdicts for building-fact candidate values.

    At or above threshold: base + step per extra source (bounded) + bonus
    when any source is high quality, capped. Below threshold a high-quality
    source yields a capped TRUE; otherwise the verdict is UNCERTAIN with a
    fixed confidence that never drops as sources are added.
    """

    precision = 3

    def __init__(
        self,
        base: float = 0.55,
        step: float = 0.1,
        max_extra: float = 0.25,
        high_bonus: float = 0.15,
        cap: float = 0.9,
        no_evidence_confidence: float = 0.2,
        single_high_confidence: float = 0.6,
        single_medium_confidence: float = 0.4,
        single_low_confidence: float = 0.2,
        below_threshold_confidence: float = 0.45,
    ) -> None:
        super().__init__()
        self.base = base
        self.step = step
        self.max_extra = max_extra
        self.high_bonus = high_bonus
        self.cap = cap
        self.no_evidence_confidence = no_evidence_confidence
        self.single_high_confidence = single_high_confidence
        self.single_medium_confidence = single_medium_confidence
        self.single_low_confidence = single_low_confidence
        self.below_threshold_confidence = below_threshold_confidence

    def decide(
        self,
        evidence: Sequence[Evidence],
        min_sources: int,
        keywords: Sequence[str] = (),
    ) -> Decision:
        min_sources = max(1, min_sources)
        if not evidence:
            return Decision(
                verdict=Verdict.UNCERTAIN,
                confidence=self._round(self.no_evidence_confidence),
                notes=NO_SOURCES_NOTE,
            )

        count = len(evidence)
        has_high = any(item.source_quality == SourceQuality.HIGH for item in evidence)

        if count >= min_sources:
            extra = min(self.max_extra, self.step * (count - min_sources))
            bonus = self.high_bonus if has_high else 0.0
            confidence = min(self.cap, self.base + extra + bonus)
            return Decision(verdict=Verdict.TRUE, confidence=self._round(confidence))

        if has_high:
            return Decision(
                verdict=Verdict.TRUE,
                confidence=self._round(self.single_high_confidence),
                notes=SINGLE_HIGH_NOTE if count == 1 else HIGH_BELOW_THRESHOLD_NOTE,
            )

        if count == 1:
            confidence = (
                self.single_low_confidence
                if evidence[0].source_quality == SourceQuality.LOW
                else self.single_medium_confidence
            )
            return Decision(
                verdict=Verdict.UNCERTAIN,
                confidence=self._round(confidence),
                notes=SINGLE_WEAK_NOTE,
            )

        return Decision(
            verdict=Verdict.UNCERTAIN,
            confidence=self._round(self.below_threshold_confidence),
            notes=BELOW_THRESHOLD_NOTE,
        )
