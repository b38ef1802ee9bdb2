"""Prose summary and overall verdict for a resolved building."""

import re
from typing import Any, Iterable, Optional, Sequence

from placecheck.buildings.schemas import FactKey
from placecheck.evidence.merge import trim_words
from placecheck.evidence.schemas import Decision, Verdict

SUMMARY_MAX_WORDS = 120
STRONG_CONFIDENCE = 0.6
MIXED_CEILING = 0.65
UNCERTAIN_CEILING = 0.5

_DATE_PREFIX = re.compile(r"^(-?\d{4})(?:-(\d{2}))?(?:-(\d{2}))?")


def format_date_for_sentence(value: str) -> str:
    text = value.strip()
    match = _DATE_PREFIX.match(text)
    if match:
        return "-".join(part for part in match.groups() if part)
    return text


def _near(coords: Any) -> str:
    return f"{coords.lat:.3f}°, {coords.lon:.3f}°"


def build_summary(
    facts: Iterable[Any],
    max_words: int = SUMMARY_MAX_WORDS,
    floor: float = STRONG_CONFIDENCE,
) -> Optional[str]:
    """
    Describe the building using only facts with confidence >= ``floor``.

    Returns:
        At most ``max_words`` words, or None when no fact is strong enough
    """
    strong = {fact.key: fact for fact in facts if fact.confidence >= floor}

    def value(key: FactKey) -> Optional[Any]:
        fact = strong.get(key)
        return fact.value if fact is not None else None

    name = value(FactKey.NAME)
    address = value(FactKey.ADDRESS)
    coords = value(FactKey.COORDINATES)

    pieces: list[str] = []
    if name is not None:
        if address is not None:
            pieces.append(f"{name} is documented at {address}.")
        elif coords is not None:
            pieces.append(f"{name} is documented near {_near(coords)}.")
        else:
            pieces.append(f"{name} is documented.")
    elif address is not None and coords is not None:
        pieces.append(f"The building at {address} is recorded near {_near(coords)}.")
    elif coords is not None:
        pieces.append(f"A mapped building is located near {_near(coords)}.")

    start = value(FactKey.CONSTRUCTION_START)
    if start is not None:
        pieces.append(f"Construction is recorded around {format_date_for_sentence(start)}.")
    architect = value(FactKey.ARCHITECT)
    if architect is not None:
        pieces.append(f"Architect: {architect}.")
    style = value(FactKey.ARCHITECTURAL_STYLE)
    if style is not None:
        pieces.append(f"Style noted as {style}.")
    heritage = value(FactKey.HERITAGE_DESIGNATION)
    if heritage is not None:
        pieces.append(f"Heritage status: {heritage}.")
    current_use = value(FactKey.CURRENT_USE)
    if current_use is not None:
        pieces.append(f"Current use reported as {current_use}.")

    if not pieces:
        return None
    return trim_words(" ".join(pieces), max_words)


def aggregate_facts(
    decisions: Sequence[Decision],
    fact_confidences: Sequence[float],
    has_conflict: bool,
) -> Decision:
    """
    Overall building verdict.

    Any conflict, any mixed candidate, or a mix of true and uncertain
    candidates makes the result MIXED; all-true is TRUE; otherwise
    UNCERTAIN. Confidence is the mean of the emitted facts' confidences,
    capped at 0.65 for MIXED and 0.5 for UNCERTAIN.
    """
    verdicts = {decision.verdict for decision in decisions}
    has_true = Verdict.TRUE in verdicts
    has_uncertain = bool(verdicts - {Verdict.TRUE, Verdict.MIXED})

    if has_conflict or Verdict.MIXED in verdicts or (has_true and has_uncertain):
        verdict = Verdict.MIXED
    elif has_true:
        verdict = Verdict.TRUE
    else:
        verdict = Verdict.UNCERTAIN

    confidence = sum(fact_confidences) / len(fact_confidences) if fact_confidences else 0.0
    if verdict == Verdict.UNCERTAIN:
        confidence = min(confidence, UNCERTAIN_CEILING)
    elif verdict == Verdict.MIXED:
        confidence = min(confidence, MIXED_CEILING)
    return Decision(verdict=verdict, confidence=round(confidence, 3))
