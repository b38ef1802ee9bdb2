"""Candidate values for building facts.

Every provider observation becomes a candidate ``(key, value, evidence)``.
Candidates for the same key whose values normalize to the same value key
share one entry and pool their evidence. Distinct value keys under one
fact key are a conflict.
"""

import json
import math
import re
from typing import Any, Iterable, NamedTuple, Optional, Sequence, Union

from placecheck.buildings.schemas import FactKey
from placecheck.evidence.schemas import Decision, Evidence
from placecheck.providers.base import Coordinates

_DATE_PREFIX = re.compile(r"^(-?\d{4})(?:-(\d{2}))?(?:-(\d{2}))?")
_YEAR = re.compile(r"(-?\d{4})")
_APPROXIMATE = re.compile(r"(?:^|\b)(?:c\.|ca\.|circa|approx)", re.IGNORECASE)
_LANG_PREFIX = re.compile(r"^[a-z]{2,3}(?:-[a-z]+)?$", re.IGNORECASE)
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

NUMERIC_KEYS = frozenset({FactKey.LEVELS, FactKey.HEIGHT_M})
DATE_KEYS = frozenset({FactKey.CONSTRUCTION_START, FactKey.CONSTRUCTION_END})


class WikipediaRef(NamedTuple):
    """A ``lang:Title`` article reference."""

    value: str
    lang: str
    title: str


def humanize_tag_value(value: str) -> str:
    """OSM tag values use underscores for spaces."""
    return value.replace("_", " ").strip()


def normalize_date_value(raw: str) -> str:
    """
    Reduce a date to its ``YYYY[-MM[-DD]]`` prefix.

    Approximate dates ("c. 1870", "circa 1900") are kept verbatim, and so
    is anything without a leading year. A trailing ``Z`` is dropped.
    """
    text = raw.strip()
    if _APPROXIMATE.search(text):
        return text
    match = _DATE_PREFIX.match(text)
    if match:
        return "-".join(part for part in match.groups() if part)
    return text[:-1] if text.endswith("Z") else text


def normalize_wikipedia_value(raw: str, fallback_lang: str) -> Optional[WikipediaRef]:
    """
    Parse ``lang:Title`` (or a bare title) into a WikipediaRef.

    The prefix before the first colon is taken as the language only when it
    looks like a language code; underscores in the title become spaces.
    """
    text = (raw or "").strip()
    if not text:
        return None
    lang = (fallback_lang or "en").lower()
    title = text
    prefix, sep, rest = text.partition(":")
    if sep and _LANG_PREFIX.match(prefix.strip()):
        lang = prefix.strip().lower()
        title = rest
    title = humanize_tag_value(title)
    if not title:
        return None
    return WikipediaRef(value=f"{lang}:{title}", lang=lang, title=title)


def parse_number(value: Any) -> Optional[Union[int, float]]:
    """Leading number of ``value`` (decimal comma accepted); integral values become int."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER.search(str(value).replace(",", "."))
        if not match:
            return None
        number = float(match.group(0))
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def normalize_value(key: FactKey, raw: Any) -> Optional[Any]:
    """
    Coerce a raw observation into the value type of ``key``.

    Returns None when the observation is empty or unusable.
    """
    if raw is None:
        return None
    if key in NUMERIC_KEYS:
        number = parse_number(raw)
        if number is None:
            return None
        return float(number) if key == FactKey.HEIGHT_M else number
    if key == FactKey.COORDINATES:
        if isinstance(raw, Coordinates):
            return raw
        lat = getattr(raw, "lat", None)
        lon = getattr(raw, "lon", None)
        if isinstance(raw, dict):
            lat, lon = raw.get("lat"), raw.get("lon")
        try:
            return Coordinates(lat=float(lat), lon=float(lon))
        except (TypeError, ValueError):
            return None
    text = str(raw).strip()
    if not text:
        return None
    if key == FactKey.WIKIDATA_QID:
        return text.upper()
    return text


def fact_value_key(key: FactKey, value: Any) -> str:
    """Grouping key: candidates with equal keys are the same value."""
    if key == FactKey.COORDINATES:
        return f"{value.lat:.5f},{value.lon:.5f}"
    if key in NUMERIC_KEYS:
        return str(value)
    if key == FactKey.WIKIDATA_QID:
        return str(value).strip().upper()
    if key in DATE_KEYS:
        match = _YEAR.search(str(value))
        return match.group(1) if match else str(value).strip().lower()
    return str(value).strip().lower()


def format_value_for_note(key: FactKey, value: Any) -> str:
    if key == FactKey.COORDINATES:
        return f"{value.lat:.4f}, {value.lon:.4f}"
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


class Candidate:
    """
    One distinct value for a fact key and the evidence behind it.

    ``value`` is the form reported by the highest-quality source seen so
    far (first seen wins ties). ``decision`` is set once evidence is final.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        self.evidence: list[Evidence] = []
        self.best_quality = 0
        self.decision: Optional[Decision] = None

    @property
    def confidence(self) -> float:
        return self.decision.confidence if self.decision else 0.0

    def add(self, value: Any, evidence: Iterable[Evidence]) -> None:
        for item in evidence:
            self.evidence.append(item)
            rank = item.source_quality.rank
            if rank > self.best_quality:
                self.best_quality = rank
                self.value = value


class CandidateSet:
    """Candidates grouped by fact key, then by value key, in insertion order."""

    def __init__(self) -> None:
        self._by_key: dict[FactKey, dict[str, Candidate]] = {}

    def add(
        self,
        key: FactKey,
        raw_value: Any,
        evidence: Union[Evidence, Sequence[Evidence]],
    ) -> bool:
        """
        Record an observation.

        Returns:
            False when the value was empty or invalid, or no evidence was given
        """
        items = [evidence] if isinstance(evidence, Evidence) else list(evidence)
        if not items:
            return False
        value = normalize_value(key, raw_value)
        if value is None:
            return False
        by_value = self._by_key.setdefault(key, {})
        value_key = fact_value_key(key, value)
        candidate = by_value.get(value_key)
        if candidate is None:
            candidate = by_value[value_key] = Candidate(value)
        candidate.add(value, items)
        return True

    def keys(self) -> list[FactKey]:
        return list(self._by_key)

    def candidates(self, key: FactKey) -> list[Candidate]:
        return list(self._by_key.get(key, {}).values())

    def __len__(self) -> int:
        return sum(len(by_value) for by_value in self._by_key.values())

    def __contains__(self, key: object) -> bool:
        return key in self._by_key
