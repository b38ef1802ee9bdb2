"""Rule-based extraction of atomic claims from narrative prose.

Splits a paragraph into sentences and fragments, anchors fragments that
lack a subject to the most recent subject, rewrites "there" to the most
recent street address, and derives secondary claims from known sentence
shapes (completion years, former uses, residences, districts).

Extraction is deterministic: the same paragraph always yields the same
claims in the same order.

Usage:
    extractor = ClaimExtractor()
    claims = extractor.extract("Ungargasse 5 was completed in 1871.")
    # ["Ungargasse 5 was completed in 1871",
    #  "The completion year of Ungargasse 5 was 1871", ...]
"""

import re
from typing import Callable, Iterable, Optional

import structlog

from placecheck.config.settings import settings

MAX_CLAIMS = 12

MONTHS: dict[str, int] = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11,
    "december": 12,
    "januar": 1, "jänner": 1, "februar": 2, "märz": 3, "mai": 5, "juni": 6,
    "juli": 7, "oktober": 10, "dezember": 12,
}

# 1-3 capitalized words followed by a house number ("Ungargasse 5", "Am Hof 2a")
ADDRESS_PATTERN = re.compile(
    r"\b((?:[A-ZÄÖÜ][a-zäöüß.'\-]+\s+){1,3})(\d{1,3}[a-zA-Z]?)\b"
)
SUBJECT_PATTERN = re.compile(
    r"^([^\W_][\w\s.'\-]*?)\s+(?:is|was|served|became|remained|functioned|lived)\b",
    re.IGNORECASE,
)
YEAR_PATTERN = re.compile(r"\b(1[6-9]\d{2}|20\d{2})\b")

# German ordinals ("3. Bezirk", "1. Mai") do not end a sentence
ORDINAL_NOUNS = (
    "Bezirk", "Jahrhundert", "Stock", "Etage",
    "Januar", "Jänner", "Februar", "März", "April", "Mai", "Juni", "Juli",
    "August", "September", "Oktober", "November", "Dezember",
)
PRONOUNS = frozenset({"it", "es"})

_SENTENCE_SPLIT = re.compile(
    r"[!?;]+|\.+(?=\s|$)(?!\s+(?:" + "|".join(ORDINAL_NOUNS) + r")\b)"
)
_FRAGMENT_SPLIT = re.compile(
    r"\b(?:and|und|aber|but|sowie|while)\b|,\s+(?=[a-zäöüß])",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")
_LIVED_THERE = re.compile(r"\b(lived|stayed|worked|resided|remained) there\b", re.IGNORECASE)
_THERE = re.compile(r"\bthere\b", re.IGNORECASE)
_LEADING_IT = re.compile(r"^(?:it|es)\b\s*", re.IGNORECASE)
_COMPLETION_WORDS = re.compile(r"\b(?:completed|built|opened|construction|established)\b", re.IGNORECASE)
_SERVED_AS = re.compile(r"\bserved as\s+(?:the\s+|a\s+|an\s+)?(.+)$", re.IGNORECASE)
_LIVED_AT = re.compile(r"\blived at (.+)$", re.IGNORECASE)
_DISTRICT = re.compile(r"\b(?:district|bezirk)\b", re.IGNORECASE)
_ORDINAL_DISTRICT = re.compile(r"\b(\d{1,2}(?:st|nd|rd|th))\s+district\b", re.IGNORECASE)
_BEZIRK = re.compile(r"\b(\d{1,2})\.?\s*Bezirk\b", re.IGNORECASE)
_NUMERIC_DATE = re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{4})\b")
_NAMED_DATE = re.compile(
    r"\b(\d{1,2})\.?\s+(" + "|".join(MONTHS) + r")\s+(\d{4})\b",
    re.IGNORECASE,
)
_TRAILING_PUNCT = re.compile(r"[.,;:]+$")


def _located_at(match: re.Match) -> Optional[str]:
    address = detect_address(match.group(1))
    return f"The {match.group(2)} was located at {address}" if address else None


_PARAPHRASES: tuple[tuple[re.Pattern, Callable[[re.Match], Optional[str]]], ...] = (
    (
        re.compile(r"^(.+?) was completed in (\d{4})$", re.IGNORECASE),
        lambda m: f"The completion year of {m.group(1)} was {m.group(2)}",
    ),
    (
        re.compile(r"^(.+?) served as (?:the\s+|a\s+|an\s+)?(.+)$", re.IGNORECASE),
        _located_at,
    ),
    (
        re.compile(r"^(.+?) lived at (.+)$", re.IGNORECASE),
        lambda m: f"{m.group(1)} resided at {m.group(2)}",
    ),
    (
        re.compile(r"^(.+?) is in (.+)$", re.IGNORECASE),
        lambda m: f"{m.group(1)} is located in {m.group(2)}",
    ),
)


def collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def detect_address(text: str) -> Optional[str]:
    """First street-and-number token in ``text``, e.g. "Ungargasse 5"."""
    match = ADDRESS_PATTERN.search(text)
    if not match:
        return None
    return collapse(f"{match.group(1)} {match.group(2)}")


def detect_subject(text: str) -> Optional[str]:
    """Leading noun phrase of ``<Subject> is|was|served|lived ...``, if any."""
    match = SUBJECT_PATTERN.match(text.strip())
    if not match:
        return None
    subject = match.group(1).strip()
    return None if subject.lower() in PRONOUNS else subject


def find_year(text: str) -> Optional[str]:
    match = YEAR_PATTERN.search(text)
    return match.group(1) if match else None


def to_ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def normalize_quotes(text: str) -> str:
    return text.replace("’", "'").replace("‘", "'").replace("“", '"').replace("”", '"')


def normalize_dates(text: str) -> str:
    """Rewrite ``1.2.1871`` and ``1 February 1871`` as ``1871-02-01``."""
    text = _NUMERIC_DATE.sub(
        lambda m: f"{m.group(3)}-{int(m.group(2)):02d}-{int(m.group(1)):02d}", text
    )
    return _NAMED_DATE.sub(
        lambda m: f"{m.group(3)}-{MONTHS[m.group(2).lower()]:02d}-{int(m.group(1)):02d}",
        text,
    )


def normalize_claim(text: str) -> str:
    """Collapse whitespace, normalize quotes and dates, drop trailing punctuation, capitalize."""
    normalized = normalize_quotes(collapse(text))
    normalized = _TRAILING_PUNCT.sub("", normalized).strip()
    normalized = normalize_dates(normalized)
    if not normalized:
        return ""
    return normalized[0].upper() + normalized[1:]


class ClaimExtractor:
    """
    Split narrative text into atomic, self-contained claims.

    Attributes:
        locality: Locality name used in synthesized claims ("Vienna")
        locality_aliases: Lower-case names that count as a mention of the locality
        min_claims: Pad short claim lists up to this many (0 disables padding)
        max_claims: Hard cap on returned claims
    """

    def __init__(
        self,
        locality: Optional[str] = None,
        locality_aliases: Optional[Iterable[str]] = None,
        min_claims: Optional[int] = None,
        max_claims: int = MAX_CLAIMS,
    ) -> None:
        self.locality = locality or settings.locality
        aliases = locality_aliases or (self.locality, settings.locality_local)
        self.locality_aliases = tuple(dict.fromkeys(a.lower() for a in aliases if a))
        self.min_claims = max(0, min_claims if min_claims is not None else settings.min_claims)
        self.max_claims = max(1, max_claims)

        alias_group = "|".join(re.escape(a) for a in self.locality_aliases)
        self._locality_pattern = re.compile(rf"\b(?:{alias_group})\b", re.IGNORECASE)
        self._possessive_district = re.compile(
            rf"\b(?:{alias_group})'s\s+([^.,;]+?district)\b", re.IGNORECASE
        )
        self._logger = structlog.get_logger().bind(component="ClaimExtractor")

    def mentions_locality(self, text: str) -> bool:
        return bool(self._locality_pattern.search(text))

    def extract(self, paragraph: str) -> list[str]:
        """
        Extract claims from ``paragraph``.

        Returns:
            Between 1 and max_claims unique claims (case-insensitive), or an
            empty list for empty or whitespace-only input.
        """
        clean = normalize_quotes(collapse(paragraph or ""))
        if not clean:
            return []

        claims: list[str] = []
        seen: set[str] = set()

        def push(raw: str) -> None:
            normalized = normalize_claim(raw)
            key = normalized.lower()
            if normalized and key not in seen:
                seen.add(key)
                claims.append(normalized)

        anchor_address: Optional[str] = None
        anchor_subject: Optional[str] = None

        sentences = [s.strip() for s in _SENTENCE_SPLIT.split(clean) if s and s.strip()]
        for sentence in sentences:
            anchor_subject = detect_subject(sentence) or anchor_subject or anchor_address
            fragments = [f.strip() for f in _FRAGMENT_SPLIT.split(sentence) if f and f.strip()]

            for fragment in fragments:
                candidate = fragment
                if anchor_subject and _LEADING_IT.match(candidate):
                    candidate = _LEADING_IT.sub(lambda _: f"{anchor_subject} ", candidate, count=1)
                if anchor_subject and not detect_subject(candidate):
                    candidate = f"{anchor_subject} {candidate}"
                if anchor_address:
                    candidate = _LIVED_THERE.sub(lambda m: f"{m.group(1)} at {anchor_address}", candidate)
                    candidate = _THERE.sub(lambda _: anchor_address, candidate)
                push(candidate)

                candidate_subject = detect_subject(candidate)
                if candidate_subject:
                    anchor_subject = candidate_subject
                address = detect_address(candidate)
                if address:
                    anchor_address = address
                    anchor_subject = anchor_subject or address

                for derived in self._derive(candidate, candidate_subject or address or anchor_subject, address):
                    push(derived)

        if not claims:
            push(clean)
        if not claims:
            # Text that normalizes away entirely ("...") is kept as written
            seen.add(clean.lower())
            claims.append(clean)

        self._pad(claims, push, anchor_address)

        self._logger.debug("claims_extracted", count=len(claims[: self.max_claims]))
        return claims[: self.max_claims]

    def _derive(self, candidate: str, subject: Optional[str], address: Optional[str]) -> list[str]:
        """Secondary claims synthesized from recognizable fragment shapes."""
        derived: list[str] = []

        if address and _DISTRICT.search(candidate) and self.mentions_locality(candidate):
            derived.append(f"{address} is located in {self.locality}")
            descriptor = self._district_descriptor(candidate)
            if descriptor:
                derived.append(f"{address} is part of {self.locality}'s {descriptor}")

        # Former uses only make sense for a building subject
        served = _SERVED_AS.search(candidate)
        served_at = detect_address(detect_subject(candidate) or "")
        if served and served_at:
            derived.append(f"The {served.group(1).strip()} was located at {served_at}")

        year = find_year(candidate)
        if subject and year and _COMPLETION_WORDS.search(candidate):
            derived.append(f"The completion year of {subject} was {year}")

        lived = _LIVED_AT.search(candidate)
        if subject and lived:
            derived.append(f"{subject} resided at {lived.group(1)}")

        return derived

    def _district_descriptor(self, text: str) -> Optional[str]:
        match = self._possessive_district.search(text)
        if match:
            return collapse(match.group(1))
        match = _ORDINAL_DISTRICT.search(text)
        if match:
            return f"{match.group(1)} district"
        match = _BEZIRK.search(text)
        if match:
            return f"{to_ordinal(int(match.group(1)))} district"
        return None

    def _pad(self, claims: list[str], push: Callable[[str], None], anchor_address: Optional[str]) -> None:
        """Paraphrase existing claims, then add a locality claim, until min_claims is met."""
        if len(claims) >= self.min_claims:
            return
        for claim in list(claims):
            if len(claims) >= self.min_claims:
                return
            for pattern, render in _PARAPHRASES:
                match = pattern.match(claim)
                if match:
                    rendered = render(match)
                    if rendered:
                        push(rendered)
                    break
        if len(claims) < self.min_claims and anchor_address:
            push(f"{anchor_address} is associated with {self.locality}")
