"""Search query generation for claim verification.

Each claim gets up to four queries, most specific first. Varied phrasings
raise the chance that at least ``min_sources`` independent hits turn up
even though search engines match queries unpredictably.

Query types, in priority order:
1. Keywords: the claim without stop words
2. Raw: the claim as written
3. Address: the street address alone
4. Address + locality / district forms
5. Person + address (plaque / residence variants for residence claims)
6. Localized: English words swapped for their German equivalents
7. Address + year + "Fertigstellung" (completion)
"""

import re
from typing import Iterable, Optional

import structlog

from placecheck.config.settings import settings
from placecheck.factcheck.claim_extractor import detect_address, find_year
from placecheck.utils.dates import NowLike, resolve_now

MAX_QUERIES = 4
KEYWORD_LIMIT = 7

STOP_WORDS: frozenset[str] = frozenset({
    "is", "was", "the", "a", "an", "at", "of", "for", "with", "has", "have",
    "served", "there", "and", "in",
    "und", "von", "der", "die", "das", "im", "auf", "hat", "wurde",
})

# English -> German substitutions for localized queries
GERMAN_TERMS: dict[str, str] = {
    "district": "Bezirk",
    "hospital": "Krankenhaus",
    "lived": "wohnte",
    "resided": "wohnte",
    "residence": "Wohnsitz",
    "museum": "Museum",
    "street": "Straße",
    "church": "Kirche",
    "palace": "Palais",
    "completed": "fertiggestellt",
    "built": "erbaut",
}

# Capitalized words that name places or things rather than people
NON_PERSON_WORDS: frozenset[str] = frozenset({
    "the", "district", "bezirk", "hospital", "krankenhaus", "museum", "church",
    "palace", "palais", "street", "station", "school", "house", "haus",
    "completion", "building", "it", "es",
})

RESIDENCE_VERBS = re.compile(r"\b(?:lived|resided|stayed|wohnte)\b", re.IGNORECASE)
RECENT_WORDS = re.compile(r"\b(?:today|currently|now|recently)\b", re.IGNORECASE)
_KEYWORD = re.compile(r"[^\W_][\w'\-]*")
_CAPITALIZED_RUN = re.compile(r"\b[A-ZÄÖÜ][a-zäöüß]+(?:\s+[A-ZÄÖÜ][a-zäöüß]+)*\b")
_ORDINAL = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)$", re.IGNORECASE)
_RECENT_YEAR = re.compile(r"\b(20\d{2})\b")


def extract_keywords(text: str, stop_words: Iterable[str] = STOP_WORDS) -> list[str]:
    """Unique words of ``text`` in order, without stop words."""
    stops = {w.lower() for w in stop_words}
    keywords: list[str] = []
    for word in _KEYWORD.findall(text):
        if word.lower() not in stops and word not in keywords:
            keywords.append(word)
    return keywords


def germanize(text: str) -> Optional[str]:
    """Swap known English words for German ones; None if nothing changed."""
    changed = False
    words = []
    for word in text.split():
        lower = word.lower()
        replacement = GERMAN_TERMS.get(lower)
        ordinal = _ORDINAL.match(word)
        if replacement:
            changed = True
            if word[0].isupper():
                replacement = replacement[0].upper() + replacement[1:]
            words.append(replacement)
        elif ordinal:
            changed = True
            words.append(f"{ordinal.group(1)}.")
        else:
            words.append(word)
    return " ".join(words) if changed else None


def infer_recency_days(claim: str, now: NowLike = None) -> Optional[int]:
    """
    Recency window for searches about ``claim``.

    Returns 30 for claims about the present ("today", "currently", ...),
    365 for claims naming a year at most two years before ``now``, and
    None (no restriction) otherwise.
    """
    if RECENT_WORDS.search(claim):
        return 30
    match = _RECENT_YEAR.search(claim)
    if match:
        current_year = resolve_now(now).year
        if current_year - int(match.group(1)) <= 2:
            return 365
    return None


class QueryBuilder:
    """Build ranked search queries for one claim.

    Usage:
        builder = QueryBuilder()
        builder.build("Beethoven lived at Ungargasse 5")
        # ["Beethoven lived Ungargasse 5", "Beethoven lived at Ungargasse 5",
        #  "Ungargasse 5", "Beethoven Ungargasse 5 plaque"]
    """

    def __init__(
        self,
        locality: Optional[str] = None,
        locality_local: Optional[str] = None,
        max_queries: int = MAX_QUERIES,
    ) -> None:
        self.locality = locality or settings.locality
        self.locality_local = locality_local or settings.locality_local
        self.max_queries = max(1, max_queries)
        aliases = "|".join(
            re.escape(a) for a in dict.fromkeys((self.locality, self.locality_local)) if a
        )
        self._locality_pattern = re.compile(rf"\b(?:{aliases})\b", re.IGNORECASE)
        self._locality_words = {self.locality.lower(), self.locality_local.lower()}
        self._logger = structlog.get_logger().bind(component="QueryBuilder")

    def build(self, claim: str) -> list[str]:
        """Return 1 to max_queries unique queries, most specific first."""
        queries: list[str] = []

        def add(value: Optional[str]) -> None:
            value = (value or "").strip()
            if value and value not in queries:
                queries.append(value)

        normalized = " ".join((claim or "").split())
        if not normalized:
            return []
        address = detect_address(normalized)
        keywords = extract_keywords(normalized)
        mentions_locality = bool(self._locality_pattern.search(normalized))

        add(" ".join(keywords[:KEYWORD_LIMIT]))
        add(normalized)
        if address:
            add(address)
        if address and mentions_locality:
            add(f"{address} district {self.locality}")
        if address and mentions_locality and re.search(r"\bdistrict\b", normalized, re.IGNORECASE):
            add(f"{address} Bezirk {self.locality_local}")

        person = self.detect_person(normalized, address)
        if person and address:
            if RESIDENCE_VERBS.search(normalized):
                add(f"{person} {address} plaque")
                add(f"{person} {address} residence")
            else:
                add(f"{person} {address}")

        add(germanize(" ".join(keywords) if keywords else normalized))

        year = find_year(normalized)
        if address and year:
            add(f"{address} {year} Fertigstellung")

        if len(queries) < 2 and address:
            add(f"{address} {self.locality}")
        if len(queries) < 2 and len(keywords) >= 2:
            add(" ".join(keywords[:2]))

        self._logger.debug("queries_built", claim=normalized[:60], count=min(len(queries), self.max_queries))
        return queries[: self.max_queries]

    def detect_person(self, text: str, address: Optional[str] = None) -> Optional[str]:
        """
        First capitalized name in ``text`` that is not part of the address,
        the locality or a generic place word.
        """
        address_words = {w.lower() for w in (address or "").split()}
        for match in _CAPITALIZED_RUN.finditer(text):
            words = [w.lower() for w in match.group(0).split()]
            if any(
                w in address_words or w in self._locality_words or w in NON_PERSON_WORDS
                for w in words
            ):
                continue
            return match.group(0)
        return None
