"""Evidence canonicalization and deduplication.

Two evidence items are duplicates when their URLs canonicalize to the same
(host, path) pair. Merging keeps the highest-quality duplicate (first-seen
wins ties) and fills its missing optional fields from the others.

Snippets are trimmed here rather than at collection time so the result does
not depend on the order items were collected in:

    merge_evidence(merge_evidence(items)) == merge_evidence(items)
"""

import re
from typing import Iterable, Optional

from yarl import URL

from placecheck.evidence.schemas import Evidence

SNIPPET_MAX_WORDS = 25
ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


def trim_words(text: str, max_words: int) -> str:
    """Collapse whitespace and cut ``text`` to ``max_words`` words.

    An ellipsis is appended to the last kept word when words were dropped,
    so trimming an already-trimmed string is a no-op.
    """
    words = [w for w in _WHITESPACE.split(text.strip()) if w]
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + ELLIPSIS


def _parse(url: str) -> Optional[URL]:
    """Absolute URL with a host, or None."""
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = URL(url.strip())
    except (TypeError, ValueError):
        return None
    if not parsed.is_absolute() or not parsed.host:
        return None
    return parsed


def canonicalize_url(url: str) -> Optional[str]:
    """Strip the fragment from an absolute URL; None if it does not parse.

    yarl lower-cases the host and applies IDNA and percent-encoding, so
    equivalent spellings of one URL canonicalize identically.
    """
    parsed = _parse(url)
    if parsed is None:
        return None
    return str(parsed.with_fragment(None))


def canonical_key(url: str) -> str:
    """Deduplication key: ``host + path`` when the URL parses, else the raw URL."""
    parsed = _parse(url)
    if parsed is None:
        return url
    host = parsed.raw_host.lower()
    if parsed.port and not parsed.is_default_port():
        host = f"{host}:{parsed.port}"
    return f"{host}{parsed.raw_path or '/'}"


def _normalize(item: Evidence) -> Evidence:
    if item.snippet is None:
        return item
    trimmed = trim_words(item.snippet, SNIPPET_MAX_WORDS)
    if trimmed == item.snippet:
        return item
    return item.model_copy(update={"snippet": trimmed or None})


def _fill_missing(winner: Evidence, other: Evidence) -> Evidence:
    """Union of populated optional fields, winner's values take precedence."""
    update = {}
    if winner.publish_date is None and other.publish_date is not None:
        update["publish_date"] = other.publish_date
    if winner.snippet is None and other.snippet is not None:
        update["snippet"] = other.snippet
    return winner.model_copy(update=update) if update else winner


def merge_evidence(items: Iterable[Evidence]) -> list[Evidence]:
    """
    Deduplicate evidence by canonical (host, path).

    Args:
        items: Evidence in collection order.

    Returns:
        One item per canonical key, in first-seen key order. Each survivor
        is the highest-quality duplicate, with snippet trimmed to 25 words
        and missing publish_date/snippet filled from its duplicates.
    """
    merged: dict[str, Evidence] = {}
    for raw in items:
        item = _normalize(raw)
        key = canonical_key(item.url)
        existing = merged.get(key)
        if existing is None:
            merged[key] = item
        elif item.source_quality.rank > existing.source_quality.rank:
            merged[key] = _fill_missing(item, existing)
        else:
            merged[key] = _fill_missing(existing, item)
    return list(merged.values())
