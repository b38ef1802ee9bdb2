"""Text helpers for turning fetched pages into evidence snippets."""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")

# Elements that never hold article text
_BOILERPLATE_TAGS = ["script", "style", "nav", "header", "footer", "noscript"]


def html_to_text(html: str) -> str:
    """Visible text of an HTML document, whitespace-collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(_BOILERPLATE_TAGS):
        element.decompose()
    return _WHITESPACE.sub(" ", soup.get_text(separator=" ", strip=True)).strip()


def best_passage(text: str, keywords: Iterable[str]) -> Optional[str]:
    """
    Pick the sentence mentioning the most keywords.

    Returns None when no sentence mentions any keyword.
    """
    wanted = [k.lower() for k in keywords if k and len(k) > 1]
    if not text or not wanted:
        return None

    best: Optional[str] = None
    best_hits = 0
    for sentence in _SENTENCE_END.split(text):
        lowered = sentence.lower()
        hits = sum(1 for k in wanted if k in lowered)
        if hits > best_hits:
            best, best_hits = sentence.strip(), hits
    return best
