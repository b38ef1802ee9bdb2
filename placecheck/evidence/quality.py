"""Source-quality classification for evidence URLs.

Maps a URL (and optionally the page title) to a quality tier with a
human-readable justification. The tier table lives in
``placecheck.config.source_quality``; this module only applies it.

Classification is pure and total: malformed URLs fail closed to LOW with a
generic justification instead of raising.
"""

import re
from typing import Optional, Sequence, Tuple
from urllib.parse import urlsplit

from loguru import logger

from placecheck.config.source_quality import (
    DEFAULT_QUALITY,
    DEFAULT_WHY,
    NON_ESCALATING_TIERS,
    QUALITY_TIERS,
    TITLE_ESCALATION_KEYWORDS,
    TITLE_ESCALATION_WHY,
    UNPARSEABLE_QUALITY,
    UNPARSEABLE_WHY,
)
from placecheck.evidence.schemas import QualityAssessment, SourceQuality

Tier = Tuple[str, str, Tuple[str, ...], str]


class SourceQualityClassifier:
    """
    Classifies evidence sources into high / medium / low quality.

    Usage:
        classifier = SourceQualityClassifier()
        assessment = classifier.classify("https://www.wien.gv.at/page")
        assessment.quality  # SourceQuality.HIGH

    Attributes:
        tiers: Ordered tier table; first matching tier wins
        title_keywords: Title words that escalate a medium source to high
    """

    def __init__(
        self,
        tiers: Optional[Sequence[Tier]] = None,
        title_keywords: Optional[Sequence[str]] = None,
    ):
        self.tiers = tuple(tiers) if tiers is not None else QUALITY_TIERS
        self.title_keywords = tuple(
            title_keywords if title_keywords is not None else TITLE_ESCALATION_KEYWORDS
        )
        self._compiled = [
            (name, SourceQuality(quality), [re.compile(p) for p in patterns], why)
            for name, quality, patterns, why in self.tiers
        ]
        # Whole words only: "Stadt Wien" escalates, "Stadtpark" does not
        self._title_pattern = (
            re.compile(
                r"\b(?:" + "|".join(re.escape(k) for k in self.title_keywords) + r")\b",
                re.IGNORECASE,
            )
            if self.title_keywords
            else None
        )
        self.logger = logger.bind(component="SourceQualityClassifier")

    def classify(self, url: str, title: Optional[str] = None) -> QualityAssessment:
        """
        Classify a source URL.

        Args:
            url: Source URL
            title: Optional page title, enables institutional escalation

        Returns:
            QualityAssessment with tier and one-sentence justification
        """
        host = self._extract_host(url)
        if not host:
            return QualityAssessment(
                quality=SourceQuality(UNPARSEABLE_QUALITY),
                why=UNPARSEABLE_WHY,
            )

        tier_name, quality, why = self._match_tier(host)

        if (
            quality == SourceQuality.MEDIUM
            and title
            and tier_name not in NON_ESCALATING_TIERS
            and self._title_pattern is not None
            and self._title_pattern.search(title)
        ):
            self.logger.debug("Title escalation", host=host, title=title[:60])
            return QualityAssessment(quality=SourceQuality.HIGH, why=TITLE_ESCALATION_WHY)

        return QualityAssessment(quality=quality, why=why)

    def _match_tier(self, host: str) -> Tuple[Optional[str], SourceQuality, str]:
        for name, quality, patterns, why in self._compiled:
            if any(p.search(host) for p in patterns):
                return name, quality, why
        return None, SourceQuality(DEFAULT_QUALITY), DEFAULT_WHY

    def _extract_host(self, url: str) -> Optional[str]:
        """
        Extract the lower-cased hostname from a URL.

        Returns None for empty strings, relative paths and anything
        urllib cannot parse.
        """
        if not url or not isinstance(url, str):
            return None
        try:
            host = urlsplit(url.strip()).hostname
        except ValueError:
            return None
        return host.lower() if host else None


_default_classifier: Optional[SourceQualityClassifier] = None


def classify_source(url: str, title: Optional[str] = None) -> QualityAssessment:
    """Classify with a shared default classifier."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = SourceQualityClassifier()
    return _default_classifier.classify(url, title)
