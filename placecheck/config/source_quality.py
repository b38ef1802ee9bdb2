"""Source-quality tiers for evidence classification.

Hosts are checked tier by tier, first match wins:
1. Government / municipal domains: high
2. Open structured data (Wikidata): high
3. International bodies and cultural institutions: high
4. Collaborative encyclopedias: medium
5. Crowd-sourced geodata: medium
6. Self-publishing platforms: low
7. Academic domains: medium
8. Anything else: medium (unknown is not untrustworthy)

Each tier is (tier_name, quality, host patterns, justification). Patterns
are regular expressions searched against the lower-cased hostname.
"""

from typing import Tuple

# (tier, quality, patterns, why)
QUALITY_TIERS: Tuple[Tuple[str, str, Tuple[str, ...], str], ...] = (
    (
        "government",
        "high",
        (r"\.gv\.at$", r"\.gv\.", r"\.gov(\.|$)", r"\.gob(\.|$)", r"\.go\."),
        "Official government or municipal domain",
    ),
    (
        "structured_data",
        "high",
        (r"(^|\.)wikidata\.org$",),
        "Structured open data maintained by Wikidata",
    ),
    (
        "institution",
        "high",
        (r"(^|\.)unesco\.org$", r"(^|\.)europa\.eu$", r"museum", r"archive", r"library"),
        "International body or cultural institution publication",
    ),
    (
        "encyclopedia",
        "medium",
        (r"(^|\.)wikipedia\.org$", r"(^|\.)wikimedia\.org$"),
        "Community-maintained encyclopedia",
    ),
    (
        "geodata",
        "medium",
        (r"(^|\.)openstreetmap\.org$", r"(^|\.)osm\.org$", r"(^|\.)overpass-api\.de$"),
        "OpenStreetMap community dataset",
    ),
    (
        "self_published",
        "low",
        (r"blogspot\.", r"wordpress\.", r"(^|\.)medium\.com$", r"\.blog$"),
        "Self-published web content",
    ),
    (
        "academic",
        "medium",
        (r"\.edu(\.|$)", r"\.ac\."),
        "Academic or educational domain",
    ),
)

DEFAULT_QUALITY: str = "medium"
DEFAULT_WHY: str = "General independent source"

UNPARSEABLE_QUALITY: str = "low"
UNPARSEABLE_WHY: str = "Unparseable source URL"

# Tiers whose medium rating a page title may not escalate
NON_ESCALATING_TIERS: frozenset[str] = frozenset({"encyclopedia", "geodata"})

# Title words that promote an otherwise medium source to high.
# Matched as whole words, case-insensitively.
TITLE_ESCALATION_KEYWORDS: Tuple[str, ...] = (
    "museum",
    "official",
    "government",
    "archive",
    "archiv",
    "amt",
    "stadt",
    "regierung",
    "magistrat",
    "stadtverwaltung",
    "bundesdenkmalamt",
)
TITLE_ESCALATION_WHY: str = "Institutional publisher named in page title"
