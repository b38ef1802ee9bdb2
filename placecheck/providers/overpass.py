"""Overpass API adapter for nearest tagged building lookups."""

import math
from typing import Any, Optional

import httpx

from placecheck.config.settings import settings
from placecheck.errors import ProviderError
from placecheck.providers.base import FootprintFeature
from placecheck.providers.http import AsyncHttpProvider

_ELEMENT_TYPES = ("node", "way", "relation")

QUERY_TEMPLATE = """
[out:json][timeout:25];
(
  node(around:{radius}, {lat}, {lon})["building"];
  way(around:{radius}, {lat}, {lon})["building"];
  relation(around:{radius}, {lat}, {lon})["building"];
);
out center 1;
"""


def _stringify_tags(raw: Any) -> dict[str, str]:
    """Keep string tags, stringify scalar ones, drop the rest."""
    if not isinstance(raw, dict):
        return {}
    tags: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            tags[str(key)] = value
        elif isinstance(value, bool):
            tags[str(key)] = "true" if value else "false"
        elif isinstance(value, (int, float)):
            tags[str(key)] = str(value)
    return tags


class OverpassFootprintProvider(AsyncHttpProvider):
    """
    Find the building element nearest to a point.

    Queries nodes, ways and relations tagged ``building`` within
    ``radius_m`` and keeps the element with the most tags (first one wins
    ties). Ways and relations are positioned at their centre.
    """

    provider_name = "overpass"

    def __init__(
        self,
        endpoint: Optional[str] = None,
        radius_m: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ) -> None:
        super().__init__(client=client, **kwargs)
        self.endpoint = endpoint or settings.overpass_endpoint
        self.radius_m = radius_m if radius_m is not None else settings.footprint_radius_m

    def build_query(self, lat: float, lon: float) -> str:
        return QUERY_TEMPLATE.format(radius=self.radius_m, lat=f"{lat:.6f}", lon=f"{lon:.6f}")

    async def find_nearest_building(self, lat: float, lon: float) -> Optional[FootprintFeature]:
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None

        try:
            payload = await self._request_json(
                "POST",
                self.endpoint,
                data={"data": self.build_query(lat, lon)},
            )
        except ProviderError as e:
            self.logger.warning(f"Overpass lookup failed at {lat:.5f},{lon:.5f}: {e}")
            return None

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            return None

        best: Optional[dict[str, Any]] = None
        best_tags: dict[str, str] = {}
        best_count = -1
        for element in elements:
            if not isinstance(element, dict) or element.get("type") not in _ELEMENT_TYPES:
                continue
            tags = _stringify_tags(element.get("tags"))
            if len(tags) > best_count:
                best, best_tags, best_count = element, tags, len(tags)

        if best is None:
            self.logger.debug(f"No building within {self.radius_m}m of {lat:.5f},{lon:.5f}")
            return None

        center = best.get("center") if isinstance(best.get("center"), dict) else {}
        return FootprintFeature(
            id=str(best.get("id")),
            type=best["type"],
            lat=_number(best.get("lat"), center.get("lat")),
            lon=_number(best.get("lon"), center.get("lon")),
            tags=best_tags,
        )


def _number(*candidates: Any) -> Optional[float]:
    for value in candidates:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    return None
