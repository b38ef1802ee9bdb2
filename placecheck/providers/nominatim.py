"""Nominatim geocoder adapter."""

import math
from typing import Optional

import httpx

from placecheck.config.settings import settings
from placecheck.errors import ProviderError
from placecheck.providers.base import GeocodeResult
from placecheck.providers.http import AsyncHttpProvider


class NominatimGeocoder(AsyncHttpProvider):
    """Geocode free-text addresses with the OpenStreetMap Nominatim search API."""

    provider_name = "nominatim"
    max_response_bytes = 500_000

    def __init__(
        self,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ) -> None:
        super().__init__(client=client, **kwargs)
        self.url = url or settings.nominatim_url

    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        """
        Return the first Nominatim match for ``address``.

        Returns None for blank input, no match, non-numeric coordinates or
        any provider failure.
        """
        if not address or not address.strip():
            return None

        try:
            data = await self._request_json(
                "GET",
                self.url,
                params={"format": "jsonv2", "q": address.strip(), "limit": 1},
            )
        except ProviderError as e:
            self.logger.warning(f"Geocoding failed for {address!r}: {e}")
            return None

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            self.logger.debug(f"No geocoding match for {address!r}")
            return None

        first = data[0]
        try:
            lat = float(first.get("lat"))
            lon = float(first.get("lon"))
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None

        display_name = first.get("display_name")
        return GeocodeResult(
            lat=lat,
            lon=lon,
            display_name=display_name if isinstance(display_name, str) else None,
        )
