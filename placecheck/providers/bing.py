"""Bing Web Search adapter.

Without an API key the adapter runs in mock mode: searches return no hits
and a warning is logged once, so development and tests work offline.
"""

from typing import Optional

import httpx

from placecheck.config.api_keys import api_keys
from placecheck.config.settings import settings
from placecheck.errors import ProviderError
from placecheck.providers.base import OpenedPage, SearchHit
from placecheck.providers.http import AsyncHttpProvider
from placecheck.utils.dates import parse_publish_date

BING_ENDPOINT = "https://api.bing.microsoft.com/v7.0/search"
MAX_RESULTS_CAP = 50
OPEN_URL_MAX_BYTES = 200_000


def to_freshness(recency_days: Optional[int]) -> Optional[str]:
    """Map a recency window in days to Bing's freshness values."""
    if recency_days is None:
        return None
    if recency_days <= 1:
        return "Day"
    if recency_days <= 7:
        return "Week"
    return "Month"


class BingWebSearch(AsyncHttpProvider):
    """Web search via the Bing v7 API, plus direct page fetching."""

    provider_name = "bing"

    def __init__(
        self,
        api_key: Optional[str] = None,
        market: Optional[str] = None,
        safe_search: Optional[str] = None,
        endpoint: str = BING_ENDPOINT,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ) -> None:
        super().__init__(client=client, **kwargs)
        self.api_key = api_key or api_keys.bing_api_key
        self.market = market or settings.bing_market
        self.safe_search = safe_search or settings.bing_safe_search
        self.endpoint = endpoint

        if not self.api_key:
            self.logger.warning("BING_API_KEY not set, web search returns no results")

    async def search(
        self,
        query: str,
        recency_days: Optional[int] = None,
        max_results: int = 10,
    ) -> list[SearchHit]:
        if not self.api_key or not query or not query.strip():
            return []

        params = {
            "q": query,
            "mkt": self.market,
            "count": str(max(1, min(max_results, MAX_RESULTS_CAP))),
            "safeSearch": self.safe_search,
        }
        freshness = to_freshness(recency_days)
        if freshness:
            params["freshness"] = freshness

        try:
            data = await self._request_json(
                "GET",
                self.endpoint,
                params=params,
                headers={"Ocp-Apim-Subscription-Key": self.api_key},
            )
        except ProviderError as e:
            self.logger.warning(f"Bing search failed for {query[:60]!r}: {e}")
            return []

        web_pages = data.get("webPages") if isinstance(data, dict) else None
        items = web_pages.get("value") if isinstance(web_pages, dict) else None
        if not isinstance(items, list):
            return []

        hits: list[SearchHit] = []
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("url"), str):
                continue
            name = item.get("name")
            title = name.strip() if isinstance(name, str) and name.strip() else item["url"]
            snippet = item.get("snippet") if isinstance(item.get("snippet"), str) else None
            published = item.get("datePublished") or item.get("dateLastCrawled")
            hits.append(
                SearchHit(
                    title=title,
                    url=item["url"],
                    snippet=snippet,
                    publish_date=parse_publish_date(published) if isinstance(published, str) else None,
                )
            )
        self.logger.debug(f"Bing returned {len(hits)} hits for {query[:60]!r}")
        return hits

    async def open_url(self, url: str) -> OpenedPage:
        """Fetch a page, following redirects, reading at most OPEN_URL_MAX_BYTES."""
        client = self._get_client()
        try:
            async with client.stream(
                "GET",
                url,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            ) as response:
                final_url = str(response.url)
                if response.status_code >= 400:
                    return OpenedPage(ok=False, final_url=final_url)
                chunks: list[bytes] = []
                received = 0
                async for chunk in response.aiter_bytes():
                    remaining = OPEN_URL_MAX_BYTES - received
                    chunks.append(chunk[:remaining])
                    received += min(len(chunk), remaining)
                    if received >= OPEN_URL_MAX_BYTES:
                        break
                encoding = response.encoding or "utf-8"
                text = b"".join(chunks).decode(encoding, errors="replace")
        except (httpx.HTTPError, httpx.InvalidURL, LookupError, ValueError) as e:
            self.logger.debug(f"open_url failed for {url}: {e}")
            return OpenedPage(ok=False, final_url=url)
        return OpenedPage(ok=True, final_url=final_url, text=text)
