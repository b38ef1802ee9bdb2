"""Wikipedia page-summary adapter.

Tries the Wikimedia core API first (authenticated when a key is configured)
and falls back to the language wiki's public REST endpoint.
"""

import re
from typing import Any, Optional
from urllib.parse import quote

import httpx

from placecheck.config.api_keys import api_keys
from placecheck.errors import ProviderError
from placecheck.providers.base import EncyclopediaSummary
from placecheck.providers.http import AsyncHttpProvider
from placecheck.providers.wikidata import safe_lang

CORE_SUMMARY_URL = "https://api.wikimedia.org/core/v1/wikipedia/{lang}/page/summary/{title}"
REST_SUMMARY_URL = "https://{lang}.wikipedia.org/api/rest_v1/page/summary/{title}"

_WHITESPACE = re.compile(r"\s+")


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


class WikipediaSummaryProvider(AsyncHttpProvider):
    """Fetch article summaries (extract, description, canonical URL)."""

    provider_name = "wikipedia"
    max_response_bytes = 1_000_000

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        core_url: str = CORE_SUMMARY_URL,
        rest_url: str = REST_SUMMARY_URL,
        **kwargs,
    ) -> None:
        super().__init__(client=client, **kwargs)
        self.api_key = api_key if api_key is not None else api_keys.wikipedia_api_key
        self.core_url = core_url
        self.rest_url = rest_url

    async def fetch_summary(self, title: str, lang: str) -> Optional[EncyclopediaSummary]:
        cleaned = (title or "").strip()
        if not cleaned:
            return None
        lang = safe_lang(lang)
        encoded = quote(_WHITESPACE.sub("_", cleaned), safe="")

        summary = await self._try_fetch(
            self.core_url.format(lang=lang, title=encoded), lang, cleaned, use_key=True
        )
        if summary is not None:
            return summary
        return await self._try_fetch(
            self.rest_url.format(lang=lang, title=encoded), lang, cleaned, use_key=False
        )

    async def _try_fetch(
        self,
        url: str,
        lang: str,
        fallback_title: str,
        use_key: bool,
    ) -> Optional[EncyclopediaSummary]:
        headers = {"Accept": "application/json; charset=utf-8", "Accept-Language": lang}
        if use_key and self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            data = await self._request_json("GET", url, headers=headers)
        except ProviderError as e:
            if e.status_code == 404:
                self.logger.debug(f"No summary for {fallback_title!r} at {url}")
            else:
                self.logger.warning(f"Summary fetch failed for {fallback_title!r}: {e}")
            return None
        return self.parse_summary(data, lang, fallback_title)

    @staticmethod
    def parse_summary(raw: Any, lang: str, fallback_title: str) -> Optional[EncyclopediaSummary]:
        """Map a REST summary payload to EncyclopediaSummary."""
        if not isinstance(raw, dict):
            return None

        lang_value = _text(raw.get("lang")) or lang
        titles = _section(raw, "titles")
        normalized = (
            _text(titles.get("normalized"))
            or _text(titles.get("canonical"))
            or _text(raw.get("title"))
            or fallback_title
        )
        display = _text(raw.get("displaytitle")) or _text(raw.get("title")) or normalized

        urls = _section(raw, "content_urls")
        page_url = (
            _text(_section(urls, "desktop").get("page"))
            or _text(_section(urls, "mobile").get("page"))
            or f"https://{lang_value}.wikipedia.org/wiki/"
            + quote(_WHITESPACE.sub("_", normalized), safe="")
        )

        return EncyclopediaSummary(
            title=display,
            normalized_title=normalized,
            lang=lang_value,
            url=page_url,
            extract=_text(raw.get("extract")),
            description=_text(raw.get("description")),
            last_modified=_text(raw.get("timestamp")),
        )
