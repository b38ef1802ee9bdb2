"""Tests for the Wikidata and Wikipedia adapters against a mock transport."""

from urllib.parse import parse_qs

import httpx
import pytest

from placecheck.providers.wikidata import (
    WikidataProvider,
    escape_sparql_literal,
    safe_lang,
)
from placecheck.providers.wikipedia import WikipediaSummaryProvider


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _bindings(*rows: dict) -> dict:
    return {
        "results": {
            "bindings": [
                {name: {"type": "literal", "value": value} for name, value in row.items()}
                for row in rows
            ]
        }
    }


class TestSparqlHelpers:
    def test_escape(self):
        assert escape_sparql_literal('Haus "Beispiel"') == 'Haus \\"Beispiel\\"'

    def test_safe_lang(self):
        assert safe_lang("DE") == "de"
        assert safe_lang("de}; DROP") == "dedrop"
        assert safe_lang("") == "en"


class TestWikidata:
    @pytest.mark.asyncio
    async def test_resolve_from_wikipedia(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["query"] = parse_qs(request.content.decode())["query"][0]
            return httpx.Response(200, json=_bindings({"item": "http://www.wikidata.org/entity/Q123456"}))

        provider = WikidataProvider(client=_client(handler))

        assert await provider.resolve_from_wikipedia("Haus_Beispiel", "de") == "Q123456"
        assert "https://de.wikipedia.org/" in seen["query"]
        assert 'lcase("Haus Beispiel")' in seen["query"]

    @pytest.mark.asyncio
    async def test_resolve_without_match(self):
        provider = WikidataProvider(client=_client(lambda r: httpx.Response(200, json=_bindings())))
        assert await provider.resolve_from_wikipedia("Haus Beispiel", "de") is None

    @pytest.mark.asyncio
    async def test_fetch_facts(self):
        payload = _bindings(
            {
                "itemLabel": "Haus Beispiel",
                "inceptionValue": "1801-01-01T00:00:00Z",
                "architectLabel": "Max Mustermann",
                "styleLabel": "Biedermeier",
                "heritageLabel": "Listed building",
                "coord": "Point(16.382 48.201)",
                "articleTitle": "Haus Beispiel",
            }
        )
        provider = WikidataProvider(client=_client(lambda r: httpx.Response(200, json=payload)))

        facts = await provider.fetch_facts("q123456", "de")

        assert facts.qid == "Q123456"
        assert facts.label == "Haus Beispiel"
        assert facts.inception == "1801-01-01T00:00:00Z"
        assert facts.architect == "Max Mustermann"
        assert facts.coords.lat == 48.201
        assert facts.coords.lon == 16.382
        assert facts.wikipedia_title == "Haus Beispiel"

    @pytest.mark.asyncio
    async def test_entity_without_fields(self):
        provider = WikidataProvider(client=_client(lambda r: httpx.Response(200, json=_bindings())))

        facts = await provider.fetch_facts("Q1", "de")

        assert facts.qid == "Q1"
        assert facts.label is None

    @pytest.mark.asyncio
    async def test_malformed_qid_skips_request(self):
        calls = []
        provider = WikidataProvider(client=_client(lambda r: calls.append(r) or httpx.Response(200)))

        assert await provider.fetch_facts("not-a-qid", "de") is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_failure_is_not_found(self):
        provider = WikidataProvider(client=_client(lambda r: httpx.Response(500)), max_retries=1)
        assert await provider.fetch_facts("Q1", "de") is None


class TestWikipedia:
    @pytest.fixture
    def payload(self) -> dict:
        return {
            "title": "Haus Beispiel",
            "displaytitle": "Haus Beispiel",
            "titles": {"normalized": "Haus_Beispiel"},
            "lang": "de",
            "extract": "Haus Beispiel is a fictional building in Vienna.",
            "description": "Building in Vienna",
            "timestamp": "2024-02-20T10:00:00Z",
            "content_urls": {"desktop": {"page": "https://de.wikipedia.org/wiki/Haus_Beispiel"}},
        }

    @pytest.mark.asyncio
    async def test_core_api_with_key(self, payload):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=payload)

        provider = WikipediaSummaryProvider(api_key="secret", client=_client(handler))

        summary = await provider.fetch_summary("Haus Beispiel", "de")

        assert summary.normalized_title == "Haus_Beispiel"
        assert summary.url == "https://de.wikipedia.org/wiki/Haus_Beispiel"
        assert summary.last_modified == "2024-02-20T10:00:00Z"
        assert seen[0].url.host == "api.wikimedia.org"
        assert seen[0].url.path.endswith("/wikipedia/de/page/summary/Haus_Beispiel")
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_falls_back_to_rest_endpoint(self, payload):
        hosts = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            if request.url.host == "api.wikimedia.org":
                return httpx.Response(404)
            return httpx.Response(200, json=payload)

        provider = WikipediaSummaryProvider(api_key="", client=_client(handler), max_retries=1)

        summary = await provider.fetch_summary("Haus Beispiel", "de")

        assert summary is not None
        assert hosts == ["api.wikimedia.org", "de.wikipedia.org"]

    @pytest.mark.asyncio
    async def test_missing_everywhere(self):
        provider = WikipediaSummaryProvider(
            api_key="", client=_client(lambda r: httpx.Response(404)), max_retries=1
        )
        assert await provider.fetch_summary("Nichts", "de") is None

    def test_parse_summary_fallbacks(self):
        summary = WikipediaSummaryProvider.parse_summary({"extract": "Text."}, "de", "Haus Beispiel")

        assert summary.title == "Haus Beispiel"
        assert summary.normalized_title == "Haus Beispiel"
        assert summary.url == "https://de.wikipedia.org/wiki/Haus_Beispiel"
        assert summary.extract == "Text."

    def test_parse_summary_rejects_non_objects(self):
        assert WikipediaSummaryProvider.parse_summary([], "de", "x") is None
