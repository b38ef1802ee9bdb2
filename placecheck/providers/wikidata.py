"""Wikidata SPARQL adapter.

Two lookups:
- resolve_from_wikipedia: article title + language -> QID
- fetch_facts: QID -> label, inception (P571), architect (P84), style (P149),
  heritage designation (P1435), coordinates (P625) and the linked article
"""

import re
from typing import Any, Optional

import httpx

from placecheck.config.settings import settings
from placecheck.errors import ProviderError
from placecheck.providers.base import Coordinates, KnowledgeGraphFacts
from placecheck.providers.http import AsyncHttpProvider

_QID = re.compile(r"^Q\d+$")
_POINT = re.compile(r"Point\(([-0-9.]+) ([-0-9.]+)\)")
_LANG_UNSAFE = re.compile(r"[^a-z0-9_-]")

RESOLVE_QUERY = """
PREFIX schema: <http://schema.org/>
SELECT ?item WHERE {{
  ?article schema:about ?item ;
           schema:isPartOf <https://{lang}.wikipedia.org/> ;
           schema:name ?name .
  FILTER (lcase(str(?name)) = lcase("{title}"))
}}
LIMIT 1
"""

FACTS_QUERY = """
PREFIX wikibase: <http://wikiba.se/ontology#>
PREFIX wd: <http://www.wikidata.org/entity/>
PREFIX wdt: <http://www.wikidata.org/prop/direct/>
PREFIX schema: <http://schema.org/>
PREFIX bd: <http://www.bigdata.com/rdf#>
SELECT ?itemLabel ?inceptionValue ?architectLabel ?styleLabel ?heritageLabel ?coord ?articleTitle WHERE {{
  BIND(wd:{qid} AS ?item)
  OPTIONAL {{ ?item wdt:P571 ?inceptionRaw . BIND(STR(?inceptionRaw) AS ?inceptionValue) }}
  OPTIONAL {{ ?item wdt:P84 ?architect }}
  OPTIONAL {{ ?item wdt:P149 ?style }}
  OPTIONAL {{ ?item wdt:P1435 ?heritage }}
  OPTIONAL {{ ?item wdt:P625 ?coord }}
  OPTIONAL {{
    ?article schema:about ?item ;
             schema:isPartOf <https://{lang}.wikipedia.org/> ;
             schema:name ?articleTitle .
  }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang},en". }}
}}
LIMIT 1
"""


def escape_sparql_literal(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def safe_lang(lang: Optional[str]) -> str:
    """Lower-case language code restricted to ``[a-z0-9_-]``, ``en`` if empty."""
    cleaned = _LANG_UNSAFE.sub("", (lang or "").strip().lower())
    return cleaned or "en"


def _binding_value(binding: dict[str, Any], name: str) -> Optional[str]:
    entry = binding.get(name)
    if isinstance(entry, dict):
        value = entry.get("value")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class WikidataProvider(AsyncHttpProvider):
    """Knowledge-graph provider backed by the Wikidata query service."""

    provider_name = "wikidata"

    def __init__(
        self,
        sparql_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ) -> None:
        super().__init__(client=client, **kwargs)
        self.sparql_url = sparql_url or settings.wikidata_sparql_url

    async def resolve_from_wikipedia(self, title: str, lang: str) -> Optional[str]:
        """Return the QID of the entity the ``lang`` article ``title`` is about."""
        clean_title = (title or "").replace("_", " ").strip()
        if not clean_title:
            return None

        query = RESOLVE_QUERY.format(lang=safe_lang(lang), title=escape_sparql_literal(clean_title))
        bindings = await self._execute(query)
        if not bindings:
            return None

        item = _binding_value(bindings[0], "item")
        if not item:
            return None
        qid = item.rsplit("/", 1)[-1]
        return qid if _QID.match(qid) else None

    async def fetch_facts(self, qid: str, lang: str) -> Optional[KnowledgeGraphFacts]:
        """
        Fetch building-relevant fields for ``qid``.

        Returns None on failure or a malformed QID, and a facts object with
        only ``qid`` set when the entity has none of the fields.
        """
        qid = (qid or "").strip().upper()
        if not _QID.match(qid):
            return None

        bindings = await self._execute(FACTS_QUERY.format(qid=qid, lang=safe_lang(lang)))
        if bindings is None:
            return None
        if not bindings:
            return KnowledgeGraphFacts(qid=qid)

        binding = bindings[0]
        coords = None
        raw_coord = _binding_value(binding, "coord")
        if raw_coord:
            match = _POINT.search(raw_coord)
            if match:
                try:
                    coords = Coordinates(lon=float(match.group(1)), lat=float(match.group(2)))
                except ValueError:
                    coords = None

        return KnowledgeGraphFacts(
            qid=qid,
            label=_binding_value(binding, "itemLabel"),
            inception=_binding_value(binding, "inceptionValue"),
            architect=_binding_value(binding, "architectLabel"),
            style=_binding_value(binding, "styleLabel"),
            heritage=_binding_value(binding, "heritageLabel"),
            coords=coords,
            wikipedia_title=_binding_value(binding, "articleTitle"),
        )

    async def _execute(self, query: str) -> Optional[list[dict[str, Any]]]:
        """Run a SPARQL query; None on failure, else the result bindings."""
        try:
            payload = await self._request_json(
                "POST",
                self.sparql_url,
                data={"query": query},
                headers={"Accept": "application/sparql-results+json"},
            )
        except ProviderError as e:
            self.logger.warning(f"SPARQL query failed: {e}")
            return None

        results = payload.get("results") if isinstance(payload, dict) else None
        bindings = results.get("bindings") if isinstance(results, dict) else None
        if not isinstance(bindings, list):
            return None
        return [b for b in bindings if isinstance(b, dict)]
