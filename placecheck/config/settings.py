"""Application settings using Pydantic BaseSettings for environment variable management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        user_agent: User-Agent sent to every external provider
        http_timeout_seconds: Per-request timeout for provider calls
        http_max_retries: Attempts per provider call on transport errors
        nominatim_url: Nominatim search endpoint
        overpass_endpoint: Overpass interpreter endpoint
        wikidata_sparql_url: Wikidata SPARQL endpoint
        footprint_radius_m: Search radius around the reference point
        default_locale: Locale used when the caller passes none
        timezone: Timezone used to stamp evidence access dates
        min_sources: Corroboration threshold per fact/claim
        min_claims: Claim padding floor for short paragraphs (0 disables)
        locality: Locality name used by claim templates and queries
        locality_local: Local-language locality name for localized queries
        bing_market: Bing market code
        bing_safe_search: Bing safe search level
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="Log output format: json or console",
    )
    user_agent: str = Field(
        default="placecheck/0.1 (+https://github.com/placecheck/placecheck)",
        description="User-Agent header for provider requests",
    )
    http_timeout_seconds: float = Field(
        default=12.0,
        description="Timeout per provider request",
    )
    http_max_retries: int = Field(
        default=2,
        description="Attempts per provider request on transport errors",
    )
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org/search",
        description="Nominatim search endpoint",
    )
    overpass_endpoint: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass interpreter endpoint",
    )
    wikidata_sparql_url: str = Field(
        default="https://query.wikidata.org/sparql",
        description="Wikidata SPARQL endpoint",
    )
    footprint_radius_m: int = Field(
        default=60,
        description="Radius in metres for the nearest-building lookup",
    )
    default_locale: str = Field(default="de-AT", description="Default locale tag")
    timezone: str = Field(
        default="Europe/Vienna",
        description="Timezone for evidence access dates",
    )
    min_sources: int = Field(
        default=2,
        description="Minimum independent sources per fact/claim",
    )
    min_claims: int = Field(
        default=4,
        description="Pad claim lists up to this many claims (0 disables)",
    )
    locality: str = Field(
        default="Vienna",
        description="Locality used by claim templates and query variants",
    )
    locality_local: str = Field(
        default="Wien",
        description="Local-language locality name used in localized queries",
    )
    bing_market: str = Field(default="en-GB", description="Bing market code")
    bing_safe_search: str = Field(
        default="Moderate",
        description="Bing safe search: Off, Moderate or Strict",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance - import this throughout the application
settings = Settings()
