"""Tests for environment-driven settings and API key lookup."""

import json

from placecheck.config.api_keys import ApiKeyProvider
from placecheck.config.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("MIN_SOURCES", "TIMEZONE", "DEFAULT_LOCALE", "FOOTPRINT_RADIUS_M"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(_env_file=None)

        assert settings.min_sources == 2
        assert settings.timezone == "Europe/Vienna"
        assert settings.default_locale == "de-AT"
        assert settings.footprint_radius_m == 60
        assert settings.overpass_endpoint == "https://overpass-api.de/api/interpreter"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MIN_SOURCES", "3")
        monkeypatch.setenv("locality", "Graz")

        settings = Settings(_env_file=None)

        assert settings.min_sources == 3
        assert settings.locality == "Graz"


class TestApiKeys:
    def test_json_blob_wins(self):
        keys = ApiKeyProvider(
            environ={
                "API_KEYS_JSON": json.dumps({"bing": "from-json", "wikipedia": ""}),
                "BING_API_KEY": "from-env",
            }
        )
        assert keys.bing_api_key == "from-json"
        assert keys.wikipedia_api_key is None

    def test_individual_variables(self):
        keys = ApiKeyProvider(environ={"BING_API_KEY": "b", "WIKIPEDIA_API_KEY": "w"})
        assert keys.bing_api_key == "b"
        assert keys.wikipedia_api_key == "w"

    def test_invalid_json_falls_back(self):
        keys = ApiKeyProvider(environ={"API_KEYS_JSON": "{not json", "BING_API_KEY": "b"})
        assert keys.bing_api_key == "b"

    def test_non_object_json_falls_back(self):
        keys = ApiKeyProvider(environ={"API_KEYS_JSON": "[1, 2]"})
        assert keys.get("bing") is None

    def test_cache_and_clear(self):
        environ = {"BING_API_KEY": "first"}
        keys = ApiKeyProvider(environ=environ)
        assert keys.bing_api_key == "first"

        environ["BING_API_KEY"] = "second"
        assert keys.bing_api_key == "first"

        keys.clear()
        assert keys.bing_api_key == "second"
