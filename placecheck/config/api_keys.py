"""API key lookup with an in-process cache.

Keys are read once from ``API_KEYS_JSON`` (a JSON object such as
``{"bing": "...", "wikipedia": "..."}``) or, failing that, from the
individual ``BING_API_KEY`` / ``WIKIPEDIA_API_KEY`` variables. The cache is
read-mostly: concurrent first reads may both load, which is harmless.
"""

import json
import os
from typing import Mapping, Optional

from loguru import logger

# Key name -> individual environment variable
_ENV_VARS: dict[str, str] = {
    "bing": "BING_API_KEY",
    "wikipedia": "WIKIPEDIA_API_KEY",
}


class ApiKeyProvider:
    """Resolve provider API keys from the environment, caching the result."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ if environ is not None else os.environ
        self._cache: Optional[dict[str, str]] = None
        self.logger = logger.bind(component="ApiKeyProvider")

    @property
    def bing_api_key(self) -> Optional[str]:
        return self.get("bing")

    @property
    def wikipedia_api_key(self) -> Optional[str]:
        return self.get("wikipedia")

    def get(self, name: str) -> Optional[str]:
        """Return the key called ``name`` or None when it is not configured."""
        if self._cache is None:
            self._cache = self._load()
        value = self._cache.get(name)
        return value or None

    def clear(self) -> None:
        """Drop the cache so the next lookup re-reads the environment."""
        self._cache = None

    def _load(self) -> dict[str, str]:
        raw = self._environ.get("API_KEYS_JSON")
        if raw:
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError as e:
                self.logger.error(f"API_KEYS_JSON is not valid JSON: {e}")
            else:
                if isinstance(parsed, dict):
                    return {
                        str(k): str(v)
                        for k, v in parsed.items()
                        if isinstance(v, str) and v
                    }
                self.logger.error("API_KEYS_JSON must be a JSON object")

        keys: dict[str, str] = {}
        for name, env_var in _ENV_VARS.items():
            value = self._environ.get(env_var)
            if value:
                keys[name] = value
        self.logger.debug("API keys loaded", configured=sorted(keys))
        return keys


# Shared provider for the CLI and default adapter construction
api_keys = ApiKeyProvider()
