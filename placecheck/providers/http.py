"""Shared async HTTP plumbing for provider adapters.

AsyncHttpProvider owns (or borrows) an httpx.AsyncClient, applies the
configured timeout and User-Agent, retries transport errors with tenacity
and enforces a response size cap. Failures surface as ProviderError so each
adapter can convert them to "not found" at its public boundary.
"""

import json
from typing import Any, Mapping, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from placecheck.config.settings import settings
from placecheck.errors import PayloadTooLargeError, ProviderError


class AsyncHttpProvider:
    """
    Base class for httpx-backed provider adapters.

    Usage:
        async with NominatimGeocoder() as geocoder:
            result = await geocoder.geocode("Ungargasse 5, Wien")

    Passing ``client`` lets callers share one connection pool (and lets
    tests inject an ``httpx.MockTransport``); a borrowed client is never
    closed by the provider.

    Attributes:
        provider_name: Short name used in logs and errors
        max_response_bytes: Responses larger than this are rejected
    """

    provider_name: str = "http"
    max_response_bytes: int = 2_000_000

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.http_max_retries
        )
        self._client = client
        self._owns_client = client is None
        self.logger = logger.bind(component=type(self).__name__)

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            self._owns_client = True
        return self._client

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        Send one request, retrying transport errors.

        Raises:
            ProviderError: Transport failure after retries or a non-2xx status
            PayloadTooLargeError: Body exceeds max_response_bytes
        """
        client = self._get_client()
        request_headers = {"User-Agent": self.user_agent}
        if headers:
            request_headers.update(headers)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await client.request(
                        method,
                        url,
                        params=params,
                        data=data,
                        headers=request_headers,
                        timeout=self.timeout,
                    )
        except httpx.HTTPError as e:
            raise ProviderError(self.provider_name, f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise ProviderError(
                self.provider_name,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if len(response.content) > self.max_response_bytes:
            raise PayloadTooLargeError(
                self.provider_name,
                f"response of {len(response.content)} bytes exceeds {self.max_response_bytes}",
            )
        return response

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and decode its JSON body."""
        response = await self._request(method, url, **kwargs)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderError(self.provider_name, f"invalid JSON: {e}") from e
