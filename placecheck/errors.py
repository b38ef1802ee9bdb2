"""Exception hierarchy for placecheck.

Provider adapters raise ProviderError internally and convert it to a
"not found" result at their public boundary. The pipelines never let a
provider exception escape; they surface failures as notes instead.
"""

from typing import Optional


class PlacecheckError(Exception):
    """Base class for all placecheck errors."""


class ProviderError(PlacecheckError):
    """An external provider call failed (transport, HTTP status or payload).

    Attributes:
        provider: Short provider name, e.g. "overpass".
        status_code: HTTP status if the failure was an HTTP response.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class PayloadTooLargeError(ProviderError):
    """Provider response exceeded the configured size cap."""
