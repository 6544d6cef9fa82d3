from __future__ import annotations

from dataclasses import dataclass


class ProviderError(RuntimeError):
    """Base exception for provider-related failures."""


class ProviderRequestError(ProviderError):
    """HTTP/network/transport layer failures (connection errors, non-2xx, etc.)."""


class ProviderTimeout(ProviderRequestError):
    """The request did not complete within the client timeout."""


class ProviderRateLimited(ProviderRequestError):
    """Provider throttled the request (e.g., HTTP 429)."""


class ProviderUnavailable(ProviderRequestError):
    """Provider could not be reached or answered with a server error (5xx)."""


class ProviderMalformedResponse(ProviderRequestError):
    """Response body was not valid JSON or not the expected top-level shape."""


class ProviderResponseError(ProviderError):
    """Provider returned a well-formed response indicating an application-level error."""


class ProviderCapabilityError(ProviderError):
    """No extractor supports the requested source."""


@dataclass(frozen=True)
class ProviderMappingError(ProviderError):
    """Mapping/extraction failed due to unexpected schema or values."""
    message: str
    context: dict[str, object] | None = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"
