from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .errors import (
    ProviderMalformedResponse,
    ProviderRateLimited,
    ProviderRequestError,
    ProviderTimeout,
    ProviderUnavailable,
)


Json = dict[str, Any]


@dataclass
class BaseHttpClient:
    """
    Provider-agnostic HTTP client wrapper.

    - Uses a single underlying httpx.Client for connection pooling.
    - Maps transport failures and non-2xx responses onto the typed ProviderRequestError family.
    - Provider-specific clients wrap this and add convenience methods / auth.
    """

    base_url: str
    timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    headers: Mapping[str, str] = field(default_factory=dict)

    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        self._client = httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s),
            headers=dict(self.headers),
            transport=self.transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BaseHttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Perform an HTTP request and return the parsed JSON body (any JSON type).
        Raises a ProviderRequestError subclass on transport issues / non-2xx / invalid JSON.
        """
        try:
            resp = self._client.request(
                method=method,
                url=path.lstrip("/"),
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeout(f"{method} {path} timed out: {e}") from e
        except httpx.TransportError as e:
            raise ProviderUnavailable(f"{method} {path} failed: {e}") from e

        if resp.status_code == 429:
            raise ProviderRateLimited("Provider rate limited the request (HTTP 429).")

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = f"HTTP {resp.status_code} for {method} {resp.request.url}"
            if resp.status_code >= 500:
                raise ProviderUnavailable(message) from e
            raise ProviderRequestError(message) from e

        try:
            return resp.json()
        except ValueError as e:
            raise ProviderMalformedResponse("Response was not valid JSON.") from e

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        data = self.request(method, path, params=params, json=json, headers=headers)
        if not isinstance(data, dict):
            raise ProviderMalformedResponse(f"Expected JSON object, got {type(data)}")
        return data

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        return self.request_json("GET", path, params=params, headers=headers)

    def get_json_list(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> list[Json]:
        data = self.request("GET", path, params=params, headers=headers)
        if not isinstance(data, list):
            raise ProviderMalformedResponse(f"Expected JSON array, got {type(data)}")
        return [item for item in data if isinstance(item, dict)]
