from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from laxdb_pipeline.ingestion.providers.base.client import BaseHttpClient
from laxdb_pipeline.ingestion.providers.base.errors import ProviderMalformedResponse

PLL_WEB_HEADERS = {
    "authsource": "web",
    "origin": "https://premierlacrosseleague.com",
    "referer": "https://premierlacrosseleague.com/",
}


@dataclass
class PllClient:
    """Premier Lacrosse League stats REST API (v4)."""

    http: BaseHttpClient
    token: str

    def _headers(self) -> dict[str, str]:
        return {**PLL_WEB_HEADERS, "Authorization": f"Bearer {self.token}"}

    def get(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return self.http.get_json(path, params=params, headers=self._headers())

    def get_standings(self, year: int, *, champ_series: bool = False) -> list[dict[str, Any]]:
        payload = self.get(
            "/standings",
            params={"year": str(year), "champSeries": "true" if champ_series else "false"},
        )
        data = payload.get("data")
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ProviderMalformedResponse(f"Expected 'data.items' list, got: {type(items)}")
        return [i for i in items if isinstance(i, dict)]
