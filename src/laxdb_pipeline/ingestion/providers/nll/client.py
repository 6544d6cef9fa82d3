from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from laxdb_pipeline.ingestion.providers.base.client import BaseHttpClient


@dataclass
class NllClient:
    """
    National Lacrosse League stats feed.

    A single endpoint multiplexed by `data_type`; each call returns a JSON array.
    """

    http: BaseHttpClient

    def get_data(self, data_type: str, *, season_id: int) -> list[dict[str, Any]]:
        return self.http.get_json_list(
            "", params={"data_type": data_type, "season_id": str(season_id)}
        )

    def get_teams(self, season_id: int) -> list[dict[str, Any]]:
        return self.get_data("teams", season_id=season_id)

    def get_standings(self, season_id: int) -> list[dict[str, Any]]:
        return self.get_data("standings", season_id=season_id)
