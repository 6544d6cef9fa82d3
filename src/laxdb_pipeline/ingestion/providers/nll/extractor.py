from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from laxdb_pipeline.db.enums import EntityTypeEnum
from laxdb_pipeline.ingestion.providers.base.errors import ProviderError, ProviderMappingError
from laxdb_pipeline.ingestion.providers.base.types import ExtractedRecord, ExtractResult
from laxdb_pipeline.ingestion.providers.nll.client import NllClient
from laxdb_pipeline.ingestion.seasons import SourceDescriptor

logger = logging.getLogger(__name__)


def _team_id(row: dict[str, Any], *, kind: str, season_id: int) -> str:
    raw = row.get("team_id", row.get("id"))
    if raw is None or str(raw) == "":
        raise ProviderMappingError(
            f"NLL {kind} row is missing a team id",
            context={"season_id": season_id, "row": row},
        )
    return str(raw)


def map_nll_teams(rows: list[dict[str, Any]], *, season_id: int) -> list[ExtractedRecord]:
    return [
        ExtractedRecord(
            entity_type=EntityTypeEnum.TEAM,
            external_id=_team_id(row, kind="team", season_id=season_id),
            payload=row,
        )
        for row in rows
    ]


def map_nll_standings(rows: list[dict[str, Any]], *, season_id: int) -> list[ExtractedRecord]:
    return [
        ExtractedRecord(
            entity_type=EntityTypeEnum.STANDING,
            external_id=f"{season_id}:{_team_id(row, kind='standing', season_id=season_id)}",
            payload={**row, "season_id": season_id},
        )
        for row in rows
    ]


@dataclass
class NllExtractor:
    client: NllClient
    season_id: int
    source_code: str = "NLL"

    def close(self) -> None:
        self.client.http.close()

    def extract(self, source: SourceDescriptor) -> ExtractResult:
        try:
            teams = self.client.get_teams(self.season_id)
            standings = self.client.get_standings(self.season_id)
            records = map_nll_teams(teams, season_id=self.season_id) + map_nll_standings(
                standings, season_id=self.season_id
            )
        except ProviderError as e:
            logger.warning("[%s] extract failed: %s", source.code, e)
            return ExtractResult.failure(e)

        logger.info(
            "[%s] fetched %d teams and %d standings rows for season %d",
            source.code,
            len(teams),
            len(standings),
            self.season_id,
        )
        return ExtractResult.success(records)
