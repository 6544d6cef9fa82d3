from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from laxdb_pipeline.db.enums import EntityTypeEnum
from laxdb_pipeline.ingestion.providers.base.errors import ProviderError, ProviderMappingError
from laxdb_pipeline.ingestion.providers.base.types import ExtractedRecord, ExtractResult
from laxdb_pipeline.ingestion.providers.pll.client import PllClient
from laxdb_pipeline.ingestion.seasons import SourceDescriptor

logger = logging.getLogger(__name__)

_TEAM_FIELDS = ("teamId", "fullName", "location", "locationCode", "urlLogo")


def map_pll_standings(items: list[dict[str, Any]], *, year: int) -> list[ExtractedRecord]:
    """Turn PLL standings rows into team + standing records."""

    records: list[ExtractedRecord] = []
    for item in items:
        team_id = item.get("teamId")
        if not isinstance(team_id, str) or not team_id:
            raise ProviderMappingError(
                "PLL standing row is missing teamId", context={"year": year, "row": item}
            )

        records.append(
            ExtractedRecord(
                entity_type=EntityTypeEnum.TEAM,
                external_id=team_id,
                payload={k: item.get(k) for k in _TEAM_FIELDS},
            )
        )
        records.append(
            ExtractedRecord(
                entity_type=EntityTypeEnum.STANDING,
                external_id=f"{year}:{team_id}",
                payload={**item, "year": year},
            )
        )
    return records


@dataclass
class PllExtractor:
    client: PllClient
    season_year: int
    source_code: str = "PLL"

    def close(self) -> None:
        self.client.http.close()

    def extract(self, source: SourceDescriptor) -> ExtractResult:
        try:
            items = self.client.get_standings(self.season_year)
            records = map_pll_standings(items, year=self.season_year)
        except ProviderError as e:
            logger.warning("[%s] extract failed: %s", source.code, e)
            return ExtractResult.failure(e)

        logger.info(
            "[%s] fetched %d standings rows for %d", source.code, len(items), self.season_year
        )
        return ExtractResult.success(records)
