from __future__ import annotations

from datetime import UTC, datetime

from laxdb_pipeline.core.config import Settings
from laxdb_pipeline.ingestion.providers.base.client import BaseHttpClient
from laxdb_pipeline.ingestion.providers.base.registry import ExtractorRegistry
from laxdb_pipeline.ingestion.providers.nll.client import NllClient
from laxdb_pipeline.ingestion.providers.nll.extractor import NllExtractor
from laxdb_pipeline.ingestion.providers.pll.client import PllClient
from laxdb_pipeline.ingestion.providers.pll.extractor import PllExtractor


def _http(settings: Settings, base_url: str) -> BaseHttpClient:
    return BaseHttpClient(
        base_url=base_url,
        timeout_s=settings.http_timeout_s,
        headers={"User-Agent": settings.pipeline_user_agent},
    )


def build_default_registry(settings: Settings) -> ExtractorRegistry:
    """
    Register the league extractors this package ships.

    Factories resolve credentials lazily, so a missing token only fails the
    source that needs it.
    """

    registry = ExtractorRegistry()

    def pll() -> PllExtractor:
        token = settings.require_pll_rest_token()
        year = settings.pll_season_year or datetime.now(tz=UTC).year
        return PllExtractor(
            client=PllClient(http=_http(settings, settings.pll_rest_base_url), token=token),
            season_year=year,
        )

    def nll() -> NllExtractor:
        base_url = settings.require_nll_base_url()
        season_id = settings.require_nll_season_id()
        return NllExtractor(client=NllClient(http=_http(settings, base_url)), season_id=season_id)

    registry.register("PLL", pll)
    registry.register("NLL", nll)
    return registry
