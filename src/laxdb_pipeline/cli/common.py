from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from zoneinfo import ZoneInfo

from sqlalchemy import Engine

from laxdb_pipeline.core.config import Settings
from laxdb_pipeline.db import DatabaseConfig, create_db_engine
from laxdb_pipeline.ingestion.providers.base.client import BaseHttpClient
from laxdb_pipeline.pipeline.cache import CacheInvalidator, KvRestCacheStore
from laxdb_pipeline.pipeline.orchestrator import OrchestratorConfig


def make_engine(settings: Settings) -> Engine:
    return create_db_engine(
        DatabaseConfig(database_url=settings.database_url, echo=settings.db_echo)
    )


def orchestrator_config(settings: Settings) -> OrchestratorConfig:
    return OrchestratorConfig(
        max_concurrency=settings.pipeline_max_concurrency,
        run_deadline_s=settings.pipeline_run_deadline_s,
        timezone=ZoneInfo(settings.pipeline_timezone),
    )


@contextmanager
def cache_invalidator(settings: Settings) -> Iterator[CacheInvalidator]:
    """
    KV-backed invalidator for CLI commands.
    Closes the underlying HTTP client on exit.
    """
    account_id, namespace_id, api_token = settings.require_kv_credentials()
    store = KvRestCacheStore(
        http=BaseHttpClient(base_url=settings.kv_base_url, timeout_s=settings.http_timeout_s),
        account_id=account_id,
        namespace_id=namespace_id,
        api_token=api_token,
    )
    try:
        yield CacheInvalidator(store=store)
    finally:
        store.close()
