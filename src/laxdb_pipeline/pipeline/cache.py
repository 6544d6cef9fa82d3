from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import quote

from laxdb_pipeline.ingestion.providers.base.client import BaseHttpClient
from laxdb_pipeline.ingestion.providers.base.errors import ProviderResponseError

logger = logging.getLogger(__name__)

DEFAULT_VIEWS: tuple[str, ...] = ("leaderboard", "players", "teams")


class CacheInvalidationError(RuntimeError):
    """One or more cache deletions for a source failed. Stored data is unaffected."""

    def __init__(self, source_code: str, failures: dict[str, BaseException]) -> None:
        self.source_code = source_code
        self.failures = failures
        detail = "; ".join(f"{key}: {err}" for key, err in failures.items())
        super().__init__(f"[{source_code}] failed to delete {len(failures)} cache key(s): {detail}")


@dataclass(frozen=True)
class CacheKey:
    view: str
    source_code: str

    def __str__(self) -> str:
        return f"cache:{self.view}:{self.source_code}"


def cache_keys_for(source_code: str, views: Sequence[str] = DEFAULT_VIEWS) -> list[CacheKey]:
    return [CacheKey(view=view, source_code=source_code) for view in views]


class CacheStore(Protocol):
    def delete(self, key: str) -> None:
        """Delete `key`. Deleting a missing key succeeds. Raises on failure."""
        ...


@dataclass
class KvRestCacheStore:
    """Workers KV namespace accessed through the Cloudflare REST API."""

    http: BaseHttpClient
    account_id: str
    namespace_id: str
    api_token: str

    def _path(self, key: str) -> str:
        return (
            f"/accounts/{self.account_id}/storage/kv/namespaces/{self.namespace_id}"
            f"/values/{quote(key, safe='')}"
        )

    def delete(self, key: str) -> None:
        data = self.http.request_json(
            "DELETE",
            self._path(key),
            headers={"Authorization": f"Bearer {self.api_token}"},
        )
        if data.get("success") is False:
            raise ProviderResponseError(f"KV delete of {key} failed: {data.get('errors')}")

    def close(self) -> None:
        self.http.close()


@dataclass
class CacheInvalidator:
    """Deletes every derived view cached for a source, concurrently."""

    store: CacheStore
    views: Sequence[str] = field(default=DEFAULT_VIEWS)
    max_workers: int = 4

    def invalidate(self, source_code: str) -> list[CacheKey]:
        keys = cache_keys_for(source_code, self.views)
        if not keys:
            return []

        failures: dict[str, BaseException] = {}
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(keys)),
            thread_name_prefix=f"cache-{source_code}",
        ) as pool:
            futures = {str(key): pool.submit(self.store.delete, str(key)) for key in keys}
            for key, future in futures.items():
                err = future.exception()
                if err is not None:
                    failures[key] = err

        if failures:
            raise CacheInvalidationError(source_code, failures)

        logger.info("[%s] invalidated %d cache keys", source_code, len(keys))
        return keys
