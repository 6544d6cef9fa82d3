from __future__ import annotations

import threading
import time

import httpx
import pytest

from laxdb_pipeline.ingestion.providers.base.client import BaseHttpClient
from laxdb_pipeline.ingestion.providers.base.errors import ProviderResponseError, ProviderUnavailable
from laxdb_pipeline.pipeline.cache import (
    CacheInvalidationError,
    CacheInvalidator,
    CacheKey,
    KvRestCacheStore,
    cache_keys_for,
)


class RecordingStore:
    def __init__(self, *, fail: set[str] | None = None, delay_s: float = 0.0) -> None:
        self.fail = fail or set()
        self.delay_s = delay_s
        self.deleted: list[str] = []
        self._lock = threading.Lock()

    def delete(self, key: str) -> None:
        if self.delay_s:
            time.sleep(self.delay_s)
        if key in self.fail:
            raise ProviderUnavailable(f"cannot delete {key}")
        with self._lock:
            self.deleted.append(key)


def test_cache_keys_are_derived_from_view_and_source() -> None:
    keys = cache_keys_for("PLL")

    assert [str(k) for k in keys] == [
        "cache:leaderboard:PLL",
        "cache:players:PLL",
        "cache:teams:PLL",
    ]
    assert CacheKey("teams", "NLL") == CacheKey("teams", "NLL")


def test_invalidate_deletes_every_view_key() -> None:
    store = RecordingStore()

    keys = CacheInvalidator(store=store).invalidate("NLL")

    assert sorted(store.deleted) == sorted(str(k) for k in keys)
    assert len(keys) == 3


def test_invalidate_issues_deletes_concurrently() -> None:
    store = RecordingStore(delay_s=0.2)

    t0 = time.monotonic()
    CacheInvalidator(store=store).invalidate("PLL")
    elapsed = time.monotonic() - t0

    assert len(store.deleted) == 3
    assert elapsed < 0.5


def test_invalidate_reports_all_failed_keys_after_attempting_all() -> None:
    store = RecordingStore(fail={"cache:players:PLL", "cache:teams:PLL"})

    with pytest.raises(CacheInvalidationError) as excinfo:
        CacheInvalidator(store=store).invalidate("PLL")

    assert excinfo.value.source_code == "PLL"
    assert set(excinfo.value.failures) == {"cache:players:PLL", "cache:teams:PLL"}
    assert store.deleted == ["cache:leaderboard:PLL"]


def test_kv_rest_store_deletes_url_encoded_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert request.headers["Authorization"] == "Bearer kv-token"
        assert request.url.path == (
            "/client/v4/accounts/acct/storage/kv/namespaces/ns/values/cache:leaderboard:PLL"
        )
        return httpx.Response(200, json={"success": True, "errors": [], "result": None})

    http = BaseHttpClient(
        base_url="https://api.cloudflare.com/client/v4", transport=httpx.MockTransport(handler)
    )
    store = KvRestCacheStore(http=http, account_id="acct", namespace_id="ns", api_token="kv-token")

    store.delete("cache:leaderboard:PLL")
    store.close()


def test_kv_rest_store_raises_on_unsuccessful_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "errors": [{"code": 10000}]})

    http = BaseHttpClient(base_url="https://kv.test", transport=httpx.MockTransport(handler))
    store = KvRestCacheStore(http=http, account_id="a", namespace_id="n", api_token="t")

    with pytest.raises(ProviderResponseError):
        store.delete("cache:teams:PLL")
