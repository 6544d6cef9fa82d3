from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MissingSettingError(RuntimeError):
    """A setting required by the requested operation is not configured."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./laxdb_pipeline.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # Scheduled run
    pipeline_max_concurrency: int = Field(default=5, ge=1)
    pipeline_run_deadline_s: float = Field(default=900.0, gt=0)
    pipeline_timezone: str = "UTC"
    pipeline_user_agent: str = "Mozilla/5.0 (compatible; LaxDBBot/1.0; +https://laxdb.io/bot)"
    http_timeout_s: float = 30.0

    log_level: str = "INFO"

    # PLL
    pll_rest_base_url: str = "https://api.stats.premierlacrosseleague.com/api/v4"
    pll_rest_token: str | None = Field(default=None, repr=False)
    pll_season_year: int | None = None

    # NLL
    nll_base_url: str | None = None
    nll_season_id: int | None = None

    # Workers KV (derived view cache)
    kv_base_url: str = "https://api.cloudflare.com/client/v4"
    kv_account_id: str | None = None
    kv_namespace_id: str | None = None
    kv_api_token: str | None = Field(default=None, repr=False)

    # -----------------------------
    # Required-key helpers
    # -----------------------------

    def require_pll_rest_token(self) -> str:
        if not self.pll_rest_token:
            raise MissingSettingError(
                "PLL_REST_TOKEN is not set. "
                "Set it in the environment or .env file."
            )
        return self.pll_rest_token

    def require_nll_base_url(self) -> str:
        if not self.nll_base_url:
            raise MissingSettingError(
                "NLL_BASE_URL is not set. "
                "Set it in the environment or .env file."
            )
        return self.nll_base_url

    def require_nll_season_id(self) -> int:
        if self.nll_season_id is None:
            raise MissingSettingError(
                "NLL_SEASON_ID is not set. "
                "Set it in the environment or .env file."
            )
        return self.nll_season_id

    def require_kv_credentials(self) -> tuple[str, str, str]:
        if not self.kv_account_id or not self.kv_namespace_id or not self.kv_api_token:
            raise MissingSettingError(
                "KV_ACCOUNT_ID, KV_NAMESPACE_ID and KV_API_TOKEN must all be set. "
                "Set them in the environment or .env file."
            )
        return self.kv_account_id, self.kv_namespace_id, self.kv_api_token


settings = Settings()
