"""Application configuration loaded from environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration — reads from environment / .env file."""

    # Upstream KKJ search API
    kkj_api_base_url: str = "http://www.kkj.go.jp/api/"
    kkj_timeout_seconds: int = 30
    search_count_hint: int = 100     # results fetched per upstream call
    page_size: int = 10

    # Result store: "session" keeps results in process memory,
    # "shared" uses Redis so several instances see the same cache
    store_backend: Literal["session", "shared"] = "session"
    redis_url: str = "redis://localhost:6379"

    # Cache TTLs (seconds)
    cache_ttl_search: int = 3600      # 1 hour
    cache_ttl_detail: int = 86400     # 24 hours
    session_idle_ttl: int = 3600

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: str = "*"

    # Auth
    environment: Literal["development", "production"] = "development"
    api_keys: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",")]

    @property
    def api_key_list(self) -> list[str]:
        return [k.strip() for k in self.api_keys.split(",") if k.strip()]

    @property
    def auth_enabled(self) -> bool:
        return self.environment == "production" and bool(self.api_key_list)


settings = Settings()
