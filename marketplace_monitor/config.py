"""
Configuration settings for the Marketplace Monitor.

Uses Pydantic Settings to load environment variables for the record store,
the HTTP/Socket.IO server, the outbound ping and logging. Values are read
from the process environment first and then from an optional `.env` file.
"""
from __future__ import annotations

import json
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000,"
    "http://localhost:3001,"
    "http://localhost:3002,"
    "https://marketplace-analytics-dashboard-fro.vercel.app"
)

STORE_BACKENDS = ("postgres", "memory")


class Settings(BaseSettings):
    # Record store
    store_backend: str = Field("postgres", alias="STORE_BACKEND")
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("marketplace_analytics", alias="DB_NAME")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE", ge=0)
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE", ge=1)

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    cors_origins: str = Field(DEFAULT_CORS_ORIGINS, alias="CORS_ORIGINS")

    # Outbound ping
    ping_url: str = Field("https://httpbin.org/anything", alias="PING_URL")
    ping_timeout_ms: int = Field(10_000, alias="PING_TIMEOUT_MS", gt=0)
    ping_user_agent: str = Field("Marketplace-Analytics-Backend/1.0", alias="PING_USER_AGENT")
    ping_interval_seconds: int = Field(60, alias="PING_INTERVAL_SECONDS", gt=0)
    ping_cron: Optional[str] = Field(None, alias="PING_CRON")
    ping_on_startup: bool = Field(False, alias="PING_ON_STARTUP")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("store_backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in STORE_BACKENDS:
            raise ValueError(f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}")
        return value

    @field_validator("ping_cron")
    @classmethod
    def _blank_cron_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def cors_origin_list(self) -> List[str]:
        """CORS origins as a list; `*` allows any origin. Accepts a JSON list too."""
        raw = self.cors_origins.strip()
        if raw.startswith("["):
            parsed = json.loads(raw)
            origins = [str(origin).strip() for origin in parsed if str(origin).strip()]
        else:
            origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        return origins or ["*"]

    @property
    def ping_timeout_seconds(self) -> float:
        return self.ping_timeout_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
