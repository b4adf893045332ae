from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings read from the environment, `.env` and `.env.local`."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),  # later files win
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str = Field(default="sqlite:///./content_admin.db", alias="DATABASE_URL")
    supabase_anon_key: str = Field(default="", alias="SUPABASE_ANON_KEY")
    supabase_service_role_key: str = Field(default="", alias="SUPABASE_SERVICE_ROLE_KEY")

    cors_origins: List[str] = Field(default_factory=list, alias="CORS_ORIGINS")
    reorder_max_workers: int = Field(default=8, ge=1, alias="REORDER_MAX_WORKERS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=0, alias="DB_MAX_OVERFLOW")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
