from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_env: str = "dev"
    log_level: str = "INFO"
    api_prefix: str = "/api"
    database_url: str = "sqlite+aiosqlite:///./dev.db"
    db_auto_create: bool = False

    # Language models
    llm_provider: Literal["gemini", "fake"] = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.2
    gemini_max_attempts: int = 1

    # Upload handling
    max_upload_bytes: int = 25 * MIB
    upload_chunk_size: int = MIB
    parallel_upload: bool = False
    classify_empty_text: bool = True

    # Object storage
    storage_backend: Literal["local", "supabase"] = "local"
    storage_key_prefix: str = "contract-analyses"
    local_storage_dir: str = "./uploads"
    public_base_url: str = "http://localhost:8000"
    storage_signing_secret: str = "change-me"
    signed_url_ttl_seconds: int = 3600

    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_bucket: str = "contracts"

    # Comma separated; empty disables CORS
    cors_allow_origins: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_allow_origins.split(",") if item.strip()]

    @field_validator("gemini_max_attempts")
    @classmethod
    def _at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("gemini_max_attempts must be >= 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
