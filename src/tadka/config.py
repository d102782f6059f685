"""
Tadka - Configuration and settings.

All external capabilities are optional. A missing key never fails at import
time; it makes the matching capability report itself unavailable.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class TadkaSettings(BaseSettings):
    """
    Settings for the optimization core and its adapters.

    Loaded from environment variables and an optional .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI (generation + embeddings)
    openai_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"

    # Supabase (document store + pgvector index)
    supabase_url: str | None = None
    supabase_key: str | None = None
    documents_table: str = "documents"
    vectors_table: str = "dish_vectors"
    vector_namespace: str = "dishes"

    # LangSmith tracing (optional)
    langchain_tracing_v2: bool = False
    langchain_api_key: str | None = None
    langchain_project: str = "tadka"

    # Application
    tadka_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # External call policy
    retry_count: int = 3
    retry_base_delay: float = 1.0  # seconds
    retry_backoff_factor: float = 2.0
    call_timeout_seconds: float = 30.0

    # Optimization knobs
    dedup_threshold: float = 0.95
    embedding_cache_max_size: int = 500
    embedding_cache_ttl_seconds: float = 3600.0

    @property
    def is_development(self) -> bool:
        return self.tadka_env == "development"

    @property
    def is_production(self) -> bool:
        return self.tadka_env == "production"


@lru_cache
def get_settings() -> TadkaSettings:
    """Get cached settings instance."""
    return TadkaSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: TadkaSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
