"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Model provider
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4"
    embedding_model: str = "text-embedding-3-large"
    embedding_dimensions: int = 2048

    # Corpus
    # JSON file of success and language patterns loaded at startup
    corpus_seed_path: Path | None = None

    # Retrieval
    rag_top_k: int = 10
    phrase_top_k: int = 5
    pattern_score_threshold: float = 0.6
    # Tuned separately from patterns even though both default to 0.6
    phrase_score_threshold: float = 0.6

    # Completion parameters
    intent_temperature: float = 0.1
    intent_max_tokens: int = 500
    reasoning_temperature: float = 0.1
    reasoning_max_tokens: int = 200

    # Freshness validation
    freshness_ttl_hours: int = 24
    freshness_http_timeout_s: float = 5.0

    # Day scheduling
    walking_speed_kmh: float = 4.0
    navigation_buffer_min: int = 5
    default_distance_km: float = 3.0
    same_district_km: dict[str, float] = {"Mitte": 1.5, "Kreuzberg": 1.0}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
