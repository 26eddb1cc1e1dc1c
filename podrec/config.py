"""Centralized configuration for the podcast recommendation service.

This module reads environment variables (optionally from a .env file) using
Pydantic's `BaseSettings`. Services receive a `Settings` instance through
their constructors (or FastAPI's dependency injection) instead of reading
the environment themselves.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration pulled from environment variables."""

    # --- External API Keys --------------------------------------------------
    LISTENNOTES_API_KEY: Optional[str] = None
    HUGGING_FACE_API_KEY: Optional[str] = None

    # --- Listen Notes catalog -----------------------------------------------
    LISTENNOTES_BASE_URL: str = "https://listen-api.listennotes.com/api/v2"
    API_TIMEOUT: int = Field(10, description="Request timeout in seconds for external APIs")
    API_MAX_RETRIES: int = Field(0, description="Retries for timeouts and 5xx responses (0 disables retrying)")

    # --- Embeddings ---------------------------------------------------------
    EMBEDDING_MODEL: str = "sentence-transformers/all-mpnet-base-v2"
    EMBEDDING_API_URL: str = "https://router.huggingface.co/hf-inference/models"
    EMBEDDING_DIMENSION: int = Field(384, description="Length of the zero vector used when no embedding is available")
    EMBEDDING_MAX_INPUT_CHARS: int = 8000
    EMBEDDING_CACHE_KEY_CHARS: int = Field(100, description="Text prefix length used as the embedding cache key")
    EMBEDDING_CACHE_SIZE: int = 1024
    EMBEDDING_CACHE_TTL: int = Field(3600, description="Seconds an embedding stays cached")

    # --- Scoring weights ----------------------------------------------------
    WEIGHT_TITLE: float = 2.0
    WEIGHT_DESCRIPTION: float = 3.0
    WEIGHT_PUBLISHER: float = 0.5
    WEIGHT_TOPIC_MATCH: float = 1.5
    SEMANTIC_SHARE: float = Field(0.7, description="Share of the semantic score in the combined score")
    TOPIC_SHARE: float = Field(0.3, description="Share of the (boosted) topic score in the combined score")
    TOPICS_PER_PODCAST: int = 15

    # --- Candidate collection / output --------------------------------------
    MAX_GENRES: int = Field(2, description="Genres queried for best-in-genre candidates")
    GENRE_PAGE_SIZE: int = 20
    USE_SIMILAR_FALLBACK: bool = Field(False, description="Ask the catalog for similar podcasts when nothing else was found")
    MAX_RECOMMENDATIONS: int = 10

    # --- Web ----------------------------------------------------------------
    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars rather than error
    )


@lru_cache()
def get_settings() -> Settings:
    """Return a cached *singleton* Settings instance.

    Environment variables are parsed once per process, so every part of the
    app sees identical configuration values.
    """
    return Settings()  # type: ignore[call-arg]


__all__ = [
    "Settings",
    "get_settings",
]
