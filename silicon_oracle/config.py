"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_timeout_sec: float = Field(default=30.0, alias="OPENAI_TIMEOUT_SEC")
    openai_max_retries: int = Field(default=2, alias="OPENAI_MAX_RETRIES")

    llm_model_name: str = Field(default="gpt-4o", alias="LLM_MODEL_NAME")
    llm_temperature: float = Field(default=0.5, alias="LLM_TEMPERATURE")

    embedding_model_name: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL_NAME")
    embedding_dimensions: int = Field(default=1536, alias="EMBEDDING_DIMENSIONS")
    embed_batch_size: int = Field(default=64, alias="EMBED_BATCH_SIZE")

    vector_store_backend: str = Field(default="memory", alias="VECTOR_STORE_BACKEND")

    lore_dir: str = Field(default="./data", alias="LORE_DIR")

    chunk_size_chars: int = Field(default=1000, alias="CHUNK_SIZE_CHARS")
    chunk_overlap_chars: int = Field(default=200, alias="CHUNK_OVERLAP_CHARS")
    retrieval_top_k: int = Field(default=5, alias="RETRIEVAL_TOP_K")

    speech_model_name: str = Field(default="tts-1", alias="SPEECH_MODEL_NAME")
    speech_voice: str = Field(default="onyx", alias="SPEECH_VOICE")
    speech_max_chars: int = Field(default=5000, alias="SPEECH_MAX_CHARS")

    admin_token: SecretStr | None = Field(default=None, alias="ADMIN_TOKEN")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()


def setup_logging() -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    return logging.getLogger("silicon_oracle")


def public_settings() -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    return settings.model_dump(
        exclude={"openai_api_key", "admin_token"},
        exclude_none=True,
    )


def openai_api_key() -> str | None:
    return settings.openai_api_key.get_secret_value() if settings.openai_api_key else None


__all__ = ["Settings", "settings", "setup_logging", "public_settings", "openai_api_key"]
