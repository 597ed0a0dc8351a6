"""Configuration management for guest_knows.

This module provides typed configuration classes using pydantic-settings.
Configuration is loaded from environment variables with optional .env file support.
"""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "ApiSettings",
    "GuestKnowsConfig",
    "IndexSettings",
    "IngestSettings",
    "LLMSettings",
    "NotifierSettings",
    "RedisSettings",
]


class RedisSettings(BaseSettings):
    """Redis connection settings for the knowledge store."""

    model_config = SettingsConfigDict(
        env_prefix="GUEST_KNOWS_REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = "redis://localhost:6379/0"
    key_prefix: str = ""


class IndexSettings(BaseSettings):
    """Secondary index maintenance settings.

    With atomic_appends disabled, index appends are a plain read then
    write and concurrent ingestions touching the same key can lose ids.
    """

    model_config = SettingsConfigDict(
        env_prefix="GUEST_KNOWS_INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ttl_seconds: int = 31_536_000  # 1 year
    atomic_appends: bool = True
    max_append_retries: int = 10


class IngestSettings(BaseSettings):
    """Webhook ingestion settings."""

    model_config = SettingsConfigDict(
        env_prefix="GUEST_KNOWS_INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Operator's own mail domains; senders on these are never guests
    host_domains: list[str] = ["capehost.ai", "capehost.com"]
    default_source: str = "gmail_webhook"


class LLMSettings(BaseSettings):
    """LLM provider settings for reply drafting.

    OpenAI is used when its key is set, otherwise Anthropic.
    With neither key configured, replies come from the template fallback.
    """

    model_config = SettingsConfigDict(
        env_prefix="GUEST_KNOWS_LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-haiku-20240307"
    temperature: float = 0.7
    max_tokens: int = 500


class NotifierSettings(BaseSettings):
    """Host notification settings."""

    model_config = SettingsConfigDict(
        env_prefix="GUEST_KNOWS_NOTIFIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host_email: str = "host@capehost.ai"


class ApiSettings(BaseSettings):
    """HTTP API settings.

    ingest_token_old is accepted alongside ingest_token while a
    token rotation is in progress.
    """

    model_config = SettingsConfigDict(
        env_prefix="GUEST_KNOWS_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ingest_token: SecretStr | None = None
    ingest_token_old: SecretStr | None = None
    host: str = "0.0.0.0"
    port: int = 8000
    log_json: bool = False
    log_level: str = "INFO"
    storage_backend: Literal["redis", "memory"] = "redis"


class GuestKnowsConfig(BaseSettings):
    """Main configuration aggregating all settings.

    Example usage:
        config = GuestKnowsConfig()
        token = config.api.ingest_token.get_secret_value()
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    redis: RedisSettings = RedisSettings()
    index: IndexSettings = IndexSettings()
    ingest: IngestSettings = IngestSettings()
    llm: LLMSettings = LLMSettings()
    notifier: NotifierSettings = NotifierSettings()
    api: ApiSettings = ApiSettings()

    @property
    def llm_enabled(self) -> bool:
        """Check if any LLM provider key is configured."""
        return self.llm.openai_api_key is not None or self.llm.anthropic_api_key is not None
