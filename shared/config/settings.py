"""
Centralized configuration management for the ReadZero services.
Uses Pydantic Settings for validation and type safety.
"""

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppBaseSettings(BaseSettings):
    """Base settings with shared configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class DatabaseSettings(AppBaseSettings):
    """Database configuration settings."""

    postgres_user: str = Field(
        default="postgres",
        validation_alias="POSTGRES_USER",
    )
    postgres_password: str = Field(
        default="",
        validation_alias="POSTGRES_PASSWORD",
    )
    postgres_db: str = Field(
        default="readzero",
        validation_alias="POSTGRES_DB",
    )
    postgres_host: str = Field(
        default="postgres",
        validation_alias="POSTGRES_HOST",
    )
    postgres_port: int = Field(
        default=5432,
        validation_alias="POSTGRES_PORT",
    )
    postgres_url: Optional[str] = Field(
        default=None,
        validation_alias="POSTGRES_URL",
    )
    echo_sql: bool = Field(
        default=False,
        validation_alias="DATABASE_ECHO",
    )

    @validator("postgres_url", pre=True, always=True)
    def validate_postgres_url(cls, v, values):
        """Assemble the database URL from its parts when not given."""
        if not v:
            user = values.get("postgres_user", "postgres")
            password = values.get("postgres_password", "")
            host = values.get("postgres_host", "postgres")
            port = values.get("postgres_port", 5432)
            db = values.get("postgres_db", "readzero")
            return f"postgresql://{user}:{password}@{host}:{port}/{db}"
        return v


class CompletionSettings(AppBaseSettings):
    """Text-completion service (OpenAI-compatible chat completions)."""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias="OPENROUTER_API_KEY",
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        validation_alias="OPENROUTER_BASE_URL",
    )
    model: str = Field(
        default="anthropic/claude-3.5-haiku",
        validation_alias="LLM_MODEL",
    )
    max_tokens: int = Field(
        default=1024,
        validation_alias="LLM_MAX_TOKENS",
    )
    digest_max_tokens: int = Field(
        default=2048,
        validation_alias="LLM_DIGEST_MAX_TOKENS",
    )
    temperature: float = Field(
        default=0.3,
        validation_alias="LLM_TEMPERATURE",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="LLM_TIMEOUT",
    )
    app_title: str = Field(
        default="ReadZero App",
        validation_alias="LLM_APP_TITLE",
    )
    referer: Optional[str] = Field(
        default=None,
        validation_alias="LLM_HTTP_REFERER",
    )


class ReaderSettings(AppBaseSettings):
    """Reader-proxy (Jina Reader) configuration."""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias="JINA_API_KEY",
    )
    base_url: str = Field(
        default="https://r.jina.ai/",
        validation_alias="JINA_BASE_URL",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="JINA_TIMEOUT",
    )


class SearchSettings(AppBaseSettings):
    """Related-article search (Tavily) configuration."""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias="TAVILY_API_KEY",
    )
    endpoint: str = Field(
        default="https://api.tavily.com/search",
        validation_alias="TAVILY_ENDPOINT",
    )
    max_results: int = Field(
        default=5,
        validation_alias="TAVILY_MAX_RESULTS",
    )
    max_query_length: int = Field(
        default=200,
        validation_alias="TAVILY_MAX_QUERY_LENGTH",
    )


class XAISettings(AppBaseSettings):
    """AI search tool used for X posts."""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias="XAI_API_KEY",
    )
    base_url: str = Field(
        default="https://api.x.ai/v1",
        validation_alias="XAI_BASE_URL",
    )
    model: str = Field(
        default="grok-4-1-fast",
        validation_alias="XAI_MODEL",
    )
    timeout: float = Field(
        default=60.0,
        validation_alias="XAI_TIMEOUT",
    )


class ExtractionSettings(AppBaseSettings):
    """Thresholds and routing for the extraction pipeline."""

    fetch_timeout: float = Field(
        default=20.0,
        validation_alias="FETCH_TIMEOUT",
    )
    readability_min_length: int = Field(
        default=100,
        validation_alias="READABILITY_MIN_LENGTH",
    )
    pre_extracted_min_length: int = Field(
        default=50,
        validation_alias="PRE_EXTRACTED_MIN_LENGTH",
    )
    analysis_min_length: int = Field(
        default=200,
        validation_alias="ANALYSIS_MIN_LENGTH",
    )
    max_prompt_chars: int = Field(
        default=10000,
        validation_alias="MAX_PROMPT_CHARS",
    )
    max_images: int = Field(
        default=5,
        validation_alias="MAX_IMAGES",
    )
    reader_first_sites: Annotated[List[str], NoDecode] = Field(
        default=[
            "medium.com",
            "bloomberg.com",
            "stackoverflow.com",
            "youtube.com",
            "podcasts.apple.com",
        ],
        validation_alias="READER_FIRST_SITES",
    )

    @validator("reader_first_sites", pre=True)
    def parse_list_from_string(cls, v):
        """Parse comma-separated string into list if needed."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class SchedulerSettings(AppBaseSettings):
    """Daily digest trigger settings."""

    composer_url: str = Field(
        default="http://composer:8003",
        validation_alias="COMPOSER_URL",
    )
    digest_time: str = Field(
        default="08:00",
        validation_alias="DIGEST_TIME",
    )
    http_timeout: float = Field(
        default=300.0,
        validation_alias="SCHEDULER_HTTP_TIMEOUT",
    )


class LoggingSettings(AppBaseSettings):
    """Logging configuration settings."""

    level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
    )
    include_correlation_id: bool = Field(
        default=True,
        validation_alias="LOG_INCLUDE_CORRELATION_ID",
    )
    json_logs: bool = Field(
        default=False,
        validation_alias="JSON_LOGS",
    )


class Settings(AppBaseSettings):
    """Main settings class that combines all configuration sections."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    completion: CompletionSettings = Field(default_factory=CompletionSettings)
    reader: ReaderSettings = Field(default_factory=ReaderSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    xai: XAISettings = Field(default_factory=XAISettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    service_name: str = Field(
        default="readzero",
        validation_alias="SERVICE_NAME",
    )
    environment: str = Field(
        default="development",
        validation_alias="ENVIRONMENT",
    )
    version: str = Field(
        default="1.0.0",
        validation_alias="SERVICE_VERSION",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
