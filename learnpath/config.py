"""
Configuration using Pydantic Settings for the Learning Path course service
"""
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings with validation and type safety"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # LLM provider credentials
    openai_api_key: Optional[str] = Field(default=None)
    anthropic_api_key: Optional[str] = Field(default=None)
    gemini_api_key: Optional[str] = Field(default=None)

    # Course generation model
    course_llm_provider: str = Field(default="anthropic")
    course_llm_model: str = Field(default="claude-3-5-sonnet-20241022")

    # LLM Configuration
    llm_temperature: float = Field(default=0.7)
    llm_max_tokens: int = Field(default=4096)
    llm_timeout: int = Field(default=60)
    llm_max_retries: int = Field(default=3)
    llm_retry_delay_seconds: float = Field(default=1.0)
    llm_retry_auth_errors: bool = Field(
        default=True,
        description="Retry 401/403 provider errors like any other failure; False stops after the first attempt"
    )

    # Content enrichment
    youtube_api_key: Optional[str] = Field(default=None)
    youtube_api_url: str = Field(default="https://www.googleapis.com/youtube/v3")
    google_search_api_key: Optional[str] = Field(default=None)
    google_search_engine_id: Optional[str] = Field(default=None)
    google_search_api_url: str = Field(default="https://www.googleapis.com/customsearch/v1")
    http_timeout: float = Field(default=10.0)
    enrichment_video_results: int = Field(default=3)
    enrichment_max_subtopics: int = Field(default=3)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("llm_temperature")
    def validate_temperature(cls, v):
        if not 0 <= v <= 2:
            raise ValueError("temperature must be between 0 and 2")
        return v

    @field_validator("llm_max_retries")
    def validate_max_retries(cls, v):
        if v < 1:
            raise ValueError("llm_max_retries must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def article_search_configured(self) -> bool:
        return bool(self.google_search_api_key and self.google_search_engine_id)


def get_settings() -> Settings:
    """
    Build settings from the current environment.

    Credentials are looked up through this on every external call so they
    can be supplied or revoked without a restart.
    """
    return Settings()


# Create global settings instance
settings = Settings()
