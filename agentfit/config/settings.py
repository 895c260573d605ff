"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "AgentFit"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # OpenRouter-compatible completion endpoint
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_completions_path: str = "/chat/completions"
    openrouter_app_url: str = "http://localhost:3000"
    openrouter_app_title: str = "AgentFit Assistant"

    # Model defaults
    default_model: str = "openai/gpt-5-mini"
    default_temperature: float = 0.3
    default_max_tokens: int = 2000

    # Output ceilings per role (agents stay below orchestration)
    agent_max_tokens: int = 1000
    orchestration_max_tokens: int = 2000
    tailoring_agent_max_tokens: int = 1500
    tailoring_orchestration_max_tokens: int = 2000

    # Transport and retry policy
    request_timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    # Pricing (USD per million tokens)
    prompt_price_per_million: float = 0.25
    completion_price_per_million: float = 2.0
    cached_prompt_discount: float = 0.9

    # Aggregation tuning
    score_divergence_threshold: float = 25.0
    fallback_technical_skills_score: int = Field(default=45, ge=0, le=100)
    fallback_experience_depth_score: int = Field(default=45, ge=0, le=100)
    fallback_achievements_score: int = Field(default=40, ge=0, le=100)
    fallback_education_score: int = Field(default=45, ge=0, le=100)
    fallback_soft_skills_score: int = Field(default=45, ge=0, le=100)
    fallback_career_progression_score: int = Field(default=45, ge=0, le=100)
    missing_agent_score: int = Field(default=45, ge=0, le=100)
    red_flag_threshold: int = 40
    positive_indicator_threshold: int = 80
    max_tailored_document_chars: int = 12000

    # Result cache (empty cache_dir keeps entries in memory)
    cache_dir: str = ""
    cache_ttl_resume_default_days: int = 30
    cache_ttl_job_current_days: int = 7
    cache_ttl_resume_processing_days: int = 7
    cache_ttl_scoring_result_days: int = 1
    cache_ttl_agent_result_days: int = 1

    # Batch scoring
    max_concurrent_jobs: int = 3

    # Activity log
    activity_log_capacity: int = 1000

    # Langfuse observability
    langfuse_enabled: bool = False
    langfuse_secret_key: str = ""
    langfuse_public_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    def fallback_score_for(self, kind: str) -> int:
        """Conservative score assigned to a scoring agent that failed."""
        return getattr(self, f"fallback_{kind}_score", self.missing_agent_score)

    def cache_ttl_days(self, kind: str) -> int:
        """Retention period in days for a cache entry kind."""
        return getattr(self, f"cache_ttl_{kind}_days", self.cache_ttl_scoring_result_days)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
