"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Central settings for provider keys, pipeline tuning and the HTTP surface."""

    # --- Completion provider ---
    # "openai"    → OpenAI chat completions REST API
    # "anthropic" → Anthropic messages API via the Python SDK
    # "template"  → deterministic canned responses (offline demo, tests)
    llm_provider: str = Field(default="openai", alias="LLM_PROVIDER")

    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", alias="OPENAI_BASE_URL"
    )
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")

    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514", alias="ANTHROPIC_MODEL"
    )

    # Upper bound on a single completion call; a timeout fails the stage
    provider_timeout_seconds: float = Field(
        default=45.0, alias="PROVIDER_TIMEOUT_SECONDS"
    )

    # --- Pipeline ---
    creator_pacing_seconds: float = Field(
        default=0.2, alias="CREATOR_PACING_SECONDS"
    )
    pipeline_workers: int = Field(default=4, alias="PIPELINE_WORKERS")

    # --- Store eviction (0 disables the sweep) ---
    campaign_ttl_minutes: int = Field(default=1440, alias="CAMPAIGN_TTL_MINUTES")
    eviction_interval_minutes: int = Field(
        default=15, alias="EVICTION_INTERVAL_MINUTES"
    )

    # --- App ---
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ORIGINS",
    )
    app_env: str = Field(default="development", alias="APP_ENV")

    model_config = {"env_file": ".env", "extra": "ignore", "populate_by_name": True}

    @property
    def provider_configured(self) -> bool:
        """Whether the selected provider has the credentials it needs."""
        if self.llm_provider == "openai":
            return bool(self.openai_api_key)
        if self.llm_provider == "anthropic":
            return bool(self.anthropic_api_key)
        return True


settings = Settings()
